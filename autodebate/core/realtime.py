"""Realtime channel names and reconnect backfill merging.

Live delivery is Supabase Realtime. After a dropped connection a client asks
for rows newer than the last timestamp it saw, merges them with what it
already holds, and resumes the subscription. Merging is keyed on the primary
key, so a row that arrives both through the backfill and the live channel is
kept once.
"""

from typing import Any, Dict, Iterable, List, Optional

CHANNEL_KINDS = ("group", "conversation")


def channel_name(kind: str, resource_id: str) -> str:
    if kind not in CHANNEL_KINDS:
        raise ValueError(f"Unknown channel kind: {kind}")
    return f"{kind}-{resource_id}"


def merge_by_id(existing: Iterable[Dict[str, Any]], incoming: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Append incoming rows whose id has not been seen, then order by created_at.

    Neither input is modified. Rows without created_at sort first, ties keep
    arrival order.
    """
    merged: List[Dict[str, Any]] = []
    seen = set()
    for row in list(existing) + list(incoming):
        row_id = row.get("id")
        if row_id in seen:
            continue
        seen.add(row_id)
        merged.append(row)
    return sorted(merged, key=lambda r: str(r.get("created_at") or ""))


def latest_timestamp(rows: Iterable[Dict[str, Any]]) -> Optional[str]:
    stamps = [str(r["created_at"]) for r in rows if r.get("created_at")]
    return max(stamps) if stamps else None
