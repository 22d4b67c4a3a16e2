import pytest

from autodebate.core.realtime import channel_name, latest_timestamp, merge_by_id


def test_channel_names():
    assert channel_name("group", "g1") == "group-g1"
    assert channel_name("conversation", "c1") == "conversation-c1"
    with pytest.raises(ValueError):
        channel_name("events", "e1")


def test_backfill_merge_drops_duplicates_and_orders():
    held = [
        {"id": "m1", "created_at": "2024-05-01T12:00:01+00:00"},
        {"id": "m3", "created_at": "2024-05-01T12:00:03+00:00"},
    ]
    backfill = [
        {"id": "m2", "created_at": "2024-05-01T12:00:02+00:00"},
        {"id": "m3", "created_at": "2024-05-01T12:00:03+00:00"},
    ]
    merged = merge_by_id(held, backfill)
    assert [m["id"] for m in merged] == ["m1", "m2", "m3"]
    assert len(held) == 2 and len(backfill) == 2


def test_merge_is_idempotent():
    rows = [{"id": "a", "created_at": "1"}, {"id": "b", "created_at": "2"}]
    assert merge_by_id(rows, rows) == rows
    assert merge_by_id(merge_by_id(rows, rows), rows) == rows


def test_latest_timestamp():
    assert latest_timestamp([]) is None
    assert latest_timestamp([{"created_at": "2024-01-02"}, {"created_at": "2024-01-03"}, {}]) == "2024-01-03"
