import logging
from supabase import Client
from autodebate.modules.events.schemas import EventCreate, EventUpdate, EventResponse
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class EventService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_event_row(self, event_id: str) -> Dict[str, Any]:
        result = self.supabase.table("events")\
            .select("*")\
            .eq("id", event_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Event not found")
        return result.data

    def list_events(self, upcoming_only: bool = False, limit: int = 50, offset: int = 0) -> List[EventResponse]:
        """Events newest first, each with its gallery size"""
        try:
            query = self.supabase.table("events").select("*")
            if upcoming_only:
                query = query.gte("event_date", datetime.now(timezone.utc).date().isoformat())
            result = query.order("event_date", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()

            events = result.data or []
            counts: Dict[str, int] = {}
            if events:
                photos = self.supabase.table("photos")\
                    .select("event_id")\
                    .in_("event_id", [e["id"] for e in events])\
                    .execute()
                for photo in photos.data or []:
                    counts[photo["event_id"]] = counts.get(photo["event_id"], 0) + 1

            return [EventResponse(**e, photo_count=counts.get(e["id"], 0)) for e in events]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_event(self, event_id: str) -> EventResponse:
        try:
            event = self.get_event_row(event_id)
            photos = self.supabase.table("photos")\
                .select("id", count="exact")\
                .eq("event_id", event_id)\
                .execute()
            return EventResponse(**event, photo_count=photos.count or 0)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_event(self, event_data: EventCreate, user_id: str) -> EventResponse:
        try:
            result = self.supabase.table("events").insert({
                "title": event_data.title.strip(),
                "description": event_data.description,
                "event_date": event_data.event_date.isoformat(),
                "location": event_data.location,
                "created_by": user_id
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create event")

            logger.info(f"Event {result.data[0]['id']} created by {user_id}")
            return EventResponse(**result.data[0], photo_count=0)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_event(self, event_id: str, event_data: EventUpdate) -> EventResponse:
        try:
            update_data = event_data.model_dump(exclude_none=True)
            if "event_date" in update_data:
                update_data["event_date"] = event_data.event_date.isoformat()
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("events")\
                .update(update_data)\
                .eq("id", event_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Event not found")

            return EventResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_event(self, event_id: str) -> bool:
        try:
            result = self.supabase.table("events")\
                .delete()\
                .eq("id", event_id)\
                .execute()
            logger.info(f"Event {event_id} deleted")
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
