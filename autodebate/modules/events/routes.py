from fastapi import APIRouter, Depends, HTTPException
from autodebate.database.supabase_client import get_supabase
from autodebate.modules.events.schemas import EventCreate, EventUpdate, EventResponse
from autodebate.modules.events.service import EventService
from autodebate.core.dependencies import get_viewer, require_capability, ensure_can_edit
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(supabase: Client = Depends(get_supabase)) -> EventService:
    return EventService(supabase)


@router.get("", response_model=List[EventResponse])
async def list_events(
    upcoming_only: bool = False,
    limit: int = 50,
    offset: int = 0,
    service: EventService = Depends(get_event_service)
):
    return service.list_events(upcoming_only=upcoming_only, limit=limit, offset=offset)


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    event_data: EventCreate,
    viewer: Dict = Depends(require_capability("events:create")),
    service: EventService = Depends(get_event_service)
):
    """Create an event gallery (copiloto or admin)"""
    return service.create_event(event_data, viewer["id"])


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    service: EventService = Depends(get_event_service)
):
    return service.get_event(event_id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    event_data: EventUpdate,
    viewer: Dict = Depends(get_viewer),
    service: EventService = Depends(get_event_service)
):
    """Update event (creator or admin)"""
    event = service.get_event_row(event_id)
    ensure_can_edit(viewer, event["created_by"], "event")
    return service.update_event(event_id, event_data)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    viewer: Dict = Depends(get_viewer),
    service: EventService = Depends(get_event_service)
):
    event = service.get_event_row(event_id)
    ensure_can_edit(viewer, event["created_by"], "event")
    if not service.delete_event(event_id):
        raise HTTPException(status_code=404, detail="Event not found")
