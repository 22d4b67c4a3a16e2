from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime


class EventCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    event_date: date
    location: Optional[str] = None


class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[date] = None
    location: Optional[str] = None


class EventResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    event_date: date
    location: Optional[str] = None
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    photo_count: Optional[int] = None

    class Config:
        from_attributes = True
