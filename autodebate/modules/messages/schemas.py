from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class ConversationCreate(BaseModel):
    user_id: str


class ConversationResponse(BaseModel):
    id: str
    participant_1: str
    participant_2: str
    other_user: Optional[Dict[str, Any]] = None
    last_message_at: Optional[datetime] = None
    last_message: Optional[str] = None
    unread_count: int = 0
    channel: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageCreate(BaseModel):
    content: str = Field(min_length=1)
    message_type: str = "text"


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    content: str
    message_type: str = "text"
    read_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class MarkReadResponse(BaseModel):
    conversation_id: str
    marked: int
