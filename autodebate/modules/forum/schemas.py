from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    thread_count: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ThreadCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category_id: Optional[str] = None


class ThreadUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category_id: Optional[str] = None


class ThreadResponse(BaseModel):
    id: str
    title: str
    content: str
    category_id: Optional[str] = None
    author_id: str
    author: Optional[Dict[str, Any]] = None
    pinned: bool = False
    reply_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReplyCreate(BaseModel):
    content: str = Field(min_length=1)
    parent_reply_id: Optional[str] = None


class ReplyResponse(BaseModel):
    id: str
    thread_id: str
    author_id: str
    author: Optional[Dict[str, Any]] = None
    content: str
    parent_reply_id: Optional[str] = None
    likes_count: int = 0
    created_at: datetime
    children: List["ReplyResponse"] = []

    class Config:
        from_attributes = True


class ThreadDetailResponse(ThreadResponse):
    replies: List[ReplyResponse] = []


class PinRequest(BaseModel):
    pinned: bool


class ReplyLikeResponse(BaseModel):
    reply_id: str
    liked: bool
    likes_count: int
