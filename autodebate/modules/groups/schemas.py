from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class GroupCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    theme: Optional[str] = None
    is_private: bool = False


class GroupUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    theme: Optional[str] = None
    is_private: Optional[bool] = None


class GroupResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    theme: Optional[str] = None
    is_private: bool = False
    member_count: int = 0
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    channel: Optional[str] = None
    is_member: Optional[bool] = None

    class Config:
        from_attributes = True


class GroupMemberAdd(BaseModel):
    user_id: str
    role: str = "member"


class GroupMemberResponse(BaseModel):
    id: str
    group_id: str
    user_id: str
    role: str
    joined_at: Optional[datetime] = None
    profile: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class GroupMessageCreate(BaseModel):
    content: str = Field(min_length=1)
    message_type: str = "text"


class GroupMessageResponse(BaseModel):
    id: str
    group_id: str
    sender_id: str
    sender: Optional[Dict[str, Any]] = None
    content: str
    message_type: str = "text"
    created_at: datetime

    class Config:
        from_attributes = True


class GroupPostCreate(BaseModel):
    title: Optional[str] = None
    content: str = Field(min_length=1)


class GroupPostResponse(BaseModel):
    id: str
    group_id: str
    author_id: str
    author: Optional[Dict[str, Any]] = None
    title: Optional[str] = None
    content: str
    likes_count: int = 0
    comments_count: int = 0
    created_at: datetime

    class Config:
        from_attributes = True
