from pydantic import BaseModel, field_validator
from typing import Optional, List, Dict, Any
from datetime import date, datetime


class PrivacySettings(BaseModel):
    show_cars: bool = True
    show_activity: bool = True
    show_location: bool = True


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    bio: Optional[str] = None
    birth_date: Optional[date] = None
    city: Optional[str] = None
    country: Optional[str] = None
    avatar_url: Optional[str] = None
    social_links: Optional[Dict[str, str]] = None
    privacy_settings: Optional[PrivacySettings] = None

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("username is required")
        return v.strip() if v is not None else v


class Visibility(BaseModel):
    cars: bool = True
    location: bool = True
    activity: bool = True


class ProfileResponse(BaseModel):
    id: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    points: Optional[int] = None
    level: Optional[int] = None
    social_links: Optional[Dict[str, Any]] = None
    privacy_settings: Optional[PrivacySettings] = None  # owner only
    visibility: Visibility = Visibility()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CommunityProfileResponse(ProfileResponse):
    cars: List[dict] = []


class ShowroomResponse(BaseModel):
    profile: ProfileResponse
    cars: List[dict] = []
    favorite_cars: List[dict] = []
    achievements: List[dict] = []
    photos: List[dict] = []
