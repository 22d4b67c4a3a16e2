from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import datetime


class PhotoUpdate(BaseModel):
    caption: Optional[str] = None
    tags: Optional[List[str]] = None
    specs: Optional[Dict[str, str]] = None


class PhotoResponse(BaseModel):
    id: str
    storage_path: str
    thumbnail_path: Optional[str] = None
    thumbnail_url: Optional[str] = None
    caption: Optional[str] = None
    tags: List[str] = []
    specs: Dict[str, str] = {}
    likes_count: int = 0
    favorites_count: int = 0
    uploaded_by: str
    event_id: Optional[str] = None
    user_car_id: Optional[str] = None
    is_thumbnail: bool = False
    created_at: Optional[datetime] = None
    user_car: Optional[Dict[str, Any]] = None
    uploader: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class ThumbnailToggleResponse(BaseModel):
    photo: PhotoResponse
    thumbnail_count: int
    max_thumbnails: int


class ReactionResponse(BaseModel):
    photo_id: str
    active: bool
    count: int


class DownloadResponse(BaseModel):
    photo_id: str
    url: str
    expires_in: int


class SearchFacets(BaseModel):
    makes: List[str] = []
    models: List[str] = []
    tags: List[str] = []
