from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CarCreate(BaseModel):
    make: str = Field(min_length=1)
    model: str = Field(min_length=1)
    year: Optional[int] = Field(default=None, ge=1885, le=2100)
    description: Optional[str] = None
    is_current: bool = True


class CarUpdate(BaseModel):
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1885, le=2100)
    description: Optional[str] = None
    is_current: Optional[bool] = None


class CarResponse(BaseModel):
    id: str
    user_id: str
    make: str
    model: str
    year: Optional[int] = None
    description: Optional[str] = None
    is_current: Optional[bool] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FavoriteCarCreate(BaseModel):
    make: str = Field(min_length=1)
    model: str = Field(min_length=1)
    year: Optional[int] = Field(default=None, ge=1885, le=2100)


class FavoriteCarResponse(BaseModel):
    id: str
    user_id: str
    make: str
    model: str
    year: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
