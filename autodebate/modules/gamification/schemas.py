from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime


class AchievementResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: Optional[str] = None
    type: str
    points: Optional[int] = None
    requirements: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserAchievementResponse(BaseModel):
    id: str
    user_id: str
    achievement_id: str
    earned_at: datetime
    achievement: Optional[AchievementResponse] = None

    class Config:
        from_attributes = True


class AwardAchievementRequest(BaseModel):
    user_id: str
    achievement_id: str


class LeaderboardEntry(BaseModel):
    id: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    points: Optional[int] = None
    level: Optional[int] = None
