from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

REPORT_STATUSES = ("pending", "resolved", "dismissed")
REPORTABLE_TYPES = ("photo", "forum_thread", "forum_reply", "comment", "group_post", "message", "profile")


class ReportCreate(BaseModel):
    reported_content_type: str
    reported_content_id: str
    reason: str = Field(min_length=1)
    description: Optional[str] = None

    @field_validator("reported_content_type")
    @classmethod
    def known_type(cls, v: str) -> str:
        if v not in REPORTABLE_TYPES:
            raise ValueError(f"Cannot report content of type {v}")
        return v


class ReportResponse(BaseModel):
    id: str
    reporter_id: str
    reported_content_type: str
    reported_content_id: str
    reason: str
    description: Optional[str] = None
    status: str = "pending"
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ReportCounts(BaseModel):
    pending: int = 0
    resolved: int = 0
    dismissed: int = 0
