from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class BlogPostCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    published: bool = False


class BlogPostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    published: Optional[bool] = None


class BlogPostResponse(BaseModel):
    id: str
    title: str
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    published: bool = False
    author_id: str
    author: Optional[Dict[str, Any]] = None
    comments_count: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublishRequest(BaseModel):
    published: bool


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)


class CommentResponse(BaseModel):
    id: str
    blog_post_id: str
    author_id: str
    content: str
    author: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True
