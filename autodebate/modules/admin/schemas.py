from pydantic import BaseModel


class DashboardStats(BaseModel):
    users: int = 0
    photos: int = 0
    events: int = 0
    blog_posts: int = 0
    forum_threads: int = 0
    groups: int = 0
    pending_reports: int = 0
