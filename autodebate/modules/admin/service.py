from supabase import Client
from autodebate.modules.admin.schemas import DashboardStats
from fastapi import HTTPException

COUNTED_TABLES = {
    "users": "profiles",
    "photos": "photos",
    "events": "events",
    "blog_posts": "blog_posts",
    "forum_threads": "forum_threads",
    "groups": "groups",
}


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _count(self, table: str, **filters) -> int:
        query = self.supabase.table(table).select("id", count="exact")
        for column, value in filters.items():
            query = query.eq(column, value)
        return query.execute().count or 0

    def dashboard_stats(self) -> DashboardStats:
        """Row counts for the admin panel overview"""
        try:
            stats = {key: self._count(table) for key, table in COUNTED_TABLES.items()}
            stats["pending_reports"] = self._count("reports", status="pending")
            return DashboardStats(**stats)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
