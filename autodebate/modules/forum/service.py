import logging
from supabase import Client
from autodebate.modules.forum.schemas import (
    CategoryCreate, CategoryResponse, ThreadCreate, ThreadUpdate, ThreadResponse,
    ThreadDetailResponse, ReplyCreate, ReplyResponse, ReplyLikeResponse
)
from autodebate.modules.gamification.service import GamificationService
from autodebate.modules.profiles.service import fetch_display_info
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def nest_replies(replies: List[ReplyResponse]) -> List[ReplyResponse]:
    """Top-level replies in order, each holding its direct answers"""
    by_id = {r.id: r for r in replies}
    roots = []
    for reply in replies:
        parent = by_id.get(reply.parent_reply_id) if reply.parent_reply_id else None
        if parent is not None:
            parent.children.append(reply)
        else:
            roots.append(reply)
    return roots


class ForumService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Categories
    def list_categories(self) -> List[CategoryResponse]:
        try:
            categories = self.supabase.table("forum_categories")\
                .select("*")\
                .order("name", desc=False)\
                .execute().data or []
            threads = self.supabase.table("forum_threads")\
                .select("category_id")\
                .execute().data or []
            counts: Dict[str, int] = {}
            for thread in threads:
                if thread.get("category_id"):
                    counts[thread["category_id"]] = counts.get(thread["category_id"], 0) + 1
            return [CategoryResponse(**c, thread_count=counts.get(c["id"], 0)) for c in categories]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_category(self, category: CategoryCreate) -> CategoryResponse:
        try:
            existing = self.supabase.table("forum_categories")\
                .select("id")\
                .eq("name", category.name.strip())\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="Category already exists")

            result = self.supabase.table("forum_categories").insert({
                "name": category.name.strip(),
                "description": category.description,
                "color": category.color,
                "icon": category.icon
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create category")
            return CategoryResponse(**result.data[0], thread_count=0)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Threads
    def get_thread_row(self, thread_id: str) -> Dict[str, Any]:
        result = self.supabase.table("forum_threads")\
            .select("*")\
            .eq("id", thread_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Thread not found")
        return result.data

    def _reply_counts(self, thread_ids: List[str]) -> Dict[str, int]:
        if not thread_ids:
            return {}
        rows = self.supabase.table("forum_replies")\
            .select("thread_id")\
            .in_("thread_id", thread_ids)\
            .execute().data or []
        counts: Dict[str, int] = {}
        for row in rows:
            counts[row["thread_id"]] = counts.get(row["thread_id"], 0) + 1
        return counts

    def list_threads(self, category_id: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[ThreadResponse]:
        """Pinned threads first, then newest first"""
        try:
            query = self.supabase.table("forum_threads").select("*")
            if category_id:
                query = query.eq("category_id", category_id)
            threads = query.order("pinned", desc=True)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute().data or []

            counts = self._reply_counts([t["id"] for t in threads])
            authors = fetch_display_info(self.supabase, [t["author_id"] for t in threads])
            return [
                ThreadResponse(**t, author=authors.get(t["author_id"]), reply_count=counts.get(t["id"], 0))
                for t in threads
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_thread(self, thread_id: str) -> ThreadDetailResponse:
        try:
            thread = self.get_thread_row(thread_id)
            replies = self.list_replies(thread_id)
            authors = fetch_display_info(self.supabase, [thread["author_id"]])
            return ThreadDetailResponse(
                **thread,
                author=authors.get(thread["author_id"]),
                reply_count=len(replies),
                replies=nest_replies(replies)
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_thread(self, thread_data: ThreadCreate, author_id: str) -> ThreadResponse:
        try:
            result = self.supabase.table("forum_threads").insert({
                "title": thread_data.title.strip(),
                "content": thread_data.content,
                "category_id": thread_data.category_id,
                "author_id": author_id,
                "pinned": False
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create thread")

            GamificationService(self.supabase).award_points_quietly(
                author_id, "forum_thread", related_id=result.data[0]["id"], related_type="forum_thread"
            )
            return ThreadResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_thread(self, thread_id: str, thread_data: ThreadUpdate) -> ThreadResponse:
        try:
            update_data = thread_data.model_dump(exclude_none=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("forum_threads")\
                .update(update_data)\
                .eq("id", thread_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Thread not found")
            return ThreadResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def set_pinned(self, thread_id: str, pinned: bool) -> ThreadResponse:
        try:
            result = self.supabase.table("forum_threads")\
                .update({"pinned": pinned})\
                .eq("id", thread_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Thread not found")
            logger.info(f"Thread {thread_id} pinned={pinned}")
            return ThreadResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_thread(self, thread_id: str) -> bool:
        try:
            result = self.supabase.table("forum_threads")\
                .delete()\
                .eq("id", thread_id)\
                .execute()
            logger.info(f"Thread {thread_id} deleted")
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Replies
    def list_replies(self, thread_id: str) -> List[ReplyResponse]:
        try:
            rows = self.supabase.table("forum_replies")\
                .select("*")\
                .eq("thread_id", thread_id)\
                .order("created_at", desc=False)\
                .execute().data or []
            authors = fetch_display_info(self.supabase, [r["author_id"] for r in rows])
            return [ReplyResponse(**r, author=authors.get(r["author_id"])) for r in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_reply_row(self, reply_id: str) -> Dict[str, Any]:
        result = self.supabase.table("forum_replies")\
            .select("*")\
            .eq("id", reply_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Reply not found")
        return result.data

    def create_reply(self, thread_id: str, reply_data: ReplyCreate, author_id: str) -> ReplyResponse:
        """Answer a thread, or a top-level reply of the same thread"""
        try:
            self.get_thread_row(thread_id)
            if reply_data.parent_reply_id:
                parent = self.get_reply_row(reply_data.parent_reply_id)
                if parent["thread_id"] != thread_id:
                    raise HTTPException(status_code=400, detail="Parent reply belongs to another thread")
                if parent.get("parent_reply_id"):
                    raise HTTPException(status_code=400, detail="Replies can only be nested one level")

            result = self.supabase.table("forum_replies").insert({
                "thread_id": thread_id,
                "author_id": author_id,
                "content": reply_data.content.strip(),
                "parent_reply_id": reply_data.parent_reply_id,
                "likes_count": 0
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create reply")

            GamificationService(self.supabase).award_points_quietly(
                author_id, "forum_reply", related_id=result.data[0]["id"], related_type="forum_reply"
            )
            return ReplyResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_reply(self, reply_id: str) -> bool:
        try:
            result = self.supabase.table("forum_replies")\
                .delete()\
                .eq("id", reply_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def toggle_reply_like(self, reply_id: str, user_id: str) -> ReplyLikeResponse:
        try:
            self.get_reply_row(reply_id)
            existing = self.supabase.table("forum_reply_likes")\
                .select("id")\
                .eq("reply_id", reply_id)\
                .eq("user_id", user_id)\
                .execute()
            if existing.data:
                self.supabase.table("forum_reply_likes")\
                    .delete()\
                    .eq("reply_id", reply_id)\
                    .eq("user_id", user_id)\
                    .execute()
                liked = False
            else:
                self.supabase.table("forum_reply_likes").insert({
                    "reply_id": reply_id,
                    "user_id": user_id
                }).execute()
                liked = True

            count = self.supabase.table("forum_reply_likes")\
                .select("id", count="exact")\
                .eq("reply_id", reply_id)\
                .execute().count or 0
            self.supabase.table("forum_replies")\
                .update({"likes_count": count})\
                .eq("id", reply_id)\
                .execute()
            return ReplyLikeResponse(reply_id=reply_id, liked=liked, likes_count=count)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
