import logging
import time
from supabase import Client
from autodebate.config import settings
from autodebate.core.storage import BucketStorage, build_storage_path, is_image_file
from autodebate.modules.blog.schemas import (
    BlogPostCreate, BlogPostUpdate, BlogPostResponse, CommentCreate, CommentResponse
)
from autodebate.modules.gamification.service import GamificationService
from autodebate.modules.profiles.service import fetch_display_info
from typing import List, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)


class BlogService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_post_row(self, post_id: str) -> Dict[str, Any]:
        result = self.supabase.table("blog_posts")\
            .select("*")\
            .eq("id", post_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Post not found")
        return result.data

    def _with_authors(self, posts: List[Dict[str, Any]]) -> List[BlogPostResponse]:
        authors = fetch_display_info(self.supabase, [p["author_id"] for p in posts])
        return [BlogPostResponse(**p, author=authors.get(p["author_id"])) for p in posts]

    def list_posts(self, include_drafts: bool = False, limit: int = 20, offset: int = 0) -> List[BlogPostResponse]:
        """Published posts newest first; drafts too for the admin listing"""
        try:
            query = self.supabase.table("blog_posts").select("*")
            if not include_drafts:
                query = query.eq("published", True)
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return self._with_authors(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_post(self, post_id: str, include_drafts: bool = False) -> BlogPostResponse:
        """Drafts look like missing posts to everyone who may not manage the blog"""
        try:
            post = self.get_post_row(post_id)
            if not post.get("published") and not include_drafts:
                raise HTTPException(status_code=404, detail="Post not found")
            comments = self.supabase.table("comments")\
                .select("id", count="exact")\
                .eq("blog_post_id", post_id)\
                .execute()
            response = self._with_authors([post])[0]
            response.comments_count = comments.count or 0
            return response
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_post(self, post_data: BlogPostCreate, author_id: str) -> BlogPostResponse:
        try:
            result = self.supabase.table("blog_posts").insert({
                "title": post_data.title.strip(),
                "content": post_data.content,
                "excerpt": post_data.excerpt,
                "featured_image": post_data.featured_image,
                "published": post_data.published,
                "author_id": author_id
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create post")

            return self._with_authors(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_post(self, post_id: str, post_data: BlogPostUpdate) -> BlogPostResponse:
        try:
            update_data = post_data.model_dump(exclude_none=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("blog_posts")\
                .update(update_data)\
                .eq("id", post_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Post not found")

            return self._with_authors(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def set_published(self, post_id: str, published: bool) -> BlogPostResponse:
        logger.info(f"Blog post {post_id} published={published}")
        return self.update_post(post_id, BlogPostUpdate(published=published))

    def delete_post(self, post_id: str) -> bool:
        try:
            result = self.supabase.table("blog_posts")\
                .delete()\
                .eq("id", post_id)\
                .execute()
            logger.info(f"Blog post {post_id} deleted")
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    async def upload_featured_image(self, user_id: str, file: UploadFile) -> str:
        """Store an image in blog-images and return its public URL"""
        if not is_image_file(file.filename):
            raise HTTPException(status_code=400, detail="Featured image must be an image")
        content = await file.read()
        storage = BucketStorage(self.supabase, settings.blog_images_bucket)
        path = build_storage_path(user_id, "posts", file.filename, int(time.time() * 1000))
        try:
            storage.upload(path, content, file.content_type or "image/jpeg")
        except Exception as e:
            logger.error(f"Featured image upload failed: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Failed to upload image: {str(e)}")
        return storage.public_url(path)

    def list_comments(self, post_id: str, include_drafts: bool = False) -> List[CommentResponse]:
        try:
            post = self.get_post_row(post_id)
            if not post.get("published") and not include_drafts:
                raise HTTPException(status_code=404, detail="Post not found")
            result = self.supabase.table("comments")\
                .select("*")\
                .eq("blog_post_id", post_id)\
                .order("created_at", desc=False)\
                .execute()
            comments = result.data or []
            authors = fetch_display_info(self.supabase, [c["author_id"] for c in comments])
            return [CommentResponse(**c, author=authors.get(c["author_id"])) for c in comments]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_comment(self, post_id: str, comment: CommentCreate, author_id: str) -> CommentResponse:
        try:
            post = self.get_post_row(post_id)
            if not post.get("published"):
                raise HTTPException(status_code=404, detail="Post not found")

            result = self.supabase.table("comments").insert({
                "blog_post_id": post_id,
                "author_id": author_id,
                "content": comment.content.strip()
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add comment")

            GamificationService(self.supabase).award_points_quietly(
                author_id, "blog_comment", related_id=result.data[0]["id"], related_type="comment"
            )
            return CommentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_comment_row(self, comment_id: str) -> Dict[str, Any]:
        result = self.supabase.table("comments")\
            .select("*")\
            .eq("id", comment_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Comment not found")
        return result.data

    def delete_comment(self, comment_id: str) -> bool:
        try:
            result = self.supabase.table("comments")\
                .delete()\
                .eq("id", comment_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
