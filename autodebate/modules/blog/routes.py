from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from autodebate.database.supabase_client import get_supabase
from autodebate.modules.blog.schemas import (
    BlogPostCreate, BlogPostUpdate, BlogPostResponse, PublishRequest, CommentCreate, CommentResponse
)
from autodebate.modules.blog.service import BlogService
from autodebate.core.dependencies import get_viewer, get_optional_viewer, require_capability, ensure_can_edit
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/blog", tags=["blog"])


def get_blog_service(supabase: Client = Depends(get_supabase)) -> BlogService:
    return BlogService(supabase)


@router.get("/posts", response_model=List[BlogPostResponse])
async def list_published_posts(
    limit: int = 20,
    offset: int = 0,
    service: BlogService = Depends(get_blog_service)
):
    """Public listing: published posts only"""
    return service.list_posts(limit=limit, offset=offset)


@router.get("/admin/posts", response_model=List[BlogPostResponse])
async def list_all_posts(
    limit: int = 50,
    offset: int = 0,
    viewer: Dict = Depends(require_capability("blog:manage")),
    service: BlogService = Depends(get_blog_service)
):
    """Drafts and published posts (admin)"""
    return service.list_posts(include_drafts=True, limit=limit, offset=offset)


@router.post("/posts", response_model=BlogPostResponse, status_code=201)
async def create_post(
    post_data: BlogPostCreate,
    viewer: Dict = Depends(require_capability("blog:manage")),
    service: BlogService = Depends(get_blog_service)
):
    return service.create_post(post_data, viewer["id"])


@router.post("/images")
async def upload_featured_image(
    file: UploadFile = File(...),
    viewer: Dict = Depends(require_capability("blog:manage")),
    service: BlogService = Depends(get_blog_service)
):
    """Upload a featured image; returns the public URL to store on the post"""
    url = await service.upload_featured_image(viewer["id"], file)
    return {"url": url}


@router.get("/posts/{post_id}", response_model=BlogPostResponse)
async def get_post(
    post_id: str,
    viewer: Dict = Depends(get_optional_viewer),
    service: BlogService = Depends(get_blog_service)
):
    return service.get_post(post_id, include_drafts=viewer["access"].has("blog:manage"))


@router.put("/posts/{post_id}", response_model=BlogPostResponse)
async def update_post(
    post_id: str,
    post_data: BlogPostUpdate,
    viewer: Dict = Depends(require_capability("blog:manage")),
    service: BlogService = Depends(get_blog_service)
):
    return service.update_post(post_id, post_data)


@router.put("/posts/{post_id}/publish", response_model=BlogPostResponse)
async def set_published(
    post_id: str,
    publish: PublishRequest,
    viewer: Dict = Depends(require_capability("blog:manage")),
    service: BlogService = Depends(get_blog_service)
):
    """Publish or unpublish a post"""
    return service.set_published(post_id, publish.published)


@router.delete("/posts/{post_id}", status_code=204)
async def delete_post(
    post_id: str,
    viewer: Dict = Depends(require_capability("blog:manage")),
    service: BlogService = Depends(get_blog_service)
):
    if not service.delete_post(post_id):
        raise HTTPException(status_code=404, detail="Post not found")


@router.get("/posts/{post_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    post_id: str,
    viewer: Dict = Depends(get_optional_viewer),
    service: BlogService = Depends(get_blog_service)
):
    return service.list_comments(post_id, include_drafts=viewer["access"].has("blog:manage"))


@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(
    post_id: str,
    comment: CommentCreate,
    viewer: Dict = Depends(require_capability("blog:comment")),
    service: BlogService = Depends(get_blog_service)
):
    return service.add_comment(post_id, comment, viewer["id"])


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: str,
    viewer: Dict = Depends(get_viewer),
    service: BlogService = Depends(get_blog_service)
):
    """Delete a comment (author or admin)"""
    comment = service.get_comment_row(comment_id)
    ensure_can_edit(viewer, comment["author_id"], "comment")
    if not service.delete_comment(comment_id):
        raise HTTPException(status_code=404, detail="Comment not found")
