from fastapi import APIRouter, Depends, HTTPException
from autodebate.database.supabase_client import get_supabase
from autodebate.modules.forum.schemas import (
    CategoryCreate, CategoryResponse, ThreadCreate, ThreadUpdate, ThreadResponse,
    ThreadDetailResponse, ReplyCreate, ReplyResponse, PinRequest, ReplyLikeResponse
)
from autodebate.modules.forum.service import ForumService
from autodebate.core.dependencies import get_viewer, require_capability, ensure_can_edit
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/forum", tags=["forum"])


def get_forum_service(supabase: Client = Depends(get_supabase)) -> ForumService:
    return ForumService(supabase)


# Category endpoints
@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(service: ForumService = Depends(get_forum_service)):
    return service.list_categories()


@router.post("/categories", response_model=CategoryResponse, status_code=201)
async def create_category(
    category: CategoryCreate,
    viewer: Dict = Depends(require_capability("forum:manage_categories")),
    service: ForumService = Depends(get_forum_service)
):
    return service.create_category(category)


# Thread endpoints
@router.get("/threads", response_model=List[ThreadResponse])
async def list_threads(
    category_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    service: ForumService = Depends(get_forum_service)
):
    """Threads with reply counts; pinned threads come first"""
    return service.list_threads(category_id=category_id, limit=limit, offset=offset)


@router.post("/threads", response_model=ThreadResponse, status_code=201)
async def create_thread(
    thread_data: ThreadCreate,
    viewer: Dict = Depends(require_capability("forum:post")),
    service: ForumService = Depends(get_forum_service)
):
    return service.create_thread(thread_data, viewer["id"])


@router.get("/threads/{thread_id}", response_model=ThreadDetailResponse)
async def get_thread(
    thread_id: str,
    service: ForumService = Depends(get_forum_service)
):
    """Thread with its replies nested under their parent"""
    return service.get_thread(thread_id)


@router.put("/threads/{thread_id}", response_model=ThreadResponse)
async def update_thread(
    thread_id: str,
    thread_data: ThreadUpdate,
    viewer: Dict = Depends(get_viewer),
    service: ForumService = Depends(get_forum_service)
):
    thread = service.get_thread_row(thread_id)
    ensure_can_edit(viewer, thread["author_id"], "thread")
    return service.update_thread(thread_id, thread_data)


@router.put("/threads/{thread_id}/pin", response_model=ThreadResponse)
async def pin_thread(
    thread_id: str,
    pin: PinRequest,
    viewer: Dict = Depends(require_capability("forum:moderate")),
    service: ForumService = Depends(get_forum_service)
):
    return service.set_pinned(thread_id, pin.pinned)


@router.delete("/threads/{thread_id}", status_code=204)
async def delete_thread(
    thread_id: str,
    viewer: Dict = Depends(get_viewer),
    service: ForumService = Depends(get_forum_service)
):
    """Delete thread (author or admin)"""
    thread = service.get_thread_row(thread_id)
    ensure_can_edit(viewer, thread["author_id"], "thread")
    if not service.delete_thread(thread_id):
        raise HTTPException(status_code=404, detail="Thread not found")


# Reply endpoints
@router.post("/threads/{thread_id}/replies", response_model=ReplyResponse, status_code=201)
async def create_reply(
    thread_id: str,
    reply_data: ReplyCreate,
    viewer: Dict = Depends(require_capability("forum:post")),
    service: ForumService = Depends(get_forum_service)
):
    return service.create_reply(thread_id, reply_data, viewer["id"])


@router.delete("/replies/{reply_id}", status_code=204)
async def delete_reply(
    reply_id: str,
    viewer: Dict = Depends(get_viewer),
    service: ForumService = Depends(get_forum_service)
):
    reply = service.get_reply_row(reply_id)
    ensure_can_edit(viewer, reply["author_id"], "reply")
    if not service.delete_reply(reply_id):
        raise HTTPException(status_code=404, detail="Reply not found")


@router.post("/replies/{reply_id}/like", response_model=ReplyLikeResponse)
async def toggle_reply_like(
    reply_id: str,
    viewer: Dict = Depends(get_viewer),
    service: ForumService = Depends(get_forum_service)
):
    return service.toggle_reply_like(reply_id, viewer["id"])
