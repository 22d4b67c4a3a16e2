from fastapi import APIRouter, Depends, HTTPException
from autodebate.database.supabase_client import get_supabase
from autodebate.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GroupResponse, GroupMemberAdd, GroupMemberResponse,
    GroupMessageCreate, GroupMessageResponse, GroupPostCreate, GroupPostResponse
)
from autodebate.modules.groups.service import GroupService
from autodebate.core.dependencies import (
    get_viewer, get_optional_viewer, require_capability, check_group_member, check_group_admin
)
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(supabase: Client = Depends(get_supabase)) -> GroupService:
    return GroupService(supabase)


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    limit: int = 50,
    offset: int = 0,
    viewer: Dict = Depends(get_optional_viewer),
    service: GroupService = Depends(get_group_service)
):
    return service.list_groups(user_id=viewer["id"], limit=limit, offset=offset)


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    group_data: GroupCreate,
    viewer: Dict = Depends(require_capability("groups:create")),
    service: GroupService = Depends(get_group_service)
):
    return service.create_group(group_data, viewer["id"])


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: str,
    viewer: Dict = Depends(get_optional_viewer),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    """Group details, including the realtime channel to subscribe to"""
    group = service.get_group(group_id, viewer["id"])
    if group.is_private and not group.is_member:
        if viewer["id"] is None:
            raise HTTPException(status_code=404, detail="Group not found")
        check_group_member(group_id, viewer, supabase)
    return group


@router.put("/{group_id}", response_model=GroupResponse)
async def update_group(
    group_id: str,
    group_data: GroupUpdate,
    viewer: Dict = Depends(get_viewer),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    check_group_admin(group_id, viewer, supabase)
    return service.update_group(group_id, group_data)


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    viewer: Dict = Depends(get_viewer),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    check_group_admin(group_id, viewer, supabase)
    if not service.delete_group(group_id):
        raise HTTPException(status_code=404, detail="Group not found")


@router.post("/{group_id}/join", response_model=GroupResponse)
async def join_group(
    group_id: str,
    viewer: Dict = Depends(get_viewer),
    service: GroupService = Depends(get_group_service)
):
    return service.join_group(group_id, viewer["id"])


@router.post("/{group_id}/leave", response_model=GroupResponse)
async def leave_group(
    group_id: str,
    viewer: Dict = Depends(get_viewer),
    service: GroupService = Depends(get_group_service)
):
    return service.leave_group(group_id, viewer["id"])


@router.get("/{group_id}/members", response_model=List[GroupMemberResponse])
async def list_members(
    group_id: str,
    viewer: Dict = Depends(get_viewer),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    check_group_member(group_id, viewer, supabase)
    return service.list_members(group_id)


@router.post("/{group_id}/members", response_model=GroupMemberResponse, status_code=201)
async def add_member(
    group_id: str,
    member: GroupMemberAdd,
    viewer: Dict = Depends(get_viewer),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    """Add a user to the group (group admin)"""
    check_group_admin(group_id, viewer, supabase)
    return service.add_member(group_id, member)


@router.get("/{group_id}/messages", response_model=List[GroupMessageResponse])
async def list_messages(
    group_id: str,
    since: Optional[str] = None,
    limit: int = 100,
    viewer: Dict = Depends(get_viewer),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    """Chat history; pass since=<last created_at seen> to backfill after a reconnect"""
    check_group_member(group_id, viewer, supabase)
    return service.list_messages(group_id, since=since, limit=limit)


@router.post("/{group_id}/messages", response_model=GroupMessageResponse, status_code=201)
async def send_message(
    group_id: str,
    message: GroupMessageCreate,
    viewer: Dict = Depends(get_viewer),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    check_group_member(group_id, viewer, supabase)
    return service.send_message(group_id, message, viewer["id"])


@router.get("/{group_id}/posts", response_model=List[GroupPostResponse])
async def list_posts(
    group_id: str,
    since: Optional[str] = None,
    limit: int = 50,
    viewer: Dict = Depends(get_viewer),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    check_group_member(group_id, viewer, supabase)
    return service.list_posts(group_id, since=since, limit=limit)


@router.post("/{group_id}/posts", response_model=GroupPostResponse, status_code=201)
async def create_post(
    group_id: str,
    post: GroupPostCreate,
    viewer: Dict = Depends(get_viewer),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    check_group_member(group_id, viewer, supabase)
    return service.create_post(group_id, post, viewer["id"])
