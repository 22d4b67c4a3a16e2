import logging
from supabase import Client
from autodebate.core.realtime import channel_name
from autodebate.modules.gamification.service import GamificationService
from autodebate.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GroupResponse, GroupMemberAdd, GroupMemberResponse,
    GroupMessageCreate, GroupMessageResponse, GroupPostCreate, GroupPostResponse
)
from autodebate.modules.profiles.service import fetch_display_info
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException

logger = logging.getLogger(__name__)

GROUP_ROLES = ("admin", "member")


class GroupService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def to_response(self, group: Dict[str, Any], is_member: Optional[bool] = None) -> GroupResponse:
        return GroupResponse(**group, channel=channel_name("group", group["id"]), is_member=is_member)

    def get_group_row(self, group_id: str) -> Dict[str, Any]:
        result = self.supabase.table("groups")\
            .select("*")\
            .eq("id", group_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Group not found")
        return result.data

    def _membership(self, group_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("group_members")\
            .select("*")\
            .eq("group_id", group_id)\
            .eq("user_id", user_id)\
            .execute()
        return result.data[0] if result.data else None

    def _recount_members(self, group_id: str) -> int:
        count = self.supabase.table("group_members")\
            .select("id", count="exact")\
            .eq("group_id", group_id)\
            .execute().count or 0
        self.supabase.table("groups")\
            .update({"member_count": count})\
            .eq("id", group_id)\
            .execute()
        return count

    def list_groups(self, user_id: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[GroupResponse]:
        """Groups by size; private groups are listed only to their members"""
        try:
            groups = self.supabase.table("groups")\
                .select("*")\
                .order("member_count", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute().data or []

            member_of = set()
            if user_id:
                rows = self.supabase.table("group_members")\
                    .select("group_id")\
                    .eq("user_id", user_id)\
                    .execute().data or []
                member_of = {r["group_id"] for r in rows}

            return [
                self.to_response(g, is_member=g["id"] in member_of if user_id else None)
                for g in groups
                if not g.get("is_private") or g["id"] in member_of
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_group(self, group_id: str, user_id: Optional[str] = None) -> GroupResponse:
        try:
            group = self.get_group_row(group_id)
            is_member = self._membership(group_id, user_id) is not None if user_id else None
            return self.to_response(group, is_member=is_member)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_group(self, group_data: GroupCreate, user_id: str) -> GroupResponse:
        """Create a group; the creator becomes its first admin member"""
        try:
            result = self.supabase.table("groups").insert({
                "name": group_data.name.strip(),
                "description": group_data.description,
                "avatar_url": group_data.avatar_url,
                "theme": group_data.theme,
                "is_private": group_data.is_private,
                "member_count": 1,
                "created_by": user_id
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create group")

            self.supabase.table("group_members").insert({
                "group_id": result.data[0]["id"],
                "user_id": user_id,
                "role": "admin"
            }).execute()

            logger.info(f"Group {result.data[0]['id']} created by {user_id}")
            return self.to_response(result.data[0], is_member=True)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_group(self, group_id: str, group_data: GroupUpdate) -> GroupResponse:
        try:
            update_data = group_data.model_dump(exclude_none=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("groups")\
                .update(update_data)\
                .eq("id", group_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Group not found")
            return self.to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_group(self, group_id: str) -> bool:
        try:
            result = self.supabase.table("groups")\
                .delete()\
                .eq("id", group_id)\
                .execute()
            logger.info(f"Group {group_id} deleted")
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Membership
    def join_group(self, group_id: str, user_id: str) -> GroupResponse:
        try:
            group = self.get_group_row(group_id)
            if group.get("is_private"):
                raise HTTPException(status_code=403, detail="This group is private")
            if self._membership(group_id, user_id):
                raise HTTPException(status_code=400, detail="Already a member of this group")

            self.supabase.table("group_members").insert({
                "group_id": group_id,
                "user_id": user_id,
                "role": "member"
            }).execute()
            group["member_count"] = self._recount_members(group_id)
            return self.to_response(group, is_member=True)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def leave_group(self, group_id: str, user_id: str) -> GroupResponse:
        try:
            group = self.get_group_row(group_id)
            if group["created_by"] == user_id:
                raise HTTPException(status_code=400, detail="The group creator cannot leave the group")
            result = self.supabase.table("group_members")\
                .delete()\
                .eq("group_id", group_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Not a member of this group")
            group["member_count"] = self._recount_members(group_id)
            return self.to_response(group, is_member=False)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_member(self, group_id: str, member: GroupMemberAdd) -> GroupMemberResponse:
        """Invite a user (group admins); the only way into a private group"""
        if member.role not in GROUP_ROLES:
            raise HTTPException(status_code=400, detail=f"Unknown group role: {member.role}")
        try:
            self.get_group_row(group_id)
            if self._membership(group_id, member.user_id):
                raise HTTPException(status_code=400, detail="User is already a member")
            result = self.supabase.table("group_members").insert({
                "group_id": group_id,
                "user_id": member.user_id,
                "role": member.role
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add member")
            self._recount_members(group_id)
            return GroupMemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_members(self, group_id: str) -> List[GroupMemberResponse]:
        try:
            rows = self.supabase.table("group_members")\
                .select("*")\
                .eq("group_id", group_id)\
                .order("joined_at", desc=False)\
                .execute().data or []
            profiles = fetch_display_info(self.supabase, [r["user_id"] for r in rows])
            return [GroupMemberResponse(**r, profile=profiles.get(r["user_id"])) for r in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Chat
    def list_messages(self, group_id: str, since: Optional[str] = None, limit: int = 100) -> List[GroupMessageResponse]:
        """Chat history oldest first; with since, only rows created after it (reconnect backfill)"""
        try:
            query = self.supabase.table("group_messages").select("*").eq("group_id", group_id)
            if since:
                query = query.gt("created_at", since)
            rows = query.order("created_at", desc=False).limit(limit).execute().data or []
            senders = fetch_display_info(self.supabase, [r["sender_id"] for r in rows])
            return [GroupMessageResponse(**r, sender=senders.get(r["sender_id"])) for r in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def send_message(self, group_id: str, message: GroupMessageCreate, sender_id: str) -> GroupMessageResponse:
        try:
            result = self.supabase.table("group_messages").insert({
                "group_id": group_id,
                "sender_id": sender_id,
                "content": message.content.strip(),
                "message_type": message.message_type
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to send message")
            return GroupMessageResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Posts
    def list_posts(self, group_id: str, since: Optional[str] = None, limit: int = 50) -> List[GroupPostResponse]:
        try:
            query = self.supabase.table("group_posts").select("*").eq("group_id", group_id)
            if since:
                query = query.gt("created_at", since).order("created_at", desc=False)
            else:
                query = query.order("created_at", desc=True)
            rows = query.limit(limit).execute().data or []
            authors = fetch_display_info(self.supabase, [r["author_id"] for r in rows])
            return [GroupPostResponse(**r, author=authors.get(r["author_id"])) for r in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_post(self, group_id: str, post: GroupPostCreate, author_id: str) -> GroupPostResponse:
        try:
            result = self.supabase.table("group_posts").insert({
                "group_id": group_id,
                "author_id": author_id,
                "title": post.title,
                "content": post.content,
                "likes_count": 0,
                "comments_count": 0
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create post")

            GamificationService(self.supabase).award_points_quietly(
                author_id, "group_post", related_id=result.data[0]["id"], related_type="group_post"
            )
            return GroupPostResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
