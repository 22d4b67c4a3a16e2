import logging
from supabase import Client
from autodebate.config.roles_config import ROLE_ADMIN
from autodebate.modules.roles.schemas import (
    UserRoleResponse, UserWithRolesResponse, RoleChangeLogResponse
)
from typing import List, Optional, Dict
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class RoleService:
    """Role assignment rows. Every add/remove is recorded in role_change_log."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_roles(self, user_id: str) -> List[str]:
        try:
            result = self.supabase.table("user_roles")\
                .select("role")\
                .eq("user_id", user_id)\
                .execute()
            return sorted({r["role"] for r in result.data or []})
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_users_with_roles(self, search: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[UserWithRolesResponse]:
        """Profiles for the admin panel, each with its role list"""
        try:
            query = self.supabase.table("profiles").select("id, username, avatar_url, points, level, created_at")
            if search:
                query = query.ilike("username", f"%{search}%")
            profiles = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute().data or []

            roles_by_user: Dict[str, List[str]] = {}
            if profiles:
                rows = self.supabase.table("user_roles")\
                    .select("user_id, role")\
                    .in_("user_id", [p["id"] for p in profiles])\
                    .execute().data or []
                for row in rows:
                    roles_by_user.setdefault(row["user_id"], []).append(row["role"])

            users = []
            for profile in profiles:
                roles = sorted(set(roles_by_user.get(profile["id"], [])))
                users.append(UserWithRolesResponse(
                    id=profile["id"],
                    username=profile.get("username"),
                    avatar_url=profile.get("avatar_url"),
                    points=profile.get("points") or 0,
                    level=profile.get("level") or 1,
                    created_at=profile.get("created_at"),
                    roles=roles,
                    is_admin=ROLE_ADMIN in roles
                ))
            return users
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_role(self, user_id: str, role: str, performed_by: str) -> UserRoleResponse:
        try:
            profile = self.supabase.table("profiles")\
                .select("id")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            if not profile or not profile.data:
                raise HTTPException(status_code=404, detail="User not found")

            existing = self.supabase.table("user_roles")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("role", role)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail=f"User already has role {role}")

            result = self.supabase.table("user_roles").insert({
                "user_id": user_id,
                "role": role
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add role")

            self._log_change(user_id, role, "added", performed_by)
            logger.info(f"Role {role} added to {user_id} by {performed_by}")
            return UserRoleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_role(self, user_id: str, role: str, performed_by: str) -> bool:
        try:
            if role == ROLE_ADMIN and user_id == performed_by:
                raise HTTPException(status_code=400, detail="Admins cannot remove their own admin role")

            result = self.supabase.table("user_roles")\
                .delete()\
                .eq("user_id", user_id)\
                .eq("role", role)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail=f"User does not have role {role}")

            self._log_change(user_id, role, "removed", performed_by)
            logger.info(f"Role {role} removed from {user_id} by {performed_by}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _log_change(self, user_id: str, role: str, action: str, performed_by: str) -> None:
        try:
            self.supabase.table("role_change_log").insert({
                "user_id": user_id,
                "role": role,
                "action": action,
                "performed_by": performed_by
            }).execute()
        except Exception as e:
            logger.error(f"Failed to record role change for {user_id}: {e}")

    def list_role_changes(self, user_id: Optional[str] = None, limit: int = 50) -> List[RoleChangeLogResponse]:
        try:
            query = self.supabase.table("role_change_log").select("*")
            if user_id:
                query = query.eq("user_id", user_id)
            result = query.order("created_at", desc=True).limit(limit).execute()
            return [RoleChangeLogResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
