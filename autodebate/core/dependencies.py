"""
Core dependencies for route protection and capability checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from autodebate.core.access import Capabilities, resolve_capabilities
from autodebate.database.supabase_client import get_supabase
from autodebate.modules.auth.service import AuthService
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (roles per user id)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[dict]:
    """Current user when a bearer token is sent, None for anonymous visitors"""
    if credentials is None:
        return None
    return auth_service.get_current_user(credentials.credentials)


def get_user_roles(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Return app_role values from user_roles. Uses request-scoped cache when provided."""
    cache_key = f"roles:{user_id}"
    if cache is not None and cache_key in cache:
        return cache[cache_key]
    try:
        result = supabase.table("user_roles")\
            .select("role")\
            .eq("user_id", user_id)\
            .execute()
        roles = sorted({r["role"] for r in result.data}) if result.data else []
        if cache is not None:
            cache[cache_key] = roles
        return roles
    except Exception as e:
        logger.error(f"Error getting roles for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Could not load user roles")


def get_capabilities_for(user_id: Optional[str], supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Capabilities:
    if not user_id:
        return resolve_capabilities(None, [])
    return resolve_capabilities(user_id, get_user_roles(user_id, supabase, cache))


def is_admin_user(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    """True iff a user_roles row with role='admin' exists for user_id"""
    return get_capabilities_for(user_id, supabase, cache).is_admin


def get_viewer(
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Authenticated user with resolved capabilities under the "access" key"""
    access = get_capabilities_for(user_data["id"], supabase, _get_request_cache(request))
    return {**user_data, "access": access}


def get_optional_viewer(
    request: Request,
    user_data: Optional[dict] = Depends(get_optional_user),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Like get_viewer, but anonymous visitors get id=None and no capabilities"""
    if user_data is None:
        return {"id": None, "access": resolve_capabilities(None, [])}
    access = get_capabilities_for(user_data["id"], supabase, _get_request_cache(request))
    return {**user_data, "access": access}


def require_capability(required_capability: str):
    """Factory function to create capability check dependency"""
    def check_capability(viewer: dict = Depends(get_viewer)) -> dict:
        """Dependency to check if the viewer's roles grant the capability"""
        access: Capabilities = viewer["access"]
        if not access.has(required_capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_capability}"
            )
        return viewer
    return check_capability


def require_admin(viewer: dict = Depends(get_viewer)) -> dict:
    if not viewer["access"].is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required"
        )
    return viewer


def ensure_can_edit(viewer: dict, owner_id: Optional[str], resource: str = "resource") -> None:
    """403 unless the viewer is an admin or owns the resource"""
    if not viewer["access"].can_edit(owner_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only the owner or an admin can modify this {resource}"
        )


def check_group_member(group_id: str, viewer: dict, supabase: Client) -> dict:
    """Check if user is a member of a group or an admin"""
    if viewer["access"].is_admin:
        return viewer

    member_result = supabase.table("group_members")\
        .select("id")\
        .eq("group_id", group_id)\
        .eq("user_id", viewer["id"])\
        .execute()

    if member_result.data:
        return viewer

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You must be a member of this group"
    )


def check_group_admin(group_id: str, viewer: dict, supabase: Client) -> dict:
    """Check if user created the group, holds the group admin role, or is an app admin"""
    if viewer["access"].is_admin:
        return viewer

    group_result = supabase.table("groups")\
        .select("created_by")\
        .eq("id", group_id)\
        .maybe_single()\
        .execute()

    if group_result and group_result.data and group_result.data.get("created_by") == viewer["id"]:
        return viewer

    member_result = supabase.table("group_members")\
        .select("role")\
        .eq("group_id", group_id)\
        .eq("user_id", viewer["id"])\
        .eq("role", "admin")\
        .execute()

    if member_result.data:
        return viewer

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You must be a group admin to perform this action"
    )


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns request-scoped access cache."""
    return _get_request_cache(request)
