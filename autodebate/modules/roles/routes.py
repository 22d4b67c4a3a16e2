from fastapi import APIRouter, Depends, HTTPException
from autodebate.config.roles_config import APP_ROLES, ROLE_MATRIX
from autodebate.database.supabase_client import get_service_supabase
from autodebate.modules.roles.schemas import (
    RoleAssign, UserRoleResponse, UserWithRolesResponse, RoleChangeLogResponse, RoleMatrixResponse
)
from autodebate.modules.roles.service import RoleService
from autodebate.core.dependencies import get_viewer, require_admin, require_capability, get_access_cache
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/roles", tags=["roles"])


def get_role_service(supabase: Client = Depends(get_service_supabase)) -> RoleService:
    return RoleService(supabase)


@router.get("/matrix", response_model=RoleMatrixResponse)
async def get_role_matrix(viewer: Dict = Depends(get_viewer)):
    """Role -> capabilities table the frontend uses to show or hide controls"""
    return RoleMatrixResponse(
        roles=list(APP_ROLES),
        capabilities={role: sorted(caps) for role, caps in ROLE_MATRIX.items()}
    )


@router.get("/users", response_model=List[UserWithRolesResponse])
async def list_users_with_roles(
    search: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
    viewer: Dict = Depends(require_capability("users:read")),
    service: RoleService = Depends(get_role_service)
):
    return service.list_users_with_roles(search=search, limit=limit, offset=offset)


@router.get("/users/{user_id}", response_model=List[str])
async def get_user_roles(
    user_id: str,
    viewer: Dict = Depends(require_capability("users:read")),
    service: RoleService = Depends(get_role_service)
):
    return service.get_roles(user_id)


@router.post("/users/{user_id}", response_model=UserRoleResponse, status_code=201)
async def add_role(
    user_id: str,
    assignment: RoleAssign,
    viewer: Dict = Depends(require_capability("users:manage_roles")),
    service: RoleService = Depends(get_role_service),
    cache: Dict = Depends(get_access_cache)
):
    """Grant an application role (admin)"""
    role = service.add_role(user_id, assignment.role, viewer["id"])
    cache.pop(f"roles:{user_id}", None)
    return role


@router.delete("/users/{user_id}/{role}", status_code=204)
async def remove_role(
    user_id: str,
    role: str,
    viewer: Dict = Depends(require_capability("users:manage_roles")),
    service: RoleService = Depends(get_role_service),
    cache: Dict = Depends(get_access_cache)
):
    if role not in APP_ROLES:
        raise HTTPException(status_code=400, detail=f"Unknown role: {role}")
    service.remove_role(user_id, role, viewer["id"])
    cache.pop(f"roles:{user_id}", None)


@router.get("/changes", response_model=List[RoleChangeLogResponse])
async def list_role_changes(
    user_id: Optional[str] = None,
    limit: int = 50,
    viewer: Dict = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    return service.list_role_changes(user_id=user_id, limit=limit)
