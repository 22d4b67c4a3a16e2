from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from autodebate.database.supabase_client import get_supabase, get_service_supabase
from autodebate.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, MeResponse
)
from autodebate.modules.auth.service import AuthService
from autodebate.core.dependencies import get_current_user_id, get_capabilities_for, get_access_cache
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])

# Security scheme for JWT Bearer token
security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase),
    service_client: Client = Depends(get_service_supabase),
    cache: Dict = Depends(get_access_cache),
):
    """Current user, profile summary, roles and resolved capabilities (for frontend UI)."""
    profile = service.ensure_profile(current_user, service_client)
    cache.pop(f"roles:{current_user['id']}", None)
    access = get_capabilities_for(current_user["id"], supabase, cache)
    return MeResponse(
        id=current_user["id"],
        email=current_user.get("email"),
        username=profile.get("username"),
        avatar_url=profile.get("avatar_url"),
        roles=sorted(access.roles),
        access=access.as_dict(),
    )
