from fastapi import APIRouter, Depends, File, UploadFile
from autodebate.database.supabase_client import get_supabase
from autodebate.core.dependencies import get_viewer, get_optional_viewer, ensure_can_edit
from autodebate.core.filters import CommunitySearchFilters
from autodebate.modules.profiles.schemas import (
    ProfileUpdate, ProfileResponse, CommunityProfileResponse, ShowroomResponse, PrivacySettings
)
from autodebate.modules.profiles.service import ProfileService
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("", response_model=List[CommunityProfileResponse])
async def list_community(
    location: str = "",
    country: str = "",
    car_make: str = "",
    car_model: str = "",
    car_year: str = "",
    min_level: Optional[int] = None,
    limit: Optional[int] = None,
    viewer: Dict = Depends(get_optional_viewer),
    service: ProfileService = Depends(get_profile_service)
):
    """Community listing ordered by points, with location, level and car filters"""
    filters = CommunitySearchFilters(
        location=location, country=country, car_make=car_make,
        car_model=car_model, car_year=car_year, min_level=min_level
    )
    return service.list_community(filters, viewer["id"], limit=limit)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    viewer: Dict = Depends(get_viewer),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(viewer["id"], viewer["id"])


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    viewer: Dict = Depends(get_optional_viewer),
    service: ProfileService = Depends(get_profile_service)
):
    """Get profile by ID; location and activity follow the owner's privacy settings"""
    return service.get_profile(user_id, viewer["id"])


@router.get("/{user_id}/showroom", response_model=ShowroomResponse)
async def get_showroom(
    user_id: str,
    viewer: Dict = Depends(get_optional_viewer),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_showroom(user_id, viewer["id"])


@router.put("/{user_id}", response_model=ProfileResponse)
async def update_profile(
    user_id: str,
    profile_data: ProfileUpdate,
    viewer: Dict = Depends(get_viewer),
    service: ProfileService = Depends(get_profile_service)
):
    """Update profile (owner or admin)"""
    ensure_can_edit(viewer, user_id, "profile")
    return service.update_profile(user_id, profile_data)


@router.put("/{user_id}/privacy", response_model=ProfileResponse)
async def update_privacy(
    user_id: str,
    privacy: PrivacySettings,
    viewer: Dict = Depends(get_viewer),
    service: ProfileService = Depends(get_profile_service)
):
    ensure_can_edit(viewer, user_id, "profile")
    return service.update_privacy(user_id, privacy)


@router.post("/{user_id}/avatar", response_model=ProfileResponse)
async def upload_avatar(
    user_id: str,
    file: UploadFile = File(...),
    viewer: Dict = Depends(get_viewer),
    service: ProfileService = Depends(get_profile_service)
):
    ensure_can_edit(viewer, user_id, "profile")
    return await service.upload_avatar(user_id, file)
