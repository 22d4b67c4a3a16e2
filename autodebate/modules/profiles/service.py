import logging
import time
from supabase import Client
from autodebate.config import settings
from autodebate.core.access import (
    apply_visibility, normalize_privacy_settings, resolve_visibility
)
from autodebate.core.filters import CommunitySearchFilters, filter_profiles
from autodebate.core.storage import BucketStorage, file_extension, is_image_file
from autodebate.modules.profiles.schemas import (
    ProfileUpdate, ProfileResponse, CommunityProfileResponse, ShowroomResponse, PrivacySettings
)
from typing import List, Optional, Dict, Any, Iterable
from datetime import datetime, timezone
from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)


def fetch_display_info(supabase: Client, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """Map user id -> {id, username, avatar_url} for author/sender labels"""
    ids = list({uid for uid in user_ids if uid})
    if not ids:
        return {}
    result = supabase.table("profiles")\
        .select("id, username, avatar_url")\
        .in_("id", ids)\
        .execute()
    return {p["id"]: p for p in result.data or []}


def to_profile_response(profile: Dict[str, Any], viewer_id: Optional[str]) -> ProfileResponse:
    """Visibility-filtered response; privacy_settings are returned to the owner only"""
    visibility = resolve_visibility(profile, viewer_id)
    visible = apply_visibility(profile, visibility)
    if viewer_id is not None and profile.get("id") == viewer_id:
        visible["privacy_settings"] = normalize_privacy_settings(profile.get("privacy_settings"))
    else:
        visible["privacy_settings"] = None
    return ProfileResponse(**{k: v for k, v in visible.items() if k in ProfileResponse.model_fields})


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_row(self, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("profiles")\
            .select("*")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return result.data

    def get_profile(self, user_id: str, viewer_id: Optional[str]) -> ProfileResponse:
        """Get profile by ID with hidden fields blanked for non-owners"""
        try:
            return to_profile_response(self._get_row(user_id), viewer_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update profile fields; privacy settings are written as a full blob"""
        try:
            update_data: Dict[str, Any] = {"updated_at": datetime.now(timezone.utc).isoformat()}
            for field in ("username", "bio", "city", "country", "avatar_url", "social_links"):
                value = getattr(profile_data, field)
                if value is None:
                    continue
                if isinstance(value, str):
                    # empty strings clear optional text fields
                    value = value.strip() or None
                update_data[field] = value
            if profile_data.birth_date is not None:
                update_data["birth_date"] = profile_data.birth_date.isoformat()
            if profile_data.privacy_settings is not None:
                update_data["privacy_settings"] = profile_data.privacy_settings.model_dump()

            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return to_profile_response(result.data[0], user_id)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_privacy(self, user_id: str, privacy: PrivacySettings) -> ProfileResponse:
        return self.update_profile(user_id, ProfileUpdate(privacy_settings=privacy))

    async def upload_avatar(self, user_id: str, file: UploadFile) -> ProfileResponse:
        """Store the avatar in the avatars bucket and save its public URL"""
        if not is_image_file(file.filename):
            raise HTTPException(status_code=400, detail="Avatar must be an image")
        content = await file.read()
        storage = BucketStorage(self.supabase, settings.avatars_bucket)
        path = f"{user_id}/avatar_{int(time.time() * 1000)}.{file_extension(file.filename)}"
        try:
            storage.upload(path, content, file.content_type or "image/jpeg")
        except Exception as e:
            logger.error(f"Avatar upload failed: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Failed to upload avatar: {str(e)}")
        return self.update_profile(user_id, ProfileUpdate(avatar_url=storage.public_url(path)))

    def list_community(self, filters: CommunitySearchFilters, viewer_id: Optional[str], limit: Optional[int] = None) -> List[CommunityProfileResponse]:
        """Community listing by points. Location and car filters only match data the profile shows."""
        try:
            query = self.supabase.table("profiles")\
                .select("*")\
                .order("points", desc=True)\
                .limit(limit or settings.community_page_size)

            if filters.location and filters.country:
                query = query.eq("city", filters.location).eq("country", filters.country)
            elif filters.country:
                query = query.eq("country", filters.country)

            if filters.min_level is not None:
                query = query.gte("level", filters.min_level)

            profiles = query.execute().data or []
            if filters.country:
                profiles = [p for p in profiles if resolve_visibility(p, viewer_id).location]

            cars_by_user = self._current_cars_by_user([p["id"] for p in profiles])
            # hidden garages never match car predicates
            visible_cars = {
                p["id"]: cars_by_user.get(p["id"], []) if resolve_visibility(p, viewer_id).cars else []
                for p in profiles
            }
            matched = filter_profiles(profiles, visible_cars, filters)

            return [
                CommunityProfileResponse(
                    **to_profile_response(p, viewer_id).model_dump(),
                    cars=visible_cars[p["id"]]
                )
                for p in matched
            ]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _current_cars_by_user(self, user_ids: List[str]) -> Dict[str, List[dict]]:
        if not user_ids:
            return {}
        result = self.supabase.table("user_cars")\
            .select("*")\
            .in_("user_id", user_ids)\
            .eq("is_current", True)\
            .execute()
        cars: Dict[str, List[dict]] = {}
        for car in result.data or []:
            cars.setdefault(car["user_id"], []).append(car)
        return cars

    def get_showroom(self, user_id: str, viewer_id: Optional[str]) -> ShowroomResponse:
        """Public showroom: garage behind show_cars, achievements and event photos behind show_activity"""
        try:
            profile = self._get_row(user_id)
            visibility = resolve_visibility(profile, viewer_id)
            showroom = ShowroomResponse(profile=to_profile_response(profile, viewer_id))

            if visibility.cars:
                showroom.cars = self.supabase.table("user_cars")\
                    .select("*")\
                    .eq("user_id", user_id)\
                    .eq("is_current", True)\
                    .order("created_at", desc=True)\
                    .execute().data or []
                showroom.favorite_cars = self.supabase.table("user_favorite_cars")\
                    .select("*")\
                    .eq("user_id", user_id)\
                    .order("created_at", desc=True)\
                    .execute().data or []

            if visibility.activity:
                earned = self.supabase.table("user_achievements")\
                    .select("*")\
                    .eq("user_id", user_id)\
                    .order("earned_at", desc=True)\
                    .execute().data or []
                if earned:
                    achievements = self.supabase.table("achievements")\
                        .select("*")\
                        .in_("id", [e["achievement_id"] for e in earned])\
                        .execute().data or []
                    by_id = {a["id"]: a for a in achievements}
                    showroom.achievements = [{**e, "achievement": by_id.get(e["achievement_id"])} for e in earned]
                showroom.photos = self.supabase.table("photos")\
                    .select("*")\
                    .eq("uploaded_by", user_id)\
                    .not_.is_("event_id", "null")\
                    .order("created_at", desc=True)\
                    .limit(12)\
                    .execute().data or []
            return showroom
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
