import logging
from supabase import Client
from autodebate.config.roles_config import POINTS_BY_ACTIVITY, POINTS_PER_LEVEL
from autodebate.core.access import apply_visibility, resolve_visibility
from autodebate.modules.gamification.schemas import (
    AchievementResponse, UserAchievementResponse, LeaderboardEntry
)
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def calculate_level(points: int) -> int:
    """Level 1 at 0 points, one more level every POINTS_PER_LEVEL points"""
    return 1 + max(points or 0, 0) // POINTS_PER_LEVEL


class GamificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def award_points(
        self,
        user_id: str,
        activity_type: str,
        points: Optional[int] = None,
        related_id: Optional[str] = None,
        related_type: Optional[str] = None
    ) -> int:
        """Log the activity and add its points to the profile. Returns the new total."""
        if points is None:
            points = POINTS_BY_ACTIVITY.get(activity_type, 0)
        if points <= 0:
            return self._current_points(user_id)
        try:
            self.supabase.table("user_activity_log").insert({
                "user_id": user_id,
                "activity_type": activity_type,
                "points": points,
                "related_id": related_id,
                "related_type": related_type
            }).execute()

            total = self._current_points(user_id) + points
            self.supabase.table("profiles")\
                .update({"points": total, "level": calculate_level(total)})\
                .eq("id", user_id)\
                .execute()
            return total
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def award_points_quietly(self, user_id: str, activity_type: str, related_id: Optional[str] = None, related_type: Optional[str] = None) -> None:
        """Points are a side effect of the main write; failures are logged, not raised"""
        try:
            self.award_points(user_id, activity_type, related_id=related_id, related_type=related_type)
        except HTTPException as e:
            logger.error(f"Failed to award {activity_type} points to {user_id}: {e.detail}")

    def _current_points(self, user_id: str) -> int:
        result = self.supabase.table("profiles")\
            .select("points")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return result.data.get("points") or 0

    def list_achievements(self) -> List[AchievementResponse]:
        try:
            result = self.supabase.table("achievements")\
                .select("*")\
                .order("points", desc=False)\
                .execute()
            return [AchievementResponse(**a) for a in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_user_achievements(self, user_id: str, viewer_id: Optional[str]) -> List[UserAchievementResponse]:
        """Earned achievements; empty when the owner hides activity from this viewer"""
        try:
            profile = self.supabase.table("profiles")\
                .select("id, privacy_settings")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            if not profile or not profile.data:
                raise HTTPException(status_code=404, detail="Profile not found")
            if not resolve_visibility(profile.data, viewer_id).activity:
                return []

            result = self.supabase.table("user_achievements")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("earned_at", desc=True)\
                .execute()
            rows = result.data or []
            if not rows:
                return []
            achievement_ids = list({r["achievement_id"] for r in rows})
            achievements = self.supabase.table("achievements")\
                .select("*")\
                .in_("id", achievement_ids)\
                .execute()
            by_id = {a["id"]: a for a in achievements.data or []}
            return [
                UserAchievementResponse(**r, achievement=by_id.get(r["achievement_id"]))
                for r in rows
            ]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def award_achievement(self, user_id: str, achievement_id: str) -> UserAchievementResponse:
        """Grant an achievement once and add its points"""
        try:
            achievement = self.supabase.table("achievements")\
                .select("*")\
                .eq("id", achievement_id)\
                .maybe_single()\
                .execute()
            if not achievement or not achievement.data:
                raise HTTPException(status_code=404, detail="Achievement not found")

            existing = self.supabase.table("user_achievements")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("achievement_id", achievement_id)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="Achievement already earned")

            result = self.supabase.table("user_achievements").insert({
                "user_id": user_id,
                "achievement_id": achievement_id
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to award achievement")

            points = achievement.data.get("points") or 0
            if points:
                self.award_points(user_id, "achievement", points=points, related_id=achievement_id, related_type="achievement")
            logger.info(f"Awarded achievement {achievement_id} to {user_id}")
            return UserAchievementResponse(**result.data[0], achievement=achievement.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def leaderboard(self, viewer_id: Optional[str], limit: int = 20) -> List[LeaderboardEntry]:
        """Profiles by points; activity is masked for profiles hiding it"""
        try:
            result = self.supabase.table("profiles")\
                .select("id, username, avatar_url, points, level, privacy_settings")\
                .order("points", desc=True)\
                .limit(limit)\
                .execute()
            entries = []
            for profile in result.data or []:
                visible = apply_visibility(profile, resolve_visibility(profile, viewer_id))
                entries.append(LeaderboardEntry(**{k: visible.get(k) for k in LeaderboardEntry.model_fields}))
            return entries
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
