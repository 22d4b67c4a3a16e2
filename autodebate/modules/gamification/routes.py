from fastapi import APIRouter, Depends
from autodebate.database.supabase_client import get_supabase
from autodebate.modules.gamification.schemas import (
    AchievementResponse, UserAchievementResponse, AwardAchievementRequest, LeaderboardEntry
)
from autodebate.modules.gamification.service import GamificationService
from autodebate.core.dependencies import get_optional_viewer, require_capability
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/gamification", tags=["gamification"])


def get_gamification_service(supabase: Client = Depends(get_supabase)) -> GamificationService:
    return GamificationService(supabase)


@router.get("/achievements", response_model=List[AchievementResponse])
async def list_achievements(service: GamificationService = Depends(get_gamification_service)):
    return service.list_achievements()


@router.get("/users/{user_id}/achievements", response_model=List[UserAchievementResponse])
async def list_user_achievements(
    user_id: str,
    viewer: Dict = Depends(get_optional_viewer),
    service: GamificationService = Depends(get_gamification_service)
):
    return service.list_user_achievements(user_id, viewer["id"])


@router.post("/achievements/award", response_model=UserAchievementResponse, status_code=201)
async def award_achievement(
    award: AwardAchievementRequest,
    viewer: Dict = Depends(require_capability("achievements:award")),
    service: GamificationService = Depends(get_gamification_service)
):
    """Grant an achievement to a user (admin)"""
    return service.award_achievement(award.user_id, award.achievement_id)


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def leaderboard(
    limit: int = 20,
    viewer: Dict = Depends(get_optional_viewer),
    service: GamificationService = Depends(get_gamification_service)
):
    return service.leaderboard(viewer["id"], limit=limit)
