from fastapi import APIRouter, Depends
from autodebate.database.supabase_client import get_supabase
from autodebate.modules.admin.schemas import DashboardStats
from autodebate.modules.admin.service import AdminService
from autodebate.core.dependencies import require_capability
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_supabase)) -> AdminService:
    return AdminService(supabase)


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard(
    viewer: Dict = Depends(require_capability("admin:dashboard")),
    service: AdminService = Depends(get_admin_service)
):
    return service.dashboard_stats()
