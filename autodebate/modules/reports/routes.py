from fastapi import APIRouter, Depends
from autodebate.database.supabase_client import get_supabase
from autodebate.modules.reports.schemas import ReportCreate, ReportResponse, ReportCounts
from autodebate.modules.reports.service import ReportService
from autodebate.core.dependencies import require_capability
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/reports", tags=["reports"])


def get_report_service(supabase: Client = Depends(get_supabase)) -> ReportService:
    return ReportService(supabase)


@router.post("", response_model=ReportResponse, status_code=201)
async def create_report(
    report: ReportCreate,
    viewer: Dict = Depends(require_capability("reports:create")),
    service: ReportService = Depends(get_report_service)
):
    """Flag content for moderation"""
    return service.create_report(report, viewer["id"])


@router.get("", response_model=List[ReportResponse])
async def list_reports(
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    viewer: Dict = Depends(require_capability("reports:read")),
    service: ReportService = Depends(get_report_service)
):
    return service.list_reports(status=status, limit=limit, offset=offset)


@router.get("/counts", response_model=ReportCounts)
async def count_reports(
    viewer: Dict = Depends(require_capability("reports:read")),
    service: ReportService = Depends(get_report_service)
):
    return service.count_by_status()


@router.post("/{report_id}/resolve", response_model=ReportResponse)
async def resolve_report(
    report_id: str,
    viewer: Dict = Depends(require_capability("reports:resolve")),
    service: ReportService = Depends(get_report_service)
):
    return service.close_report(report_id, "resolved", viewer["id"])


@router.post("/{report_id}/dismiss", response_model=ReportResponse)
async def dismiss_report(
    report_id: str,
    viewer: Dict = Depends(require_capability("reports:resolve")),
    service: ReportService = Depends(get_report_service)
):
    return service.close_report(report_id, "dismissed", viewer["id"])
