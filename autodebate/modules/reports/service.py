import logging
from supabase import Client
from autodebate.modules.reports.schemas import (
    ReportCreate, ReportResponse, ReportCounts, REPORT_STATUSES
)
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_report(self, report: ReportCreate, reporter_id: str) -> ReportResponse:
        try:
            duplicate = self.supabase.table("reports")\
                .select("id")\
                .eq("reporter_id", reporter_id)\
                .eq("reported_content_type", report.reported_content_type)\
                .eq("reported_content_id", report.reported_content_id)\
                .eq("status", "pending")\
                .execute()
            if duplicate.data:
                raise HTTPException(status_code=400, detail="You already reported this content")

            result = self.supabase.table("reports").insert({
                "reporter_id": reporter_id,
                "reported_content_type": report.reported_content_type,
                "reported_content_id": report.reported_content_id,
                "reason": report.reason.strip(),
                "description": report.description,
                "status": "pending"
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create report")
            return ReportResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_reports(self, status: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[ReportResponse]:
        if status and status not in REPORT_STATUSES:
            raise HTTPException(status_code=400, detail=f"Unknown status: {status}")
        try:
            query = self.supabase.table("reports").select("*")
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [ReportResponse(**r) for r in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_report_row(self, report_id: str) -> Dict[str, Any]:
        result = self.supabase.table("reports")\
            .select("*")\
            .eq("id", report_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Report not found")
        return result.data

    def close_report(self, report_id: str, status: str, admin_id: str) -> ReportResponse:
        """Resolve or dismiss a pending report"""
        try:
            report = self.get_report_row(report_id)
            if report["status"] != "pending":
                raise HTTPException(status_code=400, detail=f"Report is already {report['status']}")

            result = self.supabase.table("reports")\
                .update({
                    "status": status,
                    "resolved_by": admin_id,
                    "resolved_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", report_id)\
                .eq("status", "pending")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=400, detail="Report is no longer pending")

            logger.info(f"Report {report_id} {status} by {admin_id}")
            return ReportResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def count_by_status(self) -> ReportCounts:
        try:
            counts = {}
            for status in REPORT_STATUSES:
                result = self.supabase.table("reports")\
                    .select("id", count="exact")\
                    .eq("status", status)\
                    .execute()
                counts[status] = result.count or 0
            return ReportCounts(**counts)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
