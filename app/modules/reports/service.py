from supabase import Client
from app.modules.reports.schemas import (
    ReportCreate, ReportUpdate, ReportResponse, ReportStatus, ReportPriority
)
from app.core.errors import DatabaseError, ErrorCode, NotFound
from app.core.timeutils import to_iso, utcnow
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_report(self, report_data: ReportCreate, reporter_id: str) -> ReportResponse:
        now = to_iso(utcnow())
        result = self.supabase.table("reports").insert({
            **report_data.model_dump(mode="json"),
            "reporter_id": reporter_id,
            "status": ReportStatus.PENDING.value,
            "created_at": now,
            "updated_at": now,
        }).execute()
        if not result.data:
            raise DatabaseError("Failed to create report")
        logger.info(f"User {reporter_id} reported {report_data.type.value} {report_data.reported_item_id}")
        return ReportResponse(**result.data[0])

    def list_reports(
        self,
        status: Optional[ReportStatus] = None,
        priority: Optional[ReportPriority] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[ReportResponse], int]:
        """One page of reports, newest first, with the total matching count"""
        query = self.supabase.table("reports").select("*", count="exact")
        if status:
            query = query.eq("status", status.value)
        if priority:
            query = query.eq("priority", priority.value)
        result = query.order("created_at", desc=True)\
            .limit(limit)\
            .offset(offset)\
            .execute()
        reports = [ReportResponse(**row) for row in (result.data or [])]
        return reports, result.count or 0

    def update_report(self, report_id: str, report_data: ReportUpdate, moderator_id: str) -> ReportResponse:
        result = self.supabase.table("reports")\
            .update({
                "status": report_data.status.value,
                "resolution": report_data.resolution,
                "updated_at": to_iso(utcnow()),
            })\
            .eq("id", report_id)\
            .execute()
        if not result.data:
            raise NotFound("Report not found", ErrorCode.REPORT_NOT_FOUND)
        logger.info(f"Moderator {moderator_id} set report {report_id} to {report_data.status.value}")
        return ReportResponse(**result.data[0])
