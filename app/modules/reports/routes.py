from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.reports.schemas import ReportCreate, ReportResponse
from app.modules.reports.service import ReportService
from app.core.access import Principal
from app.core.dependencies import get_current_principal
from supabase import Client

router = APIRouter(prefix="/reports", tags=["reports"])


def get_report_service(supabase: Client = Depends(get_supabase)) -> ReportService:
    return ReportService(supabase)


@router.post("", response_model=ReportResponse, status_code=201)
async def create_report(
    report_data: ReportCreate,
    principal: Principal = Depends(get_current_principal),
    service: ReportService = Depends(get_report_service)
):
    """Flag a ride, club, listing, post or user for moderator review"""
    return service.create_report(report_data, principal.id)
