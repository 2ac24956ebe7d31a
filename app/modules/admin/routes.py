from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from app.database.supabase_client import get_supabase
from app.modules.admin.schemas import (
    AdminUserResponse, JobRunResponse, JobStatusResponse, Page, PlatformStatsResponse, RoleGrantResponse
)
from app.modules.admin.service import AdminService
from app.modules.listings.schemas import ListingResponse
from app.modules.reports.schemas import ReportPriority, ReportResponse, ReportStatus, ReportUpdate
from app.modules.reports.service import ReportService
from app.modules.rides.schemas import RideResponse, RideStatus
from app.modules.clubs.schemas import ClubResponse, ClubVerify
from app.modules.clubs.service import ClubService
from app.modules.roles.schemas import RoleAssign
from app.modules.roles.service import RoleService
from app.config.permissions_config import UserRole
from app.core.access import Principal, decide_permission, enforce
from app.core.dependencies import (
    get_role_service,
    require_admin,
    require_permission,
    require_super_admin,
    require_web_access,
)
from app.core.errors import ErrorCode, JobExecutionError, NotFound
from app.core.scheduler import JobScheduler, get_job_scheduler
from supabase import Client
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

# Every operator endpoint is web-console only
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_web_access)])

# Granting these also needs MANAGE_ADMINS
_ADMIN_ROLES = (UserRole.ADMIN, UserRole.SUPER_ADMIN)


def get_admin_service(supabase: Client = Depends(get_supabase)) -> AdminService:
    return AdminService(supabase)


def get_report_service(supabase: Client = Depends(get_supabase)) -> ReportService:
    return ReportService(supabase)


class Pagination:
    def __init__(self, page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100)):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def wrap(self, items, total: int) -> Page:
        return Page.build(items, self.page, self.limit, total)


@router.get("/stats", response_model=PlatformStatsResponse)
async def platform_stats(
    principal: Principal = Depends(require_permission("VIEW_METRICS")),
    service: AdminService = Depends(get_admin_service)
):
    """Platform-wide counts and breakdowns"""
    return service.get_stats()


@router.get("/users", response_model=Page[AdminUserResponse])
async def list_users(
    role: Optional[UserRole] = None,
    search: Optional[str] = None,
    pagination: Pagination = Depends(),
    principal: Principal = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    users, total = service.list_users(role=role, search=search, limit=pagination.limit, offset=pagination.offset)
    return pagination.wrap(users, total)


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    principal: Principal = Depends(require_super_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Delete a user and the content they own"""
    if user_id == principal.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    service.delete_user(user_id)
    logger.info(f"User {principal.id} deleted user {user_id}")
    return None


@router.post("/users/{user_id}/roles", response_model=RoleGrantResponse)
async def assign_role(
    user_id: str,
    body: RoleAssign,
    principal: Principal = Depends(require_permission("MANAGE_USERS")),
    role_service: RoleService = Depends(get_role_service)
):
    """Grant a platform role to a user (idempotent)"""
    if body.role in _ADMIN_ROLES:
        enforce(decide_permission(principal, "MANAGE_ADMINS"))
    if not role_service.user_exists(user_id):
        raise NotFound("User not found", ErrorCode.USER_NOT_FOUND)
    role_service.grant_role(user_id, body.role)
    logger.info(f"User {principal.id} granted {body.role.value} to {user_id}")
    roles = role_service.resolve_roles(user_id)
    return RoleGrantResponse(user_id=user_id, granted=body.role, roles=sorted(roles, key=lambda r: r.value))


@router.get("/rides", response_model=Page[RideResponse])
async def list_rides(
    status: Optional[RideStatus] = None,
    creator_id: Optional[str] = None,
    pagination: Pagination = Depends(),
    principal: Principal = Depends(require_permission("VIEW_ADMIN_DASHBOARD")),
    service: AdminService = Depends(get_admin_service)
):
    rides, total = service.list_rides(
        status=status, creator_id=creator_id, limit=pagination.limit, offset=pagination.offset
    )
    return pagination.wrap(rides, total)


@router.get("/clubs", response_model=Page[ClubResponse])
async def list_clubs(
    verified: Optional[bool] = None,
    owner_id: Optional[str] = None,
    pagination: Pagination = Depends(),
    principal: Principal = Depends(require_permission("VIEW_ADMIN_DASHBOARD")),
    service: AdminService = Depends(get_admin_service)
):
    clubs, total = service.list_clubs(
        verified=verified, owner_id=owner_id, limit=pagination.limit, offset=pagination.offset
    )
    return pagination.wrap(clubs, total)


@router.get("/listings", response_model=Page[ListingResponse])
async def list_listings(
    is_sold: Optional[bool] = None,
    seller_id: Optional[str] = None,
    pagination: Pagination = Depends(),
    principal: Principal = Depends(require_permission("MANAGE_LISTINGS")),
    service: AdminService = Depends(get_admin_service)
):
    listings, total = service.list_listings(
        is_sold=is_sold, seller_id=seller_id, limit=pagination.limit, offset=pagination.offset
    )
    return pagination.wrap(listings, total)


@router.get("/reports", response_model=Page[ReportResponse])
async def list_reports(
    status: Optional[ReportStatus] = None,
    priority: Optional[ReportPriority] = None,
    pagination: Pagination = Depends(),
    principal: Principal = Depends(require_permission("MODERATE_CONTENT")),
    service: ReportService = Depends(get_report_service)
):
    reports, total = service.list_reports(
        status=status, priority=priority, limit=pagination.limit, offset=pagination.offset
    )
    return pagination.wrap(reports, total)


@router.patch("/reports/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: str,
    body: ReportUpdate,
    principal: Principal = Depends(require_permission("MODERATE_CONTENT")),
    service: ReportService = Depends(get_report_service)
):
    return service.update_report(report_id, body, principal.id)


@router.patch("/clubs/{club_id}/verify", response_model=ClubResponse)
async def verify_club(
    club_id: str,
    body: ClubVerify,
    principal: Principal = Depends(require_permission("VERIFY_CLUBS")),
    supabase: Client = Depends(get_supabase)
):
    return ClubService(supabase).set_verified(club_id, body.verified)


@router.get("/jobs", response_model=List[JobStatusResponse])
async def list_jobs(
    principal: Principal = Depends(require_permission("RUN_JOBS")),
    scheduler: JobScheduler = Depends(get_job_scheduler)
):
    return scheduler.list_jobs()


@router.post("/jobs/{job_name}/run", response_model=JobRunResponse)
def run_job(
    job_name: str,
    principal: Principal = Depends(require_permission("RUN_JOBS")),
    scheduler: JobScheduler = Depends(get_job_scheduler)
):
    """Run a job synchronously. Sync endpoint so the handler runs in the threadpool."""
    logger.info(f"User {principal.id} triggered job {job_name}")
    try:
        result = scheduler.run_job_manually(job_name)
    except JobExecutionError as e:
        return JSONResponse(
            status_code=500,
            content={"detail": str(e), "code": ErrorCode.JOB_EXECUTION_FAILED},
        )
    return JobRunResponse(job_name=job_name, result=result)
