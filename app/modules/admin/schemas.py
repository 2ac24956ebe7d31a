from pydantic import BaseModel, Field
from typing import Any, Dict, Generic, List, Optional, TypeVar
import math

from app.config.permissions_config import UserRole
from app.modules.users.schemas import UserResponse

T = TypeVar("T")


class RoleGrantResponse(BaseModel):
    user_id: str
    granted: UserRole
    roles: List[UserRole]


class JobStatusResponse(BaseModel):
    name: str
    trigger: str
    next_run_time: Optional[str] = None
    running: bool
    last_started_at: Optional[str] = None
    last_finished_at: Optional[str] = None
    last_result: Any = None
    last_error: Optional[str] = None


class JobRunResponse(BaseModel):
    job_name: str
    result: Any = None


class StatsOverview(BaseModel):
    total_users: int
    total_rides: int
    total_clubs: int
    total_listings: int
    active_rides: int
    completed_rides: int
    verified_clubs: int


class StatsRecent(BaseModel):
    new_users_last_7_days: int
    new_rides_last_7_days: int


class StatsBreakdown(BaseModel):
    users_by_role: Dict[str, int]
    rides_by_status: Dict[str, int]


class PlatformStatsResponse(BaseModel):
    overview: StatsOverview
    recent: StatsRecent
    breakdown: StatsBreakdown


class AdminUserResponse(UserResponse):
    roles: List[UserRole] = Field(default_factory=list)


class Page(BaseModel, Generic[T]):
    items: List[T]
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, items: List[T], page: int, limit: int, total: int) -> "Page[T]":
        return cls(items=items, page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))
