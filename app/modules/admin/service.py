from supabase import Client
from app.config.permissions_config import UserRole, parse_role
from app.modules.admin.schemas import AdminUserResponse
from app.modules.clubs.schemas import ClubResponse
from app.modules.clubs.service import ClubService
from app.modules.listings.schemas import ListingResponse
from app.modules.rides.schemas import RideResponse, RideStatus
from app.modules.rides.service import RideService
from app.core.errors import ErrorCode, NotFound
from app.core.timeutils import to_iso, utcnow
from app.database.supabase_client import first_row
from collections import Counter, defaultdict
from datetime import timedelta
from typing import Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

RECENT_DAYS = 7
PAGE_SIZE = 1000

# Characters that would break a PostgREST or=(...) filter string
_SEARCH_STRIP = str.maketrans("", "", ",()")


class AdminService:
    """Platform-wide reads and user management for the operator console"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _count(self, table: str, **filters) -> int:
        query = self.supabase.table(table).select("id", count="exact")
        for column, value in filters.items():
            query = query.eq(column, value)
        return query.limit(1).execute().count or 0

    def _count_since(self, table: str, since_iso: str) -> int:
        result = self.supabase.table(table)\
            .select("id", count="exact")\
            .gte("created_at", since_iso)\
            .limit(1)\
            .execute()
        return result.count or 0

    def _role_counts(self) -> Dict[str, int]:
        counts: Counter = Counter()
        offset = 0
        while True:
            result = self.supabase.table("user_role_assignments")\
                .select("id, role")\
                .order("id")\
                .limit(PAGE_SIZE)\
                .offset(offset)\
                .execute()
            rows = result.data or []
            counts.update(row["role"] for row in rows)
            if len(rows) < PAGE_SIZE:
                break
            offset += PAGE_SIZE
        return dict(counts)

    def get_stats(self) -> dict:
        since = to_iso(utcnow() - timedelta(days=RECENT_DAYS))
        rides_by_status = {status.value: self._count("rides", status=status.value) for status in RideStatus}
        return {
            "overview": {
                "total_users": self._count("users"),
                "total_rides": self._count("rides"),
                "total_clubs": self._count("clubs"),
                "total_listings": self._count("marketplace_listings"),
                "active_rides": rides_by_status[RideStatus.IN_PROGRESS.value],
                "completed_rides": rides_by_status[RideStatus.COMPLETED.value],
                "verified_clubs": self._count("clubs", verified=True),
            },
            "recent": {
                "new_users_last_7_days": self._count_since("users", since),
                "new_rides_last_7_days": self._count_since("rides", since),
            },
            "breakdown": {
                "users_by_role": self._role_counts(),
                "rides_by_status": rides_by_status,
            },
        }

    def _roles_by_user(self, user_ids: List[str]) -> Dict[str, List[UserRole]]:
        roles: Dict[str, set] = defaultdict(lambda: {UserRole.USER})
        if user_ids:
            result = self.supabase.table("user_role_assignments")\
                .select("user_id, role")\
                .in_("user_id", user_ids)\
                .execute()
            for row in result.data or []:
                roles[row["user_id"]].add(parse_role(row["role"]))
        return {user_id: sorted(roles[user_id], key=lambda r: r.value) for user_id in user_ids}

    def list_users(
        self,
        role: Optional[UserRole] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[AdminUserResponse], int]:
        query = self.supabase.table("users").select("*", count="exact")
        if role and role != UserRole.USER:
            holders = self.supabase.table("user_role_assignments")\
                .select("user_id")\
                .eq("role", role.value)\
                .execute()
            user_ids = sorted({row["user_id"] for row in (holders.data or [])})
            if not user_ids:
                return [], 0
            query = query.in_("id", user_ids)
        if search:
            term = search.translate(_SEARCH_STRIP).strip()
            if term:
                query = query.or_(f"email.ilike.%{term}%,username.ilike.%{term}%,display_name.ilike.%{term}%")
        result = query.order("created_at", desc=True)\
            .limit(limit)\
            .offset(offset)\
            .execute()
        rows = result.data or []
        roles = self._roles_by_user([row["id"] for row in rows])
        users = [AdminUserResponse(**row, roles=roles[row["id"]]) for row in rows]
        return users, result.count or 0

    def delete_user(self, user_id: str) -> None:
        """
        Delete a user profile and everything it owns.

        Owned clubs and created rides go through their own services so their
        child rows are removed first. The Supabase Auth account is untouched.
        """
        result = self.supabase.table("users")\
            .select("id")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if first_row(result) is None:
            raise NotFound("User not found", ErrorCode.USER_NOT_FOUND)

        clubs = self.supabase.table("clubs").select("id").eq("owner_id", user_id).execute()
        for club in clubs.data or []:
            ClubService(self.supabase).delete_club(club["id"])
        rides = self.supabase.table("rides").select("id").eq("creator_id", user_id).execute()
        for ride in rides.data or []:
            RideService(self.supabase).delete_ride(ride["id"])

        for table, column in (
            ("marketplace_listings", "seller_id"),
            ("posts", "author_id"),
            ("ride_participants", "user_id"),
            ("club_members", "user_id"),
            ("user_role_assignments", "user_id"),
        ):
            self.supabase.table(table).delete().eq(column, user_id).execute()
        self.supabase.table("reports")\
            .update({"reporter_id": None})\
            .eq("reporter_id", user_id)\
            .execute()
        self.supabase.table("users").delete().eq("id", user_id).execute()
        logger.info(f"Deleted user {user_id} and owned content")

    def list_rides(
        self,
        status: Optional[RideStatus] = None,
        creator_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[RideResponse], int]:
        query = self.supabase.table("rides").select("*", count="exact")
        if status:
            query = query.eq("status", status.value)
        if creator_id:
            query = query.eq("creator_id", creator_id)
        result = query.order("created_at", desc=True).limit(limit).offset(offset).execute()
        return [RideResponse(**row) for row in (result.data or [])], result.count or 0

    def list_clubs(
        self,
        verified: Optional[bool] = None,
        owner_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[ClubResponse], int]:
        # Private clubs included
        query = self.supabase.table("clubs").select("*", count="exact")
        if verified is not None:
            query = query.eq("verified", verified)
        if owner_id:
            query = query.eq("owner_id", owner_id)
        result = query.order("created_at", desc=True).limit(limit).offset(offset).execute()
        return [ClubResponse(**row) for row in (result.data or [])], result.count or 0

    def list_listings(
        self,
        is_sold: Optional[bool] = None,
        seller_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[ListingResponse], int]:
        query = self.supabase.table("marketplace_listings").select("*", count="exact")
        if is_sold is not None:
            query = query.eq("is_sold", is_sold)
        if seller_id:
            query = query.eq("seller_id", seller_id)
        result = query.order("created_at", desc=True).limit(limit).offset(offset).execute()
        return [ListingResponse(**row) for row in (result.data or [])], result.count or 0
