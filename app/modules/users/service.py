from supabase import Client
from app.modules.users.schemas import UserUpdate, UserResponse
from app.modules.rides.schemas import ParticipantStatus
from app.core.errors import ErrorCode, NotFound
from app.core.timeutils import to_iso, utcnow
from app.database.supabase_client import first_row
from collections import Counter
from typing import Dict, Iterator
import logging

logger = logging.getLogger(__name__)

# PostgREST caps unpaginated selects (max-rows), so bulk reads go page by page
PAGE_SIZE = 1000


class UserService:
    def __init__(self, supabase: Client, page_size: int = PAGE_SIZE):
        self.supabase = supabase
        self.page_size = page_size

    def _paged(self, make_query) -> Iterator[dict]:
        offset = 0
        while True:
            result = make_query()\
                .order("id")\
                .limit(self.page_size)\
                .offset(offset)\
                .execute()
            rows = result.data or []
            yield from rows
            if len(rows) < self.page_size:
                break
            offset += self.page_size

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user profile by ID"""
        result = self.supabase.table("users")\
            .select("*")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        row = first_row(result)
        if row is None:
            raise NotFound("User not found", ErrorCode.USER_NOT_FOUND)
        return UserResponse(**row)

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update profile fields; roles and statistics are not writable here"""
        update_data = user_data.model_dump(exclude_unset=True)
        update_data["updated_at"] = to_iso(utcnow())
        result = self.supabase.table("users")\
            .update(update_data)\
            .eq("id", user_id)\
            .execute()
        if not result.data:
            raise NotFound("User not found", ErrorCode.USER_NOT_FOUND)
        return UserResponse(**result.data[0])

    def update_ride_statistics(self) -> Dict[str, int]:
        """
        Recompute users.rides_completed from COMPLETED ride participations.

        Only rows whose stored count differs are written, so a second run with
        no new completions writes nothing.
        """
        counts = Counter(
            row["user_id"] for row in self._paged(
                lambda: self.supabase.table("ride_participants")
                .select("id, user_id")
                .eq("status", ParticipantStatus.COMPLETED.value)
            )
        )

        checked = 0
        updated = 0
        for user in self._paged(lambda: self.supabase.table("users").select("id, rides_completed")):
            checked += 1
            completed = counts.get(user["id"], 0)
            if (user.get("rides_completed") or 0) == completed:
                continue
            self.supabase.table("users")\
                .update({"rides_completed": completed})\
                .eq("id", user["id"])\
                .execute()
            updated += 1

        if updated:
            logger.info(f"Updated ride statistics for {updated} user(s)")
        return {"users_checked": checked, "updated": updated}
