from supabase import Client
from app.modules.clubs.schemas import (
    ClubCreate, ClubUpdate, ClubResponse, ClubMemberResponse
)
from app.modules.roles.service import RoleService
from app.config.permissions_config import ClubMemberRole, UserRole, club_role_rank, parse_club_role
from app.core.errors import AppError, Conflict, DatabaseError, ErrorCode, Forbidden, NotFound
from app.core.timeutils import to_iso, utcnow
from app.database.supabase_client import first_row, is_unique_violation
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


def _check_rank(actor_role: Optional[ClubMemberRole], target_role: ClubMemberRole, message: str) -> None:
    """Non-founders may only act on members ranked strictly below them. None means a system admin."""
    if actor_role is None or actor_role == ClubMemberRole.FOUNDER:
        return
    if club_role_rank(target_role) >= club_role_rank(actor_role):
        raise Forbidden(message)


class ClubService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_row(self, club_id: str) -> dict:
        result = self.supabase.table("clubs")\
            .select("*")\
            .eq("id", club_id)\
            .maybe_single()\
            .execute()
        row = first_row(result)
        if row is None:
            raise NotFound("Club not found", ErrorCode.CLUB_NOT_FOUND)
        return row

    def _get_member_row(self, club_id: str, user_id: str) -> Optional[dict]:
        result = self.supabase.table("club_members")\
            .select("*")\
            .eq("club_id", club_id)\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        return first_row(result)

    def create_club(self, club_data: ClubCreate, owner_id: str) -> ClubResponse:
        """Create a club; the creator becomes its owner and gains CLUB_OWNER"""
        try:
            now = to_iso(utcnow())
            result = self.supabase.table("clubs").insert({
                **club_data.model_dump(),
                "owner_id": owner_id,
                "verified": False,
                "created_at": now,
                "updated_at": now,
            }).execute()
            if not result.data:
                raise DatabaseError("Failed to create club")

            RoleService(self.supabase).grant_role(owner_id, UserRole.CLUB_OWNER)
            return ClubResponse(**result.data[0])
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error creating club: {e}")
            raise DatabaseError("Failed to create club")

    def get_club_by_id(self, club_id: str) -> ClubResponse:
        return ClubResponse(**self._get_row(club_id))

    def list_clubs(
        self,
        include_private: bool = False,
        owner_id: Optional[str] = None,
        verified: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List[ClubResponse]:
        try:
            query = self.supabase.table("clubs").select("*")
            if not include_private:
                query = query.eq("is_public", True)
            if owner_id:
                query = query.eq("owner_id", owner_id)
            if verified is not None:
                query = query.eq("verified", verified)
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [ClubResponse(**club) for club in (result.data or [])]
        except Exception as e:
            logger.error(f"Error listing clubs: {e}")
            raise DatabaseError("Failed to list clubs")

    def update_club(self, club_id: str, club_data: ClubUpdate) -> ClubResponse:
        update_data = club_data.model_dump(exclude_unset=True)
        update_data["updated_at"] = to_iso(utcnow())
        result = self.supabase.table("clubs")\
            .update(update_data)\
            .eq("id", club_id)\
            .execute()
        if not result.data:
            raise NotFound("Club not found", ErrorCode.CLUB_NOT_FOUND)
        return ClubResponse(**result.data[0])

    def set_verified(self, club_id: str, verified: bool) -> ClubResponse:
        result = self.supabase.table("clubs")\
            .update({"verified": verified, "updated_at": to_iso(utcnow())})\
            .eq("id", club_id)\
            .execute()
        if not result.data:
            raise NotFound("Club not found", ErrorCode.CLUB_NOT_FOUND)
        return ClubResponse(**result.data[0])

    def delete_club(self, club_id: str) -> bool:
        """Delete the club with every membership row, FOUNDER rows included"""
        self._get_row(club_id)
        self.supabase.table("club_members")\
            .delete()\
            .eq("club_id", club_id)\
            .execute()
        result = self.supabase.table("clubs")\
            .delete()\
            .eq("id", club_id)\
            .execute()
        logger.info(f"Club {club_id} deleted")
        return len(result.data or []) > 0

    def join_club(self, club_id: str, user_id: str) -> ClubMemberResponse:
        club = self._get_row(club_id)
        if club["owner_id"] == user_id:
            raise Conflict("You already own this club", ErrorCode.ALREADY_EXISTS)
        if self._get_member_row(club_id, user_id):
            raise Conflict("You are already a member of this club", ErrorCode.ALREADY_EXISTS)

        try:
            result = self.supabase.table("club_members").insert({
                "club_id": club_id,
                "user_id": user_id,
                "role": ClubMemberRole.MEMBER.value,
                "joined_at": to_iso(utcnow()),
            }).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise Conflict("You are already a member of this club", ErrorCode.ALREADY_EXISTS)
            raise
        if not result.data:
            raise DatabaseError("Failed to join club")
        return ClubMemberResponse(**result.data[0])

    def leave_club(self, club_id: str, user_id: str) -> bool:
        if self._get_row(club_id)["owner_id"] == user_id:
            raise Forbidden("The club owner cannot leave the club; delete the club instead")
        member = self._get_member_row(club_id, user_id)
        if member is None:
            raise NotFound("You are not a member of this club")
        if parse_club_role(member["role"]) == ClubMemberRole.FOUNDER:
            raise Forbidden("Founders cannot leave the club; delete the club instead")
        self._delete_non_founder(club_id, user_id)
        return True

    def list_members(self, club_id: str) -> List[ClubMemberResponse]:
        result = self.supabase.table("club_members")\
            .select("*")\
            .eq("club_id", club_id)\
            .order("joined_at")\
            .execute()
        return [ClubMemberResponse(**m) for m in (result.data or [])]

    def update_member_role(
        self,
        club_id: str,
        user_id: str,
        new_role: ClubMemberRole,
        actor_role: Optional[ClubMemberRole]
    ) -> ClubMemberResponse:
        new_role = parse_club_role(new_role)
        if new_role == ClubMemberRole.FOUNDER:
            raise Forbidden("The FOUNDER role cannot be assigned")
        if self._get_row(club_id)["owner_id"] == user_id:
            raise Forbidden("The club owner's role cannot be changed")
        member = self._get_member_row(club_id, user_id)
        if member is None:
            raise NotFound("Member not found")
        current_role = parse_club_role(member["role"])
        if current_role == ClubMemberRole.FOUNDER:
            raise Forbidden("A FOUNDER's role cannot be changed")
        _check_rank(actor_role, current_role, "You cannot change the role of a member ranked at or above you")
        _check_rank(actor_role, new_role, "You cannot assign a role at or above your own")

        result = self.supabase.table("club_members")\
            .update({"role": new_role.value})\
            .eq("club_id", club_id)\
            .eq("user_id", user_id)\
            .neq("role", ClubMemberRole.FOUNDER.value)\
            .execute()
        if not result.data:
            raise NotFound("Member not found")
        return ClubMemberResponse(**result.data[0])

    def remove_member(self, club_id: str, user_id: str, actor_role: Optional[ClubMemberRole]) -> bool:
        """Remove a member. FOUNDER rows are refused whatever the caller's role."""
        if self._get_row(club_id)["owner_id"] == user_id:
            raise Forbidden("The club owner cannot be removed from the club")
        member = self._get_member_row(club_id, user_id)
        if member is None:
            raise NotFound("Member not found")
        target_role = parse_club_role(member["role"])
        if target_role == ClubMemberRole.FOUNDER:
            raise Forbidden("A FOUNDER cannot be removed from the club")
        _check_rank(actor_role, target_role, "You cannot remove a member ranked at or above you")
        self._delete_non_founder(club_id, user_id)
        logger.info(f"Removed user {user_id} from club {club_id}")
        return True

    def _delete_non_founder(self, club_id: str, user_id: str) -> None:
        result = self.supabase.table("club_members")\
            .delete()\
            .eq("club_id", club_id)\
            .eq("user_id", user_id)\
            .neq("role", ClubMemberRole.FOUNDER.value)\
            .execute()
        if not result.data:
            raise NotFound("Member not found")
