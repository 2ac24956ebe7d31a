"""
Ownership and club membership resolution.

Each check does one lookup for the resource (and, for clubs, one for the
caller's membership row). A missing resource is NotFound, never a silent deny.
"""

from dataclasses import dataclass
from typing import Dict, Optional
import logging

from supabase import Client

from app.config.permissions_config import ClubMemberRole, club_role_rank, parse_club_role
from app.core.access import Principal
from app.core.errors import ConfigurationError, ErrorCode, Forbidden, NotFound
from app.database.supabase_client import first_row

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceSpec:
    table: str
    owner_field: str
    label: str
    not_found_code: str


RESOURCE_KINDS: Dict[str, ResourceSpec] = {
    "ride": ResourceSpec("rides", "creator_id", "Ride", ErrorCode.RIDE_NOT_FOUND),
    "club": ResourceSpec("clubs", "owner_id", "Club", ErrorCode.CLUB_NOT_FOUND),
    "listing": ResourceSpec("marketplace_listings", "seller_id", "Listing", ErrorCode.LISTING_NOT_FOUND),
    "post": ResourceSpec("posts", "author_id", "Post", ErrorCode.POST_NOT_FOUND),
}

# Membership roles that may act on the club itself (update settings etc.)
CLUB_MANAGER_ROLES = (ClubMemberRole.ADMIN, ClubMemberRole.FOUNDER)


def _spec(kind: str) -> ResourceSpec:
    try:
        return RESOURCE_KINDS[kind]
    except KeyError:
        raise ConfigurationError(f"Unknown resource kind: {kind}")


class OwnershipResolver:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_owner_id(self, kind: str, resource_id: str) -> str:
        spec = _spec(kind)
        result = self.supabase.table(spec.table)\
            .select(f"id, {spec.owner_field}")\
            .eq("id", resource_id)\
            .maybe_single()\
            .execute()
        row = first_row(result)
        if row is None:
            raise NotFound(f"{spec.label} not found", spec.not_found_code)
        return row[spec.owner_field]

    def get_membership_role(self, club_id: str, user_id: str) -> Optional[ClubMemberRole]:
        result = self.supabase.table("club_members")\
            .select("role")\
            .eq("club_id", club_id)\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        row = first_row(result)
        return parse_club_role(row["role"]) if row else None

    def can_act_on(self, principal: Principal, kind: str, resource_id: str) -> bool:
        """Admins always; otherwise the owner; for clubs also ADMIN/FOUNDER members."""
        _spec(kind)
        if principal.is_admin:
            return True
        if self.get_owner_id(kind, resource_id) == principal.id:
            return True
        if kind == "club":
            membership = self.get_membership_role(resource_id, principal.id)
            return membership in CLUB_MANAGER_ROLES
        return False

    def require_ownership_or_admin(self, principal: Principal, kind: str, resource_id: str) -> None:
        if not self.can_act_on(principal, kind, resource_id):
            raise Forbidden(
                "You don't have permission to modify this resource",
                ErrorCode.INSUFFICIENT_PERMISSIONS,
            )

    def resolve_club_role(self, principal: Principal, club_id: str) -> Optional[ClubMemberRole]:
        """Effective membership role; the club owner is always FOUNDER even without a row."""
        if self.get_owner_id("club", club_id) == principal.id:
            return ClubMemberRole.FOUNDER
        return self.get_membership_role(club_id, principal.id)

    def require_club_role(
        self,
        principal: Principal,
        club_id: str,
        min_role: ClubMemberRole = ClubMemberRole.MEMBER,
    ) -> Optional[ClubMemberRole]:
        """Returns the caller's effective club role, or None for system admins without one."""
        min_role = parse_club_role(min_role)
        if principal.is_admin:
            # Still 404 on a missing club so admins get the same failure mode as everyone else
            owner_id = self.get_owner_id("club", club_id)
            if owner_id == principal.id:
                return ClubMemberRole.FOUNDER
            return self.get_membership_role(club_id, principal.id)

        club_role = self.resolve_club_role(principal, club_id)
        if club_role is None:
            raise Forbidden("You are not a member of this club")
        if club_role_rank(club_role) < club_role_rank(min_role):
            raise Forbidden(f"This action requires {min_role.value} role or higher in the club")
        return club_role
