from supabase import Client
from typing import FrozenSet, List
import logging

from app.config.permissions_config import UserRole, normalize_roles, parse_role, BASELINE_ROLE
from app.core.errors import DatabaseError, ErrorCode, NotFound
from app.database.supabase_client import first_row

logger = logging.getLogger(__name__)


class RoleService:
    """Reads and grants platform roles. user_role_assignments is the only source of truth."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def user_exists(self, user_id: str) -> bool:
        result = self.supabase.table("users")\
            .select("id")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        return first_row(result) is not None

    def get_assigned_roles(self, user_id: str) -> List[UserRole]:
        """Explicit assignments only, without the implicit baseline role."""
        result = self.supabase.table("user_role_assignments")\
            .select("role")\
            .eq("user_id", user_id)\
            .execute()
        return [parse_role(row["role"]) for row in (result.data or [])]

    def resolve_roles(self, user_id: str) -> FrozenSet[UserRole]:
        """Role set for a principal; never empty. Raises NotFound for unknown users."""
        try:
            if not self.user_exists(user_id):
                raise NotFound("User not found", ErrorCode.USER_NOT_FOUND)
            return normalize_roles(self.get_assigned_roles(user_id))
        except NotFound:
            raise
        except Exception as e:
            logger.error(f"Error resolving roles for user {user_id}: {e}")
            raise DatabaseError("Failed to load user roles")

    def grant_role(self, user_id: str, role: UserRole) -> None:
        """Create-if-absent; retries and concurrent duplicates leave a single row."""
        role = parse_role(role)
        if role == BASELINE_ROLE:
            return
        self.supabase.table("user_role_assignments")\
            .upsert(
                {"user_id": user_id, "role": role.value},
                on_conflict="user_id,role",
                ignore_duplicates=True,
            )\
            .execute()
        logger.info(f"Ensured role {role.value} for user {user_id}")

    def revoke_role(self, user_id: str, role: UserRole) -> bool:
        """Explicit operator action only; the system never revokes roles on its own."""
        role = parse_role(role)
        result = self.supabase.table("user_role_assignments")\
            .delete()\
            .eq("user_id", user_id)\
            .eq("role", role.value)\
            .execute()
        return len(result.data or []) > 0
