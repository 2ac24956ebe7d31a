"""
Core dependencies for route protection and permission checking
"""

from dataclasses import dataclass
from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config.permissions_config import (
    ClubMemberRole,
    UserRole,
    WEB_ACCESS_ROLES,
    roles_for_permission,
)
from app.core.access import Principal, decide_any_role, decide_min_role, decide_permission, enforce
from app.core.errors import NotFound, Unauthenticated
from app.core.ownership import OwnershipResolver
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService
from app.modules.roles.service import RoleService
from supabase import Client
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 from us rather than FastAPI's default 403
security = HTTPBearer(auto_error=False)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Request-scoped cache for access data. Never shared across requests."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_role_service(supabase: Client = Depends(get_supabase)) -> RoleService:
    return RoleService(supabase)


def get_ownership_resolver(supabase: Client = Depends(get_supabase)) -> OwnershipResolver:
    return OwnershipResolver(supabase)


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract the authenticated identity from the bearer token"""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    return auth_service.get_current_user(credentials.credentials)


def get_current_principal(
    request: Request,
    identity: dict = Depends(get_current_identity),
    role_service: RoleService = Depends(get_role_service)
) -> Principal:
    """Identity plus the role set held right now. Resolved once per request."""
    cache = _get_request_cache(request)
    if "principal" in cache:
        return cache["principal"]
    try:
        roles = role_service.resolve_roles(identity["id"])
    except NotFound:
        raise Unauthenticated("User account not found")
    principal = Principal(id=identity["id"], roles=roles, email=identity.get("email"))
    cache["principal"] = principal
    return principal


def require_any_role(*allowed_roles: UserRole):
    """Factory: allow if the caller holds any of the roles (SUPER_ADMIN always passes)"""
    def check_roles(principal: Principal = Depends(get_current_principal)) -> Principal:
        enforce(decide_any_role(principal, allowed_roles))
        return principal
    return check_roles


def require_min_role(minimum: UserRole):
    """Factory: allow if the caller holds `minimum` or any role ranked above it"""
    def check_min_role(principal: Principal = Depends(get_current_principal)) -> Principal:
        enforce(decide_min_role(principal, minimum))
        return principal
    return check_min_role


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    # Unknown names fail at import time, not on the first request
    roles_for_permission(required_permission)

    def check_permission(principal: Principal = Depends(get_current_principal)) -> Principal:
        enforce(decide_permission(principal, required_permission))
        return principal
    return check_permission


def require_ownership_or_admin(resource_kind: str, resource_id_param: str = "id"):
    """Factory: caller must own the resource (or manage the club), or be a system admin"""
    def check_ownership(
        request: Request,
        principal: Principal = Depends(get_current_principal),
        resolver: OwnershipResolver = Depends(get_ownership_resolver)
    ) -> Principal:
        resource_id = request.path_params[resource_id_param]
        resolver.require_ownership_or_admin(principal, resource_kind, resource_id)
        return principal
    return check_ownership


@dataclass(frozen=True)
class ClubAccess:
    principal: Principal
    club_id: str
    club_role: Optional[ClubMemberRole]

    @property
    def acting_role(self) -> Optional[ClubMemberRole]:
        """Role used for in-club rank checks; None lets system admins act on any non-founder."""
        return None if self.principal.is_admin else self.club_role


def require_club_role(min_role: ClubMemberRole = ClubMemberRole.MEMBER, club_id_param: str = "club_id"):
    """Factory: caller needs at least min_role in the club; owner counts as FOUNDER, admins bypass"""
    def check_club_role(
        request: Request,
        principal: Principal = Depends(get_current_principal),
        resolver: OwnershipResolver = Depends(get_ownership_resolver)
    ) -> ClubAccess:
        club_id = request.path_params[club_id_param]
        club_role = resolver.require_club_role(principal, club_id, min_role)
        return ClubAccess(principal=principal, club_id=club_id, club_role=club_role)
    return check_club_role


# Pre-built guards
require_admin = require_min_role(UserRole.ADMIN)
require_super_admin = require_min_role(UserRole.SUPER_ADMIN)
require_web_access = require_any_role(*WEB_ACCESS_ROLES)
