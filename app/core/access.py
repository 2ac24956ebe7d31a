"""
Authorization decisions.

Everything here is pure: callers pass in an already-resolved Principal and get a
Decision back. `enforce` turns a denied decision into Forbidden. No state is
read or written, so a request is either fully allowed or denied before any
mutation starts.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Tuple

from app.config.permissions_config import (
    ROLE_LEVELS,
    UserRole,
    at_least,
    grants_permission,
    has_any_role,
    is_admin,
    is_super_admin,
    normalize_roles,
    roles_for_permission,
)
from app.core.errors import ErrorCode, Forbidden


@dataclass(frozen=True)
class Principal:
    id: str
    roles: FrozenSet[UserRole] = field(default_factory=frozenset)
    email: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "roles", normalize_roles(self.roles))

    @property
    def is_admin(self) -> bool:
        return is_admin(self.roles)

    @property
    def is_super_admin(self) -> bool:
        return is_super_admin(self.roles)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    required_roles: Tuple[UserRole, ...] = ()
    reason: str = ""
    code: str = ErrorCode.FORBIDDEN

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def _sorted_roles(roles: Iterable[UserRole]) -> Tuple[UserRole, ...]:
    return tuple(sorted(set(roles), key=lambda r: r.value))


def decide_any_role(principal: Principal, allowed: Iterable[UserRole]) -> Decision:
    allowed = list(allowed)
    if has_any_role(principal.roles, allowed):
        return ALLOW
    names = ", ".join(r.value for r in _sorted_roles(allowed))
    return Decision(
        allowed=False,
        required_roles=_sorted_roles(allowed),
        reason=f"This action requires one of the following roles: {names}",
        code=ErrorCode.ROLE_REQUIRED,
    )


def decide_min_role(principal: Principal, minimum: UserRole) -> Decision:
    """Allow if any held role sits at or above `minimum` in the hierarchy."""
    if any(at_least(role, minimum) for role in principal.roles):
        return ALLOW
    required = [role for role in ROLE_LEVELS if at_least(role, minimum)]
    return Decision(
        allowed=False,
        required_roles=_sorted_roles(required),
        reason=f"This action requires the {minimum.value} role or higher",
        code=ErrorCode.ROLE_REQUIRED,
    )


def decide_permission(principal: Principal, permission: str) -> Decision:
    if grants_permission(permission, principal.roles):
        return ALLOW
    return Decision(
        allowed=False,
        required_roles=_sorted_roles(roles_for_permission(permission)),
        reason=f"Insufficient permissions. Required: {permission}",
        code=ErrorCode.INSUFFICIENT_PERMISSIONS,
    )


def enforce(decision: Decision) -> None:
    if not decision.allowed:
        raise Forbidden(decision.reason, decision.code, required_roles=decision.required_roles)
