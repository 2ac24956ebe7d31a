"""
Roles and Permissions Configuration
This config defines the platform roles, their hierarchy levels, the permission matrix
and the club membership ladder.

Users can hold several roles at once (e.g. CLUB_OWNER + SELLER) and every user
implicitly holds USER. Permission checks are plain set membership against each
permission's explicit role list; the hierarchy levels are only used by coarse
`at_least` comparisons.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List

from app.core.errors import ConfigurationError


class UserRole(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    CLUB_OWNER = "CLUB_OWNER"
    SELLER = "SELLER"
    RIDER = "RIDER"
    USER = "USER"


class ClubMemberRole(str, Enum):
    MEMBER = "MEMBER"
    OFFICER = "OFFICER"
    ADMIN = "ADMIN"
    FOUNDER = "FOUNDER"


BASELINE_ROLE = UserRole.USER

ROLE_LEVELS: Dict[UserRole, int] = {
    UserRole.SUPER_ADMIN: 100,
    UserRole.ADMIN: 80,
    UserRole.CLUB_OWNER: 50,
    UserRole.SELLER: 40,
    UserRole.RIDER: 20,
    UserRole.USER: 10,
}

CLUB_ROLE_ORDER: Dict[ClubMemberRole, int] = {
    ClubMemberRole.MEMBER: 0,
    ClubMemberRole.OFFICER: 1,
    ClubMemberRole.ADMIN: 2,
    ClubMemberRole.FOUNDER: 3,
}

# Roles that may use the web admin / manager portal
WEB_ACCESS_ROLES: List[UserRole] = [
    UserRole.SUPER_ADMIN,
    UserRole.ADMIN,
    UserRole.CLUB_OWNER,
    UserRole.SELLER,
]

# Roles the mobile app is designed for
MOBILE_ACCESS_ROLES: List[UserRole] = [
    UserRole.USER,
    UserRole.RIDER,
    UserRole.CLUB_OWNER,
    UserRole.SELLER,
]

_MOBILE_ROLES = [UserRole.USER, UserRole.RIDER, UserRole.CLUB_OWNER, UserRole.SELLER]

# Permission -> roles that grant it. SUPER_ADMIN is listed everywhere.
PERMISSIONS: Dict[str, FrozenSet[UserRole]] = {
    # Admin
    "VIEW_ADMIN_DASHBOARD": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN}),
    "MANAGE_USERS": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN}),
    "MANAGE_ADMINS": frozenset({UserRole.SUPER_ADMIN}),
    "VIEW_METRICS": frozenset({UserRole.SUPER_ADMIN}),
    "MODERATE_CONTENT": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN}),
    "VERIFY_CLUBS": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN}),
    "RUN_JOBS": frozenset({UserRole.SUPER_ADMIN}),

    # Club owner
    "MANAGE_OWN_CLUBS": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.CLUB_OWNER}),
    "MANAGE_CLUB_RIDES": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.CLUB_OWNER}),
    "MANAGE_CLUB_MEMBERS": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.CLUB_OWNER}),

    # Seller
    "MANAGE_LISTINGS": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.SELLER}),

    # Rider / user (mobile)
    "JOIN_RIDES": frozenset({UserRole.SUPER_ADMIN, *_MOBILE_ROLES}),
    "JOIN_CLUBS": frozenset({UserRole.SUPER_ADMIN, *_MOBILE_ROLES}),
    "CREATE_RIDES": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, *_MOBILE_ROLES}),
    "CREATE_CLUBS": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, *_MOBILE_ROLES}),
    "CREATE_LISTINGS": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, *_MOBILE_ROLES}),
    "CREATE_POSTS": frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, *_MOBILE_ROLES}),
}


def parse_role(value) -> UserRole:
    """Coerce a stored/role-name value to UserRole; unknown names are a configuration error."""
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(str(value).upper())
    except ValueError:
        raise ConfigurationError(f"Unknown role: {value!r}")


def parse_club_role(value) -> ClubMemberRole:
    if isinstance(value, ClubMemberRole):
        return value
    try:
        return ClubMemberRole(str(value).upper())
    except ValueError:
        raise ConfigurationError(f"Unknown club role: {value!r}")


def normalize_roles(roles: Iterable) -> FrozenSet[UserRole]:
    """Deduplicate and always include the baseline role."""
    return frozenset({parse_role(r) for r in roles} | {BASELINE_ROLE})


def level(role: UserRole) -> int:
    return ROLE_LEVELS[parse_role(role)]


def at_least(role: UserRole, required_role: UserRole) -> bool:
    return level(role) >= level(required_role)


def has_any_role(user_roles: Iterable[UserRole], required_roles: Iterable[UserRole]) -> bool:
    held = set(user_roles)
    if UserRole.SUPER_ADMIN in held:
        return True
    return any(r in held for r in required_roles)


def has_all_roles(user_roles: Iterable[UserRole], required_roles: Iterable[UserRole]) -> bool:
    held = set(user_roles)
    if UserRole.SUPER_ADMIN in held:
        return True
    return all(r in held for r in required_roles)


def is_super_admin(user_roles: Iterable[UserRole]) -> bool:
    return UserRole.SUPER_ADMIN in set(user_roles)


def is_admin(user_roles: Iterable[UserRole]) -> bool:
    held = set(user_roles)
    return UserRole.SUPER_ADMIN in held or UserRole.ADMIN in held


def can_access_web(user_roles: Iterable[UserRole]) -> bool:
    return has_any_role(user_roles, WEB_ACCESS_ROLES)


def can_access_mobile(user_roles: Iterable[UserRole]) -> bool:
    return has_any_role(user_roles, MOBILE_ACCESS_ROLES)


def roles_for_permission(permission: str) -> FrozenSet[UserRole]:
    try:
        return PERMISSIONS[permission]
    except KeyError:
        raise ConfigurationError(f"Unknown permission: {permission!r}")


def grants_permission(permission: str, roles: Iterable[UserRole]) -> bool:
    """True iff any held role is in the permission's grant set."""
    granting = roles_for_permission(permission)
    return not granting.isdisjoint(roles)


def permissions_for_roles(roles: Iterable[UserRole]) -> List[str]:
    held = frozenset(roles)
    return sorted(name for name, granting in PERMISSIONS.items() if not granting.isdisjoint(held))


def club_role_rank(role) -> int:
    return CLUB_ROLE_ORDER[parse_club_role(role)]


def get_permission_matrix():
    """
    Returns the matrix in a serializable form for the admin UI:
    {
        "permissions": [{"name": "MANAGE_USERS", "roles": ["ADMIN", "SUPER_ADMIN"]}, ...],
        "roles": [{"name": "ADMIN", "level": 80, "permissions": [...]}, ...]
    }
    """
    permissions = [
        {"name": name, "roles": sorted(r.value for r in granting)}
        for name, granting in PERMISSIONS.items()
    ]
    roles = [
        {"name": role.value, "level": ROLE_LEVELS[role], "permissions": permissions_for_roles([role])}
        for role in sorted(ROLE_LEVELS, key=ROLE_LEVELS.get, reverse=True)
    ]
    return {
        "permissions": permissions,
        "roles": roles
    }
