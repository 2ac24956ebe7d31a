# tests/test_permissions_config.py

"""
Tests for the role model and the static permission matrix.
"""

import pytest

from app.config.permissions_config import (
    PERMISSIONS,
    ClubMemberRole,
    UserRole,
    at_least,
    can_access_mobile,
    can_access_web,
    club_role_rank,
    get_permission_matrix,
    grants_permission,
    has_all_roles,
    has_any_role,
    normalize_roles,
    parse_role,
    permissions_for_roles,
)
from app.core.errors import ConfigurationError


def test_super_admin_is_listed_in_every_permission():
    for name, roles in PERMISSIONS.items():
        assert UserRole.SUPER_ADMIN in roles, name


@pytest.mark.parametrize("permission, roles, expected", [
    ("MANAGE_USERS", [UserRole.ADMIN], True),
    ("MANAGE_USERS", [UserRole.RIDER, UserRole.SELLER], False),
    ("MANAGE_ADMINS", [UserRole.ADMIN], False),
    ("MANAGE_ADMINS", [UserRole.SUPER_ADMIN], True),
    ("JOIN_RIDES", [UserRole.USER], True),
    ("JOIN_RIDES", [UserRole.ADMIN], False),
    ("MANAGE_LISTINGS", [UserRole.SELLER], True),
    ("RUN_JOBS", [UserRole.ADMIN], False),
])
def test_grants_permission(permission, roles, expected):
    assert grants_permission(permission, roles) is expected


def test_grants_permission_is_order_independent():
    roles = [UserRole.RIDER, UserRole.CLUB_OWNER, UserRole.USER]
    for name in PERMISSIONS:
        assert grants_permission(name, roles) == grants_permission(name, list(reversed(roles)))


def test_unknown_permission_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        grants_permission("LAUNCH_ROCKETS", [UserRole.SUPER_ADMIN])


def test_parse_role_accepts_lowercase_and_rejects_unknown():
    assert parse_role("rider") == UserRole.RIDER
    with pytest.raises(ConfigurationError):
        parse_role("pilot")


def test_normalize_roles_adds_baseline_and_dedupes():
    roles = normalize_roles(["RIDER", UserRole.RIDER])
    assert roles == frozenset({UserRole.RIDER, UserRole.USER})
    assert normalize_roles([]) == frozenset({UserRole.USER})


def test_at_least_uses_hierarchy_levels():
    assert at_least(UserRole.ADMIN, UserRole.CLUB_OWNER)
    assert at_least(UserRole.SELLER, UserRole.SELLER)
    assert not at_least(UserRole.RIDER, UserRole.SELLER)


def test_super_admin_overrides_role_checks():
    assert has_any_role([UserRole.SUPER_ADMIN], [UserRole.SELLER])
    assert has_all_roles([UserRole.SUPER_ADMIN], [UserRole.SELLER, UserRole.RIDER])
    assert not has_all_roles([UserRole.SELLER], [UserRole.SELLER, UserRole.RIDER])


def test_surface_access():
    assert can_access_web([UserRole.CLUB_OWNER])
    assert not can_access_web([UserRole.RIDER, UserRole.USER])
    assert can_access_mobile([UserRole.USER])
    assert not can_access_mobile([UserRole.ADMIN])


def test_club_role_ladder():
    ranks = [club_role_rank(r) for r in (
        ClubMemberRole.MEMBER, ClubMemberRole.OFFICER, ClubMemberRole.ADMIN, ClubMemberRole.FOUNDER
    )]
    assert ranks == sorted(ranks)
    assert len(set(ranks)) == 4


def test_permissions_for_roles_and_matrix_agree():
    matrix = get_permission_matrix()
    by_role = {entry["name"]: set(entry["permissions"]) for entry in matrix["roles"]}
    assert by_role["SELLER"] == set(permissions_for_roles([UserRole.SELLER]))
    assert "RUN_JOBS" in by_role["SUPER_ADMIN"]
    assert matrix["roles"][0]["name"] == "SUPER_ADMIN"
