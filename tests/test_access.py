# tests/test_access.py

"""
Tests for authorization decisions.
"""

import pytest

from app.config.permissions_config import UserRole
from app.core.access import Principal, decide_any_role, decide_min_role, decide_permission, enforce
from app.core.errors import ErrorCode, Forbidden


def test_principal_always_holds_baseline_role():
    principal = Principal(id="u1", roles=["RIDER"])
    assert principal.roles == frozenset({UserRole.RIDER, UserRole.USER})
    assert not principal.is_admin


def test_admin_flags():
    assert Principal(id="a", roles=[UserRole.ADMIN]).is_admin
    root = Principal(id="r", roles=[UserRole.SUPER_ADMIN])
    assert root.is_admin and root.is_super_admin


def test_role_decision_denial_lists_required_roles():
    decision = decide_any_role(Principal(id="u1"), [UserRole.SELLER, UserRole.ADMIN])
    assert not decision
    assert decision.code == ErrorCode.ROLE_REQUIRED
    assert decision.required_roles == (UserRole.ADMIN, UserRole.SELLER)


def test_super_admin_passes_any_role_check():
    assert decide_any_role(Principal(id="r", roles=[UserRole.SUPER_ADMIN]), [UserRole.SELLER])


def test_permission_decision():
    seller = Principal(id="s", roles=[UserRole.SELLER])
    assert decide_permission(seller, "MANAGE_LISTINGS")
    denied = decide_permission(seller, "VERIFY_CLUBS")
    assert denied.code == ErrorCode.INSUFFICIENT_PERMISSIONS
    assert "VERIFY_CLUBS" in denied.reason


def test_enforce_raises_forbidden_with_roles():
    with pytest.raises(Forbidden) as exc_info:
        enforce(decide_permission(Principal(id="u1"), "MANAGE_USERS"))
    body = exc_info.value.to_dict()
    assert exc_info.value.status_code == 403
    assert body["code"] == ErrorCode.INSUFFICIENT_PERMISSIONS
    assert body["required_roles"] == ["ADMIN", "SUPER_ADMIN"]


def test_enforce_allows_silently():
    enforce(decide_permission(Principal(id="u1"), "JOIN_RIDES"))


def test_min_role_decision_follows_hierarchy():
    assert decide_min_role(Principal(id="a", roles=[UserRole.ADMIN]), UserRole.ADMIN)
    assert decide_min_role(Principal(id="r", roles=[UserRole.SUPER_ADMIN]), UserRole.ADMIN)

    denied = decide_min_role(Principal(id="o", roles=[UserRole.CLUB_OWNER, UserRole.SELLER]), UserRole.ADMIN)
    assert not denied
    assert denied.code == ErrorCode.ROLE_REQUIRED
    assert denied.required_roles == (UserRole.ADMIN, UserRole.SUPER_ADMIN)
