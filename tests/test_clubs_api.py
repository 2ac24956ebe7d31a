# tests/test_clubs_api.py

"""
Tests for club endpoints and club-role enforcement.
"""

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from tests.fakes import bearer

CLUBS = "/api/v1/clubs"


@pytest.fixture
def club(db, users):
    """Club owned by `owner`, with a member, an officer, a club admin and a founder row."""
    db.add_user("member", "RIDER")
    db.add_user("officer", "RIDER")
    db.add_user("club-admin", "RIDER")
    db.add_user("cofounder", "RIDER")
    db.seed("clubs", {"id": "club-1", "name": "Night Riders", "owner_id": "owner"})
    db.seed(
        "club_members",
        {"club_id": "club-1", "user_id": "member", "role": "MEMBER"},
        {"club_id": "club-1", "user_id": "officer", "role": "OFFICER"},
        {"club_id": "club-1", "user_id": "club-admin", "role": "ADMIN"},
        {"club_id": "club-1", "user_id": "cofounder", "role": "FOUNDER"},
    )
    return "club-1"


def member_ids(db):
    return {m["user_id"] for m in db.rows("club_members")}


def test_create_club_grants_club_owner(client: TestClient, db, users):
    response = client.post(CLUBS, json={"name": "Dawn Patrol"}, headers=bearer(users["plain"]))

    assert response.status_code == 201
    assert response.json()["owner_id"] == "plain"
    roles = [r["role"] for r in db.rows("user_role_assignments") if r["user_id"] == "plain"]
    assert roles == ["CLUB_OWNER"]
    # The owner is FOUNDER without a membership row
    assert db.rows("club_members") == []


def test_create_club_twice_keeps_single_role_row(client: TestClient, db, users):
    for name in ("One", "Two"):
        client.post(CLUBS, json={"name": name}, headers=bearer(users["owner"]))
    roles = [r for r in db.rows("user_role_assignments") if r["user_id"] == "owner"]
    assert len(roles) == 1


@pytest.mark.parametrize("caller, expected", [
    ("rider", 403),
    ("owner", 204),
    ("admin", 204),
])
def test_delete_club_scenarios(client: TestClient, db, users, club, caller, expected):
    response = client.delete(f"{CLUBS}/{club}", headers=bearer(users[caller]))

    assert response.status_code == expected
    if expected == 204:
        assert db.rows("clubs") == []
        # FOUNDER rows go with the club
        assert db.rows("club_members") == []
    else:
        assert response.json()["code"] == "FORBIDDEN"
        assert len(db.rows("club_members")) == 4


def test_delete_missing_club_is_not_found(client: TestClient, users):
    response = client.delete(f"{CLUBS}/missing", headers=bearer(users["admin"]))
    assert response.status_code == 404
    assert response.json()["code"] == "CLUB_NOT_FOUND"


@pytest.mark.parametrize("caller", ["owner", "admin", "root", "club-admin"])
def test_founder_row_can_never_be_removed(client: TestClient, db, users, club, caller):
    token = users.get(caller, f"token-{caller}")
    response = client.delete(f"{CLUBS}/{club}/members/cofounder", headers=bearer(token))

    assert response.status_code == 403
    assert "cofounder" in member_ids(db)


def test_club_admin_removes_member(client: TestClient, db, club):
    response = client.delete(f"{CLUBS}/{club}/members/member", headers=bearer("token-club-admin"))
    assert response.status_code == 204
    assert "member" not in member_ids(db)


def test_club_admin_cannot_remove_peer_admin(client: TestClient, db, club):
    db.seed("club_members", {"club_id": club, "user_id": "other-admin", "role": "ADMIN"})
    response = client.delete(f"{CLUBS}/{club}/members/other-admin", headers=bearer("token-club-admin"))
    assert response.status_code == 403


def test_officer_cannot_remove_members(client: TestClient, club):
    response = client.delete(f"{CLUBS}/{club}/members/member", headers=bearer("token-officer"))
    assert response.status_code == 403
    assert "ADMIN" in response.json()["detail"]


def test_owner_promotes_member(client: TestClient, db, users, club):
    response = client.patch(
        f"{CLUBS}/{club}/members/member", json={"role": "ADMIN"}, headers=bearer(users["owner"])
    )
    assert response.status_code == 200
    assert response.json()["role"] == "ADMIN"


def test_club_admin_cannot_promote_to_own_rank(client: TestClient, club):
    response = client.patch(
        f"{CLUBS}/{club}/members/member", json={"role": "ADMIN"}, headers=bearer("token-club-admin")
    )
    assert response.status_code == 403


def test_club_admin_promotes_to_officer(client: TestClient, club):
    response = client.patch(
        f"{CLUBS}/{club}/members/member", json={"role": "OFFICER"}, headers=bearer("token-club-admin")
    )
    assert response.status_code == 200
    assert response.json()["role"] == "OFFICER"


def test_founder_role_cannot_be_assigned(client: TestClient, users, club):
    response = client.patch(
        f"{CLUBS}/{club}/members/member", json={"role": "FOUNDER"}, headers=bearer(users["owner"])
    )
    assert response.status_code == 403


def test_join_notifies_and_rejects_duplicates(client: TestClient, db, users, club):
    first = client.post(f"{CLUBS}/{club}/join", headers=bearer(users["rider"]))
    assert first.status_code == 201
    assert first.json()["role"] == "MEMBER"

    second = client.post(f"{CLUBS}/{club}/join", headers=bearer(users["rider"]))
    assert second.status_code == 409
    assert second.json()["code"] == "ALREADY_EXISTS"


def test_founder_cannot_leave(client: TestClient, db, club):
    response = client.delete(f"{CLUBS}/{club}/leave", headers=bearer("token-cofounder"))
    assert response.status_code == 403
    assert "cofounder" in member_ids(db)


def test_member_leaves(client: TestClient, db, club):
    response = client.delete(f"{CLUBS}/{club}/leave", headers=bearer("token-member"))
    assert response.status_code == 204
    assert "member" not in member_ids(db)


def test_members_list_is_for_members(client: TestClient, users, club):
    assert client.get(f"{CLUBS}/{club}/members", headers=bearer(users["rider"])).status_code == 403
    response = client.get(f"{CLUBS}/{club}/members", headers=bearer("token-member"))
    assert response.status_code == 200
    assert len(response.json()) == 4


def test_update_club_by_club_admin(client: TestClient, club):
    response = client.patch(f"{CLUBS}/{club}", json={"description": "Late rides"}, headers=bearer("token-club-admin"))
    assert response.status_code == 200
    assert response.json()["description"] == "Late rides"
    assert response.json()["owner_id"] == "owner"


def test_update_club_by_officer_is_forbidden(client: TestClient, club):
    response = client.patch(f"{CLUBS}/{club}", json={"name": "Mine"}, headers=bearer("token-officer"))
    assert response.status_code == 403


@pytest.mark.parametrize("caller", ["root", "admin", "club-admin"])
def test_owner_cannot_be_removed(client: TestClient, db, users, club, caller):
    token = users.get(caller, f"token-{caller}")
    response = client.delete(f"{CLUBS}/{club}/members/owner", headers=bearer(token))

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"
    assert db.rows("clubs")[0]["owner_id"] == "owner"


def test_owner_role_cannot_be_changed(client: TestClient, users, club):
    response = client.patch(
        f"{CLUBS}/{club}/members/owner", json={"role": "MEMBER"}, headers=bearer(users["root"])
    )
    assert response.status_code == 403


def test_owner_cannot_leave(client: TestClient, db, users, club):
    response = client.delete(f"{CLUBS}/{club}/leave", headers=bearer(users["owner"]))

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"
    assert len(db.rows("clubs")) == 1


def test_concurrent_duplicate_join_is_conflict(client: TestClient, db, users, club):
    # The membership row lands between our existence check and the insert
    db.failures[("club_members", "insert")] = APIError(
        {"code": "23505", "message": "duplicate key value violates unique constraint", "details": None, "hint": None}
    )

    response = client.post(f"{CLUBS}/{club}/join", headers=bearer(users["rider"]))

    assert response.status_code == 409
    assert response.json()["code"] == "ALREADY_EXISTS"


def test_other_insert_errors_are_not_conflicts(client: TestClient, db, users, club):
    db.failures[("club_members", "insert")] = APIError(
        {"code": "23503", "message": "foreign key violation", "details": None, "hint": None}
    )

    with pytest.raises(APIError):
        client.post(f"{CLUBS}/{club}/join", headers=bearer(users["rider"]))
    assert "rider" not in member_ids(db)
