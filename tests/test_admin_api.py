# tests/test_admin_api.py

"""
Tests for operator endpoints: role grants, club verification and jobs.
"""

import pytest
from apscheduler.triggers.interval import IntervalTrigger
from fastapi.testclient import TestClient

from app.core.scheduler import JobScheduler, get_job_scheduler
from app.main import app as fastapi_app
from tests.fakes import bearer

ADMIN = "/api/v1/admin"


@pytest.fixture
def jobs(client):
    scheduler = JobScheduler()
    scheduler.register("tidy", lambda: {"deleted": 2}, IntervalTrigger(minutes=5))

    def explode():
        raise RuntimeError("store unavailable")

    scheduler.register("explode", explode, IntervalTrigger(minutes=5))
    fastapi_app.dependency_overrides[get_job_scheduler] = lambda: scheduler
    return scheduler


def roles_of(db, user_id):
    return sorted(r["role"] for r in db.rows("user_role_assignments") if r["user_id"] == user_id)


def test_mobile_only_roles_are_kept_out_of_the_console(client: TestClient, users):
    response = client.get(f"{ADMIN}/rides", headers=bearer(users["rider"]))
    assert response.status_code == 403
    body = response.json()
    assert body["code"] == "ROLE_REQUIRED"
    assert body["required_roles"] == ["ADMIN", "CLUB_OWNER", "SELLER", "SUPER_ADMIN"]


def test_non_admin_cannot_assign_roles(client: TestClient, users):
    response = client.post(f"{ADMIN}/users/plain/roles", json={"role": "SELLER"}, headers=bearer(users["owner"]))
    assert response.status_code == 403
    body = response.json()
    assert body["code"] == "INSUFFICIENT_PERMISSIONS"
    assert body["required_roles"] == ["ADMIN", "SUPER_ADMIN"]


def test_admin_grants_role_idempotently(client: TestClient, db, users):
    for _ in range(2):
        response = client.post(f"{ADMIN}/users/plain/roles", json={"role": "SELLER"}, headers=bearer(users["admin"]))
        assert response.status_code == 200
    assert roles_of(db, "plain") == ["SELLER"]
    assert response.json()["roles"] == ["SELLER", "USER"]


def test_admin_cannot_grant_admin(client: TestClient, db, users):
    response = client.post(f"{ADMIN}/users/plain/roles", json={"role": "ADMIN"}, headers=bearer(users["admin"]))
    assert response.status_code == 403
    assert roles_of(db, "plain") == []


def test_super_admin_grants_admin(client: TestClient, db, users):
    response = client.post(f"{ADMIN}/users/plain/roles", json={"role": "ADMIN"}, headers=bearer(users["root"]))
    assert response.status_code == 200
    assert roles_of(db, "plain") == ["ADMIN"]


def test_grant_to_unknown_user(client: TestClient, users):
    response = client.post(f"{ADMIN}/users/nobody/roles", json={"role": "SELLER"}, headers=bearer(users["admin"]))
    assert response.status_code == 404
    assert response.json()["code"] == "USER_NOT_FOUND"


def test_unknown_role_is_rejected(client: TestClient, users):
    response = client.post(f"{ADMIN}/users/plain/roles", json={"role": "PILOT"}, headers=bearer(users["admin"]))
    assert response.status_code == 422


def test_verify_club(client: TestClient, db, users):
    db.seed("clubs", {"id": "club-1", "name": "Night Riders", "owner_id": "owner"})

    assert client.patch(f"{ADMIN}/clubs/club-1/verify", json={}, headers=bearer(users["owner"])).status_code == 403
    response = client.patch(f"{ADMIN}/clubs/club-1/verify", json={"verified": True}, headers=bearer(users["admin"]))
    assert response.status_code == 200
    assert response.json()["verified"] is True


def test_jobs_need_run_jobs(client: TestClient, users, jobs):
    assert client.get(f"{ADMIN}/jobs", headers=bearer(users["admin"])).status_code == 403
    assert client.post(f"{ADMIN}/jobs/tidy/run", headers=bearer(users["admin"])).status_code == 403


def test_list_and_run_job(client: TestClient, users, jobs):
    response = client.post(f"{ADMIN}/jobs/tidy/run", headers=bearer(users["root"]))
    assert response.status_code == 200
    assert response.json() == {"job_name": "tidy", "result": {"deleted": 2}}

    listing = client.get(f"{ADMIN}/jobs", headers=bearer(users["root"])).json()
    tidy = next(job for job in listing if job["name"] == "tidy")
    assert tidy["last_result"] == {"deleted": 2}
    assert tidy["running"] is False


def test_failing_job_reports_execution_failure(client: TestClient, users, jobs):
    response = client.post(f"{ADMIN}/jobs/explode/run", headers=bearer(users["root"]))
    assert response.status_code == 500
    assert response.json()["code"] == "JOB_EXECUTION_FAILED"
    assert "store unavailable" in response.json()["detail"]


def test_unknown_job(client: TestClient, users, jobs):
    response = client.post(f"{ADMIN}/jobs/nope/run", headers=bearer(users["root"]))
    assert response.status_code == 404
    assert response.json()["code"] == "JOB_NOT_FOUND"


def test_stats_are_super_admin_only(client: TestClient, db, users):
    db.seed(
        "rides",
        {"id": "r1", "creator_id": "rider", "title": "a", "start_location": "x", "status": "IN_PROGRESS"},
        {"id": "r2", "creator_id": "rider", "title": "b", "start_location": "x", "status": "COMPLETED"},
    )
    db.seed("clubs", {"id": "c1", "name": "Night Riders", "owner_id": "owner", "verified": True})

    assert client.get(f"{ADMIN}/stats", headers=bearer(users["admin"])).status_code == 403
    response = client.get(f"{ADMIN}/stats", headers=bearer(users["root"]))

    assert response.status_code == 200
    body = response.json()
    assert body["overview"]["total_users"] == 5
    assert body["overview"]["total_rides"] == 2
    assert body["overview"]["active_rides"] == 1
    assert body["overview"]["verified_clubs"] == 1
    assert body["breakdown"]["rides_by_status"] == {"PLANNED": 0, "IN_PROGRESS": 1, "COMPLETED": 1, "CANCELLED": 0}
    assert body["breakdown"]["users_by_role"]["ADMIN"] == 1


def test_list_users_with_role_filter_and_search(client: TestClient, db, users):
    response = client.get(f"{ADMIN}/users", params={"role": "ADMIN"}, headers=bearer(users["admin"]))
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["items"][0]["id"] == "admin"
    assert body["items"][0]["roles"] == ["ADMIN", "USER"]

    found = client.get(f"{ADMIN}/users", params={"search": "RIDER@"}, headers=bearer(users["admin"])).json()
    assert [u["id"] for u in found["items"]] == ["rider"]


def test_list_users_pages(client: TestClient, users):
    response = client.get(f"{ADMIN}/users", params={"page": 2, "limit": 2}, headers=bearer(users["root"]))
    body = response.json()
    assert len(body["items"]) == 2
    assert body["total"] == 5
    assert body["total_pages"] == 3


def test_only_super_admin_deletes_users(client: TestClient, db, users):
    assert client.delete(f"{ADMIN}/users/rider", headers=bearer(users["admin"])).status_code == 403

    db.seed("clubs", {"id": "c1", "name": "Rider's club", "owner_id": "rider"})
    db.seed("club_members", {"club_id": "c1", "user_id": "plain", "role": "MEMBER"})
    db.seed("rides", {"id": "r1", "creator_id": "rider", "title": "a", "start_location": "x", "status": "PLANNED"})
    db.seed("ride_participants", {"ride_id": "r1", "user_id": "plain", "status": "ACCEPTED"})
    db.seed("posts", {"author_id": "rider", "content": "hi"})

    response = client.delete(f"{ADMIN}/users/rider", headers=bearer(users["root"]))

    assert response.status_code == 204
    assert "rider" not in {u["id"] for u in db.rows("users")}
    for table in ("clubs", "club_members", "rides", "ride_participants", "posts"):
        assert db.rows(table) == []
    assert all(r["user_id"] != "rider" for r in db.rows("user_role_assignments"))


def test_super_admin_cannot_delete_self(client: TestClient, db, users):
    response = client.delete(f"{ADMIN}/users/root", headers=bearer(users["root"]))
    assert response.status_code == 400
    assert "root" in {u["id"] for u in db.rows("users")}


def test_delete_unknown_user(client: TestClient, users):
    response = client.delete(f"{ADMIN}/users/nobody", headers=bearer(users["root"]))
    assert response.status_code == 404
    assert response.json()["code"] == "USER_NOT_FOUND"


def test_admin_lists_include_private_clubs_and_filter_rides(client: TestClient, db, users):
    db.seed("clubs", {"id": "c1", "name": "Hidden", "owner_id": "owner", "is_public": False})
    db.seed(
        "rides",
        {"id": "r1", "creator_id": "rider", "title": "a", "start_location": "x", "status": "PLANNED"},
        {"id": "r2", "creator_id": "owner", "title": "b", "start_location": "x", "status": "CANCELLED"},
    )

    clubs = client.get(f"{ADMIN}/clubs", headers=bearer(users["admin"])).json()
    assert [c["id"] for c in clubs["items"]] == ["c1"]

    rides = client.get(f"{ADMIN}/rides", params={"status": "CANCELLED"}, headers=bearer(users["admin"])).json()
    assert [r["id"] for r in rides["items"]] == ["r2"]
    assert rides["total"] == 1

    # Club owners reach the console but not the dashboard reads
    assert client.get(f"{ADMIN}/rides", headers=bearer(users["owner"])).status_code == 403


def test_listing_admin_needs_console_access(client: TestClient, db, users):
    seller = db.add_user("seller", "SELLER")
    db.seed("marketplace_listings", {"id": "l1", "seller_id": "seller", "title": "Helmet", "price": 40})

    response = client.get(f"{ADMIN}/listings", params={"seller_id": "seller"}, headers=bearer(seller))
    assert response.status_code == 200
    assert response.json()["items"][0]["id"] == "l1"

    assert client.get(f"{ADMIN}/listings", headers=bearer(users["owner"])).status_code == 403


def test_report_moderation(client: TestClient, db, users):
    created = client.post(
        "/api/v1/reports",
        json={"type": "POST", "title": "Spam", "reported_item_id": "p1", "priority": "HIGH"},
        headers=bearer(users["rider"]),
    )
    assert created.status_code == 201
    report_id = created.json()["id"]
    assert created.json()["status"] == "PENDING"

    assert client.get(f"{ADMIN}/reports", headers=bearer(users["owner"])).status_code == 403
    listing = client.get(f"{ADMIN}/reports", params={"priority": "HIGH"}, headers=bearer(users["admin"])).json()
    assert [r["id"] for r in listing["items"]] == [report_id]

    response = client.patch(
        f"{ADMIN}/reports/{report_id}",
        json={"status": "RESOLVED", "resolution": "Post removed"},
        headers=bearer(users["admin"]),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "RESOLVED"
    assert db.rows("reports")[0]["resolution"] == "Post removed"

    pending = client.get(f"{ADMIN}/reports", params={"status": "PENDING"}, headers=bearer(users["admin"])).json()
    assert pending["total"] == 0


def test_update_unknown_report(client: TestClient, users):
    response = client.patch(f"{ADMIN}/reports/nope", json={"status": "DISMISSED"}, headers=bearer(users["admin"]))
    assert response.status_code == 404
    assert response.json()["code"] == "REPORT_NOT_FOUND"
