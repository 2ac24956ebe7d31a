# tests/test_listings_posts_api.py

"""
Tests for marketplace listings and posts ownership.
"""

from fastapi.testclient import TestClient

from tests.fakes import bearer


def create_listing(client, token, title="Helmet"):
    return client.post("/api/v1/listings", json={"title": title, "price": 120}, headers=bearer(token))


def test_first_listing_grants_seller_once(client: TestClient, db, users):
    assert create_listing(client, users["rider"]).status_code == 201
    assert create_listing(client, users["rider"], "Gloves").status_code == 201

    roles = [r["role"] for r in db.rows("user_role_assignments") if r["user_id"] == "rider"]
    assert sorted(roles) == ["RIDER", "SELLER"]


def test_listing_update_is_owner_only(client: TestClient, users):
    listing = create_listing(client, users["rider"]).json()

    other = client.patch(f"/api/v1/listings/{listing['id']}", json={"price": 1}, headers=bearer(users["plain"]))
    assert other.status_code == 403

    own = client.patch(f"/api/v1/listings/{listing['id']}", json={"is_sold": True}, headers=bearer(users["rider"]))
    assert own.status_code == 200
    assert own.json()["is_sold"] is True
    assert own.json()["seller_id"] == "rider"


def test_sold_listings_are_hidden_by_default(client: TestClient, users):
    listing = create_listing(client, users["rider"]).json()
    client.patch(f"/api/v1/listings/{listing['id']}", json={"is_sold": True}, headers=bearer(users["rider"]))

    assert client.get("/api/v1/listings", headers=bearer(users["plain"])).json() == []
    listed = client.get("/api/v1/listings", params={"include_sold": True}, headers=bearer(users["plain"])).json()
    assert len(listed) == 1


def test_missing_listing(client: TestClient, users):
    response = client.delete("/api/v1/listings/nope", headers=bearer(users["admin"]))
    assert response.status_code == 404
    assert response.json()["code"] == "LISTING_NOT_FOUND"


def test_post_delete_by_author_or_moderator(client: TestClient, db, users):
    post = client.post("/api/v1/posts", json={"content": "Epic ride"}, headers=bearer(users["rider"])).json()
    other = client.post("/api/v1/posts", json={"content": "Another"}, headers=bearer(users["rider"])).json()

    assert client.delete(f"/api/v1/posts/{post['id']}", headers=bearer(users["plain"])).status_code == 403
    assert client.delete(f"/api/v1/posts/{post['id']}", headers=bearer(users["rider"])).status_code == 204
    assert client.delete(f"/api/v1/posts/{other['id']}", headers=bearer(users["admin"])).status_code == 204
    assert db.rows("posts") == []
