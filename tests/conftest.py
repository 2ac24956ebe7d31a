# tests/conftest.py

"""
Pytest configuration and shared fixtures.

The background scheduler is disabled before the app is imported, and every
route test runs against an in-memory FakeSupabase.
"""

import os

os.environ.setdefault("SCHEDULER_ENABLED", "false")

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.database.supabase_client import get_supabase
from app.main import app as fastapi_app
from app.modules.auth.service import clear_identity_cache
from tests.fakes import FakeSupabase


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def client(db) -> Generator[TestClient, None, None]:
    fastapi_app.dependency_overrides[get_supabase] = lambda: db
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_identity_cache():
    clear_identity_cache()
    yield
    clear_identity_cache()


@pytest.fixture
def users(db):
    """
    Standard cast:
    rider (RIDER), owner (CLUB_OWNER), admin (ADMIN), root (SUPER_ADMIN), plain (USER only)
    """
    return {
        "rider": db.add_user("rider", "RIDER"),
        "owner": db.add_user("owner", "CLUB_OWNER"),
        "admin": db.add_user("admin", "ADMIN"),
        "root": db.add_user("root", "SUPER_ADMIN"),
        "plain": db.add_user("plain"),
    }
