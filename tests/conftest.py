"""Pytest configuration and fixtures for roadease-backend.

HTTP tests run app.main:app through FastAPI's TestClient with both supabase
client dependencies replaced by tests.fakes.FakeSupabase, so no test needs
network access or a Supabase project.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.config.permissions_config import PERMISSION_MATRIX
from app.core.dependencies import get_current_user
from app.database.supabase_client import get_service_supabase, get_supabase
from app.main import app
from app.modules.auth.service import clear_auth_cache
from tests.fakes import FakeSupabase

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def seed_organization(db: FakeSupabase, name: str) -> dict:
    """One organization with the three system roles and their default grants."""
    org = db.add("organizations", name=name)
    permission_ids = {p["key"]: p["id"] for p in db.rows("permissions")}
    roles = {}
    for role in PERMISSION_MATRIX["roles"]:
        row = db.add(
            "roles", organization_id=org["id"], key=role["key"], color=role["color"],
            description=role["description"], is_system_role=True, is_active=True,
        )
        for key in role["permissions"]:
            db.add("role_permissions", role_id=row["id"], permission_id=permission_ids[key])
        roles[role["key"]] = row
    return {"org": org, "roles": roles}


def add_user(db: FakeSupabase, organization: dict, role_key: str, email: str) -> dict:
    user = db.add("users", organization_id=organization["org"]["id"], email=email, is_active=True)
    db.add("user_roles", user_id=user["id"], role_id=organization["roles"][role_key]["id"])
    return user


@pytest.fixture
def fake_db() -> FakeSupabase:
    db = FakeSupabase()
    for perm in PERMISSION_MATRIX["permissions"]:
        db.add("permissions", is_active=True, **perm)
    return db


@pytest.fixture
def workshop(fake_db: FakeSupabase) -> dict:
    """Two organizations: A with an admin and a receptionist, B with an admin."""
    org_a = seed_organization(fake_db, "Workshop A")
    org_b = seed_organization(fake_db, "Workshop B")
    return {
        "org_a": org_a,
        "org_b": org_b,
        "admin_a": add_user(fake_db, org_a, "admin", "admin@a.example.com"),
        "receptionist_a": add_user(fake_db, org_a, "receptionist", "desk@a.example.com"),
        "admin_b": add_user(fake_db, org_b, "admin", "admin@b.example.com"),
    }


@pytest.fixture
def client(fake_db: FakeSupabase):
    """TestClient against the FastAPI app; call client.login_as(user) to pick the caller."""
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_service_supabase] = lambda: fake_db

    def login_as(user: dict):
        app.dependency_overrides[get_current_user] = lambda: {"id": user["id"], "email": user["email"]}

    with TestClient(app, raise_server_exceptions=False) as test_client:
        test_client.login_as = login_as
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()
