"""HTTP tests for the permission catalog, permission checks and per-user overrides."""

from datetime import datetime, timedelta, timezone

API = "/api/v1/permissions"


def in_days(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def grant(client, user, permission="customers.delete", is_granted=True, expires_at=None):
    return client.post(f"{API}/overrides", json={
        "user_id": user["id"],
        "permission": permission,
        "is_granted": is_granted,
        "reason": "covering for manager",
        "expires_at": expires_at,
    })


def test_list_catalog(client, workshop) -> None:
    client.login_as(workshop["admin_a"])
    response = client.get(API)
    assert response.status_code == 200
    keys = [p["key"] for p in response.json()]
    assert len(keys) == 70
    first = response.json()[0]
    assert first["translation_key"] == f"permissions.details.{first['key']}.name"


def test_list_catalog_by_category(client, workshop) -> None:
    client.login_as(workshop["admin_a"])
    body = client.get(API, params={"category": "financial"}).json()
    assert body
    assert {p["category"] for p in body} == {"financial"}
    assert client.get(API, params={"category": "bogus"}).status_code == 400


def test_check_for_caller(client, workshop) -> None:
    client.login_as(workshop["receptionist_a"])
    allowed = client.post(f"{API}/check", json={"permission": "customers.view"}).json()
    denied = client.post(f"{API}/check", json={"permission": "customers.delete"}).json()
    assert allowed == {"user_id": workshop["receptionist_a"]["id"], "permission": "customers.view", "allowed": True}
    assert denied["allowed"] is False


def test_check_unknown_permission_is_validation_error(client, workshop) -> None:
    client.login_as(workshop["receptionist_a"])
    response = client.post(f"{API}/check", json={"permission": "customers.fly"})
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_check_any(client, workshop) -> None:
    client.login_as(workshop["receptionist_a"])
    yes = client.post(f"{API}/check-any", json={"permissions": ["customers.delete", "customers.view"]})
    no = client.post(f"{API}/check-any", json={"permissions": ["customers.delete", "invoices.void"]})
    assert yes.json()["allowed"] is True
    assert no.json()["allowed"] is False


def test_check_for_other_user_requires_manage_permissions(client, workshop) -> None:
    target = workshop["admin_a"]
    client.login_as(workshop["receptionist_a"])
    response = client.post(f"{API}/check", json={"permission": "customers.view", "user_id": target["id"]})
    assert response.status_code == 403

    client.login_as(workshop["admin_a"])
    response = client.post(
        f"{API}/check", json={"permission": "customers.delete", "user_id": workshop["receptionist_a"]["id"]}
    )
    assert response.json()["allowed"] is False
    response = client.post(f"{API}/check", json={"permission": "customers.view", "user_id": workshop["admin_b"]["id"]})
    assert response.status_code == 404


def test_temporary_grant_is_effective_and_audited(client, fake_db, workshop) -> None:
    receptionist = workshop["receptionist_a"]
    client.login_as(workshop["admin_a"])
    response = grant(client, receptionist, expires_at=in_days(1))
    assert response.status_code == 201
    body = response.json()
    assert body["permission"] == "customers.delete"
    assert body["is_active"] is True
    assert body["granted_by"] == workshop["admin_a"]["id"]

    entry = fake_db.rows("rbac_audit_logs")[-1]
    assert entry["action"] == "permission_override.create"
    assert entry["new_value"]["permission"] == "customers.delete"

    client.login_as(receptionist)
    me = client.get("/api/v1/auth/me").json()
    assert "customers.delete" in me["permissions"]


def test_override_with_past_expiry_is_rejected(client, fake_db, workshop) -> None:
    client.login_as(workshop["admin_a"])
    response = grant(client, workshop["receptionist_a"], expires_at=in_days(-1))
    assert response.status_code == 400
    assert fake_db.rows("user_permission_overrides") == []


def test_expired_override_is_listed_but_inactive(client, fake_db, workshop) -> None:
    receptionist = workshop["receptionist_a"]
    fake_db.add(
        "user_permission_overrides", user_id=receptionist["id"],
        permission_id=next(p["id"] for p in fake_db.rows("permissions") if p["key"] == "customers.delete"),
        is_granted=True, reason="last week", expires_at=in_days(-2), granted_by=workshop["admin_a"]["id"],
    )
    client.login_as(workshop["admin_a"])
    (listed,) = client.get(f"{API}/overrides/{receptionist['id']}").json()
    assert listed["permission"] == "customers.delete"
    assert listed["is_active"] is False

    client.login_as(receptionist)
    assert "customers.delete" not in client.get("/api/v1/auth/me").json()["permissions"]


def test_deny_override_removes_role_grant(client, workshop) -> None:
    receptionist = workshop["receptionist_a"]
    client.login_as(workshop["admin_a"])
    assert grant(client, receptionist, permission="customers.view", is_granted=False).status_code == 201

    client.login_as(receptionist)
    assert client.get("/api/v1/customers").status_code == 403


def test_second_override_for_same_permission_is_conflict(client, fake_db, workshop) -> None:
    client.login_as(workshop["admin_a"])
    assert grant(client, workshop["receptionist_a"]).status_code == 201
    response = grant(client, workshop["receptionist_a"], is_granted=False)
    assert response.status_code == 409
    assert len(fake_db.rows("user_permission_overrides")) == 1


def test_override_for_user_of_other_organization_is_not_found(client, fake_db, workshop) -> None:
    client.login_as(workshop["admin_a"])
    response = grant(client, workshop["admin_b"])
    assert response.status_code == 404
    assert fake_db.rows("user_permission_overrides") == []


def test_delete_override(client, fake_db, workshop) -> None:
    client.login_as(workshop["admin_a"])
    override_id = grant(client, workshop["receptionist_a"]).json()["id"]

    client.login_as(workshop["admin_b"])
    foreign = client.delete(f"{API}/overrides/{override_id}")
    assert foreign.status_code == 404
    assert foreign.json()["detail"] == "Permission override not found or not accessible"

    client.login_as(workshop["admin_a"])
    assert client.delete(f"{API}/overrides/{override_id}").status_code == 204
    assert fake_db.rows("user_permission_overrides") == []
    entry = fake_db.rows("rbac_audit_logs")[-1]
    assert entry["action"] == "permission_override.delete"
    assert entry["old_value"]["permission"] == "customers.delete"


def test_receptionist_cannot_manage_overrides(client, fake_db, workshop) -> None:
    client.login_as(workshop["receptionist_a"])
    response = grant(client, workshop["receptionist_a"])
    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions. Required: users.manage_permissions"
