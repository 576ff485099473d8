"""Tests for the permission catalog and system role definitions."""

from app.config.permissions_config import (
    CATEGORIES,
    MODULES,
    PERMISSION_KEYS,
    PERMISSION_MATRIX,
    permission_translation_key,
    role_translation_key,
)


def roles_by_key():
    return {r["key"]: r for r in PERMISSION_MATRIX["roles"]}


def test_catalog_size_and_uniqueness() -> None:
    keys = [p["key"] for p in PERMISSION_MATRIX["permissions"]]
    assert len(keys) == 70
    assert len(set(keys)) == len(keys)
    assert PERMISSION_KEYS == frozenset(keys)


def test_every_permission_has_a_known_category() -> None:
    for perm in PERMISSION_MATRIX["permissions"]:
        assert perm["category"] in CATEGORIES
        assert perm["key"] == f"{perm['resource']}.{perm['action']}"
        assert perm["resource"] in MODULES


def test_display_order_follows_module_actions() -> None:
    customers = [p for p in PERMISSION_MATRIX["permissions"] if p["resource"] == "customers"]
    assert [p["action"] for p in customers] == ["view", "create", "update", "delete", "export"]
    assert [p["display_order"] for p in customers] == [10, 11, 12, 13, 14]


def test_system_roles() -> None:
    roles = roles_by_key()
    assert set(roles) == {"admin", "customer_service", "receptionist"}
    assert all(r["is_system_role"] for r in roles.values())


def test_admin_role_has_whole_catalog() -> None:
    assert set(roles_by_key()["admin"]["permissions"]) == PERMISSION_KEYS


def test_role_grants_are_catalog_subsets() -> None:
    for role in PERMISSION_MATRIX["roles"]:
        assert set(role["permissions"]) <= PERMISSION_KEYS
        assert role["permissions"] == sorted(role["permissions"])


def test_receptionist_defaults() -> None:
    grants = set(roles_by_key()["receptionist"]["permissions"])
    assert "customers.view" in grants
    assert "customers.delete" not in grants
    assert not any(k.startswith(("users.", "roles.", "audit_logs.")) for k in grants)


def test_translation_keys() -> None:
    assert role_translation_key("receptionist") == "roles.receptionist.name"
    assert permission_translation_key("customers.view") == "permissions.details.customers.view.name"
