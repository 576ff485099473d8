"""
Seed Permissions and Roles Script
This script populates the permission catalog and, for every organization, the
system roles with their default grants, using the config.
Can be run manually or after each deployment; it is idempotent.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.config.permissions_config import PERMISSION_MATRIX
from app.core.errors import AppError
from app.core.safe_fetch import execute, insert_one
from app.database.supabase_client import get_service_supabase
from supabase import Client
from typing import Dict, List
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_permissions(supabase: Client) -> Dict[str, str]:
    """Seed permissions from config; returns key -> permission id"""
    logger.info("Seeding permissions...")

    existing = execute(
        supabase.table("permissions").select("id, key"),
        "Failed to read permissions"
    )
    ids = {p["key"]: p["id"] for p in existing}
    created_count = 0
    updated_count = 0

    for perm in PERMISSION_MATRIX["permissions"]:
        values = {
            "resource": perm["resource"],
            "action": perm["action"],
            "category": perm["category"],
            "display_order": perm["display_order"],
            "description": perm["description"],
            "is_active": True,
        }
        if perm["key"] in ids:
            execute(
                supabase.table("permissions").update(values).eq("key", perm["key"]),
                f"Failed to update permission {perm['key']}"
            )
            updated_count += 1
            logger.debug(f"Updated permission: {perm['key']}")
        else:
            row = insert_one(supabase, "permissions", dict(values, key=perm["key"]), "Permission")
            ids[perm["key"]] = row["id"]
            created_count += 1
            logger.debug(f"Created permission: {perm['key']}")

    logger.info(f"Permissions seeded: {created_count} created, {updated_count} updated")
    return ids


def seed_roles(supabase: Client, organization_id: str, permission_ids: Dict[str, str]) -> int:
    """Seed system roles for one organization"""
    created_count = 0

    for role in PERMISSION_MATRIX["roles"]:
        existing = execute(
            supabase.table("roles")
            .select("id")
            .eq("organization_id", organization_id)
            .eq("key", role["key"]),
            f"Failed to read role {role['key']}"
        )
        if existing:
            role_id = existing[0]["id"]
            execute(
                supabase.table("roles")
                .update({"description": role["description"], "color": role["color"], "is_system_role": True})
                .eq("id", role_id),
                f"Failed to update role {role['key']}"
            )
        else:
            row = insert_one(supabase, "roles", {
                "organization_id": organization_id,
                "key": role["key"],
                "color": role["color"],
                "description": role["description"],
                "is_system_role": True,
                "is_active": True,
            }, "Role")
            role_id = row["id"]
            created_count += 1
            logger.debug(f"Created role {role['key']} for organization {organization_id}")

        assign_permissions_to_role(supabase, role_id, role["key"], [permission_ids[k] for k in role["permissions"]])

    return created_count


def assign_permissions_to_role(supabase: Client, role_id: str, role_key: str, permission_ids: List[str]):
    """Add the configured grants a system role is missing; grants added by admins are kept"""
    existing_result = execute(
        supabase.table("role_permissions")
        .select("permission_id")
        .eq("role_id", role_id),
        f"Failed to read permissions of role {role_key}"
    )
    existing_permission_ids = {p["permission_id"] for p in existing_result}

    new_assignments = [
        {"role_id": role_id, "permission_id": pid}
        for pid in permission_ids
        if pid not in existing_permission_ids
    ]

    if new_assignments:
        execute(
            supabase.table("role_permissions").insert(new_assignments),
            f"Failed to assign permissions to role {role_key}"
        )
        logger.debug(f"Assigned {len(new_assignments)} permissions to role {role_key}")


def main():
    """Main function to seed permissions and roles"""
    try:
        supabase = get_service_supabase()

        logger.info("Starting permissions and roles seeding...")

        # Seed permissions first
        permission_ids = seed_permissions(supabase)

        # Then seed roles (which depend on permissions) for every organization
        organizations = execute(supabase.table("organizations").select("id"), "Failed to read organizations")
        role_count = 0
        for organization in organizations:
            role_count += seed_roles(supabase, organization["id"], permission_ids)

        logger.info("Seeding completed successfully!")
        logger.info(
            f"Total: {len(permission_ids)} permissions, {role_count} roles created "
            f"across {len(organizations)} organizations"
        )

    except AppError as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
