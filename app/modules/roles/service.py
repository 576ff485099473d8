from datetime import datetime, timezone
from supabase import Client
from app.config.permissions_config import role_translation_key
from app.core.audit import AuditLogger
from app.core.dependencies import get_organization_user
from app.core.errors import ConflictFault, NotFoundOrForbidden, ValidationFault
from app.core.permissions import UserContext
from app.core.safe_fetch import delete_one, execute, fetch_one, fetch_optional, insert_one, update_one
from app.modules.permissions.schemas import PermissionResponse
from app.modules.permissions.service import PermissionService, to_permission_response
from app.modules.roles.schemas import (
    RoleCreate, RoleUpdate, RoleResponse, RoleWithPermissionsResponse,
    RoleAssign, RoleAssignmentResponse, RoleUserResponse
)
from typing import List

MAX_PAGE_SIZE = 100


def _to_role_response(row: dict) -> RoleResponse:
    return RoleResponse(**row, translation_key=role_translation_key(row["key"]))


class RoleService:
    def __init__(self, supabase: Client, audit: AuditLogger):
        self.supabase = supabase
        self.audit = audit
        self.permissions = PermissionService(supabase, audit)

    def _get_role_row(self, role_id: str, actor: UserContext) -> dict:
        return fetch_one(
            self.supabase, "roles",
            {"id": role_id, "organization_id": actor.organization_id}, "Role"
        )

    def _get_role_permission_keys(self, role_id: str) -> List[str]:
        rows = execute(
            self.supabase.table("role_permissions")
            .select("permission_id, permissions(key)")
            .eq("role_id", role_id),
            "Failed to get role permissions"
        )
        return sorted(r["permissions"]["key"] for r in rows if r.get("permissions"))

    def _insert_role_permissions(self, role_id: str, keys: List[str], actor: UserContext) -> List[str]:
        ids = self.permissions.resolve_permission_ids(keys)
        if ids:
            execute(
                self.supabase.table("role_permissions").insert([
                    {"role_id": role_id, "permission_id": pid, "granted_by": actor.user_id}
                    for pid in ids.values()
                ]),
                "Failed to assign role permissions"
            )
        return sorted(ids)

    def list_roles(self, actor: UserContext, limit: int = 50, offset: int = 0) -> List[RoleResponse]:
        """List the organization's roles"""
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValidationFault(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if offset < 0:
            raise ValidationFault("offset must not be negative")
        result = execute(
            self.supabase.table("roles")
            .select("*")
            .eq("organization_id", actor.organization_id)
            .order("created_at")
            .limit(limit)
            .offset(offset),
            "Failed to list roles"
        )
        return [_to_role_response(role) for role in result]

    def get_role_with_permissions(self, role_id: str, actor: UserContext) -> RoleWithPermissionsResponse:
        """Get role with its permission keys"""
        role = self._get_role_row(role_id, actor)
        return RoleWithPermissionsResponse(
            **role,
            translation_key=role_translation_key(role["key"]),
            permissions=self._get_role_permission_keys(role_id)
        )

    def create_role(self, role_data: RoleCreate, actor: UserContext) -> RoleWithPermissionsResponse:
        """Create a custom role, optionally with an initial permission set"""
        # Validate keys before anything is written
        self.permissions.resolve_permission_ids(role_data.permissions)
        existing = execute(
            self.supabase.table("roles")
            .select("id")
            .eq("organization_id", actor.organization_id)
            .eq("key", role_data.key),
            "Failed to check existing roles"
        )
        if existing:
            raise ConflictFault(f"Role {role_data.key!r} already exists")

        role = insert_one(self.supabase, "roles", {
            "organization_id": actor.organization_id,
            "key": role_data.key,
            "color": role_data.color,
            "description": role_data.description,
            "is_system_role": False,
            "is_active": True,
            "created_by": actor.user_id,
        }, "Role")
        keys = self._insert_role_permissions(role["id"], role_data.permissions, actor)
        self.audit.record(
            actor, "role.create", "role", role["id"],
            new_value={"key": role["key"], "permissions": keys}
        )
        return RoleWithPermissionsResponse(
            **role, translation_key=role_translation_key(role["key"]), permissions=keys
        )

    def update_role(self, role_id: str, role_data: RoleUpdate, actor: UserContext) -> RoleResponse:
        """Update role display metadata or status"""
        update_data = role_data.model_dump(exclude_none=True)
        if not update_data:
            return _to_role_response(self._get_role_row(role_id, actor))
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        old = self._get_role_row(role_id, actor)
        role = update_one(
            self.supabase, "roles", update_data,
            {"id": role_id, "organization_id": actor.organization_id}, "Role"
        )
        self.audit.record(
            actor, "role.update", "role", role_id,
            old_value={k: old.get(k) for k in update_data if k != "updated_at"},
            new_value={k: role.get(k) for k in update_data if k != "updated_at"}
        )
        return _to_role_response(role)

    def delete_role(self, role_id: str, actor: UserContext) -> None:
        """Delete a custom role; system roles are protected"""
        role = self._get_role_row(role_id, actor)
        if role.get("is_system_role"):
            raise ConflictFault("Cannot delete system role")
        delete_one(
            self.supabase, "roles",
            {"id": role_id, "organization_id": actor.organization_id}, "Role"
        )
        self.audit.record(actor, "role.delete", "role", role_id, old_value={"key": role["key"]})

    def set_role_permissions(self, role_id: str, permission_keys: List[str], actor: UserContext) -> RoleWithPermissionsResponse:
        """Replace all permissions of a role"""
        role = self._get_role_row(role_id, actor)
        # Validate keys before the existing grants are removed
        self.permissions.resolve_permission_ids(permission_keys)
        old_keys = self._get_role_permission_keys(role_id)

        execute(
            self.supabase.table("role_permissions")
            .delete()
            .eq("role_id", role_id),
            "Failed to clear role permissions"
        )
        new_keys = self._insert_role_permissions(role_id, permission_keys, actor)
        self.audit.record(
            actor, "role.permissions.update", "role", role_id,
            old_value={"permissions": old_keys}, new_value={"permissions": new_keys}
        )
        return RoleWithPermissionsResponse(
            **role, translation_key=role_translation_key(role["key"]), permissions=new_keys
        )

    def assign_role(self, assignment: RoleAssign, actor: UserContext) -> RoleAssignmentResponse:
        """Give a user of the organization exactly one role, replacing any previous one"""
        get_organization_user(assignment.user_id, actor.organization_id, self.supabase)
        role = self._get_role_row(assignment.role_id, actor)

        current = fetch_optional(self.supabase, "user_roles", {"user_id": assignment.user_id}, "User role")
        if current:
            row = update_one(
                self.supabase, "user_roles",
                {"role_id": assignment.role_id, "assigned_by": actor.user_id},
                {"id": current["id"], "user_id": assignment.user_id}, "User role"
            )
        else:
            row = insert_one(self.supabase, "user_roles", {
                "user_id": assignment.user_id,
                "role_id": assignment.role_id,
                "assigned_by": actor.user_id,
            }, "User role")
        self.audit.record(
            actor, "user_role.assign", "user", assignment.user_id,
            old_value={"role_id": current["role_id"]} if current else None,
            new_value={"role_id": assignment.role_id, "role": role["key"]}
        )
        return RoleAssignmentResponse(**row)

    def list_role_users(self, role_id: str, actor: UserContext) -> List[RoleUserResponse]:
        """Users of the organization holding the role"""
        self._get_role_row(role_id, actor)
        rows = execute(
            self.supabase.table("user_roles")
            .select("id, user_id, created_at, users(email, full_name, organization_id, is_active)")
            .eq("role_id", role_id)
            .order("created_at"),
            "Failed to list role users"
        )
        return [
            RoleUserResponse(
                assignment_id=r["id"],
                user_id=r["user_id"],
                email=r["users"].get("email"),
                full_name=r["users"].get("full_name"),
                is_active=bool(r["users"].get("is_active")),
                assigned_at=r.get("created_at"),
            )
            for r in rows
            if r.get("users") and r["users"].get("organization_id") == actor.organization_id
        ]

    def get_role_permissions(self, role_id: str, actor: UserContext) -> List[PermissionResponse]:
        """Permission details granted by the role, in catalog order"""
        self._get_role_row(role_id, actor)
        rows = execute(
            self.supabase.table("role_permissions")
            .select("permission_id, permissions(*)")
            .eq("role_id", role_id),
            "Failed to get role permissions"
        )
        permissions = [to_permission_response(r["permissions"]) for r in rows if r.get("permissions")]
        return sorted(permissions, key=lambda p: (p.display_order, p.key))

    def remove_assignment(self, user_role_id: str, actor: UserContext) -> None:
        """Take a role away from a user; the user keeps only their overrides"""
        assignment = fetch_one(self.supabase, "user_roles", {"id": user_role_id}, "Role assignment")
        try:
            get_organization_user(assignment["user_id"], actor.organization_id, self.supabase)
        except NotFoundOrForbidden:
            raise NotFoundOrForbidden("Role assignment") from None

        delete_one(self.supabase, "user_roles", {"id": user_role_id}, "Role assignment")
        self.audit.record(
            actor, "user_role.remove", "user", assignment["user_id"],
            old_value={"role_id": assignment["role_id"]}
        )
