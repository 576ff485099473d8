from datetime import datetime, timezone
from supabase import Client
from app.config.permissions_config import CATEGORIES, permission_translation_key
from app.core.audit import AuditLogger
from app.core.dependencies import get_organization_user, parse_timestamp
from app.core.errors import ConflictFault, IntegrityFault, NotFoundOrForbidden, ValidationFault
from app.core.permissions import PermissionKey, UserContext
from app.core.safe_fetch import delete_one, execute, fetch_one, insert_one
from app.modules.permissions.schemas import OverrideCreate, OverrideResponse, PermissionResponse
from typing import Dict, Iterable, List, Optional
import logging

logger = logging.getLogger(__name__)


def to_permission_response(row: dict) -> PermissionResponse:
    return PermissionResponse(**row, translation_key=permission_translation_key(row["key"]))


class PermissionService:
    def __init__(self, supabase: Client, audit: AuditLogger):
        self.supabase = supabase
        self.audit = audit

    def list_permissions(self, category: Optional[str] = None) -> List[PermissionResponse]:
        """List the active permission catalog, optionally for one category"""
        if category is not None and category not in CATEGORIES:
            raise ValidationFault(f"Unknown permission category: {category!r}")
        query = self.supabase.table("permissions")\
            .select("*")\
            .eq("is_active", True)
        if category:
            query = query.eq("category", category)
        query = query.order("category").order("display_order")
        return [to_permission_response(p) for p in execute(query, "Failed to list permissions")]

    def resolve_permission_ids(self, keys: Iterable[str]) -> Dict[PermissionKey, str]:
        """Map catalog keys to permission row ids. Keys are validated before the query."""
        parsed = sorted({PermissionKey(k) for k in keys})
        if not parsed:
            return {}
        rows = execute(
            self.supabase.table("permissions")
            .select("id, key")
            .in_("key", list(parsed)),
            "Failed to resolve permissions"
        )
        ids = {PermissionKey(r["key"]): r["id"] for r in rows}
        missing = [k for k in parsed if k not in ids]
        if missing:
            logger.error(f"Permissions missing from the store, run the seed script: {missing}")
            raise IntegrityFault(f"Permissions missing from the store: {missing}")
        return ids

    def _to_override_response(self, row: dict, now: datetime) -> OverrideResponse:
        expires_at = parse_timestamp(row.get("expires_at"))
        permission = row.get("permissions") or {}
        return OverrideResponse(
            id=row["id"],
            user_id=row["user_id"],
            permission=permission.get("key", ""),
            is_granted=row["is_granted"],
            reason=row.get("reason"),
            expires_at=expires_at,
            granted_by=row.get("granted_by"),
            created_at=parse_timestamp(row.get("created_at")),
            is_active=expires_at is None or expires_at > now,
        )

    def list_overrides(self, user_id: str, actor: UserContext, now: datetime) -> List[OverrideResponse]:
        """List a user's overrides, expired ones included"""
        get_organization_user(user_id, actor.organization_id, self.supabase)
        rows = execute(
            self.supabase.table("user_permission_overrides")
            .select("*, permissions(key)")
            .eq("user_id", user_id)
            .order("created_at", desc=True),
            "Failed to list permission overrides"
        )
        return [self._to_override_response(r, now) for r in rows]

    def create_override(self, data: OverrideCreate, actor: UserContext, now: datetime) -> OverrideResponse:
        """Grant or deny one permission for one user, outside their role"""
        key = PermissionKey(data.permission)
        expires_at = data.expires_at
        if expires_at is not None:
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
            if expires_at <= now:
                raise ValidationFault("expires_at must be in the future")

        get_organization_user(data.user_id, actor.organization_id, self.supabase)
        permission_id = self.resolve_permission_ids([key])[key]

        # At most one override per user and permission; replace means delete then create
        existing = execute(
            self.supabase.table("user_permission_overrides")
            .select("id")
            .eq("user_id", data.user_id)
            .eq("permission_id", permission_id),
            "Failed to check existing overrides"
        )
        if existing:
            raise ConflictFault(f"User already has an override for {key}")

        row = insert_one(self.supabase, "user_permission_overrides", {
            "user_id": data.user_id,
            "permission_id": permission_id,
            "is_granted": data.is_granted,
            "reason": data.reason,
            "expires_at": expires_at.isoformat() if expires_at else None,
            "granted_by": actor.user_id,
        }, "Permission override")
        row["permissions"] = {"key": key}
        self.audit.record(
            actor, "permission_override.create", "user_permission_override", row["id"],
            new_value={"user_id": data.user_id, "permission": key, "is_granted": data.is_granted,
                       "reason": data.reason, "expires_at": row.get("expires_at")},
        )
        return self._to_override_response(row, now)

    def delete_override(self, override_id: str, actor: UserContext) -> None:
        """Remove an override; overrides of users outside the caller's organization do not exist for the caller"""
        override = fetch_one(
            self.supabase, "user_permission_overrides", {"id": override_id},
            "Permission override", "*, permissions(key)"
        )
        try:
            get_organization_user(override["user_id"], actor.organization_id, self.supabase)
        except NotFoundOrForbidden:
            raise NotFoundOrForbidden("Permission override") from None

        delete_one(self.supabase, "user_permission_overrides", {"id": override_id}, "Permission override")
        self.audit.record(
            actor, "permission_override.delete", "user_permission_override", override_id,
            old_value={"user_id": override["user_id"],
                       "permission": (override.get("permissions") or {}).get("key"),
                       "is_granted": override["is_granted"],
                       "reason": override.get("reason"),
                       "expires_at": override.get("expires_at")},
        )
