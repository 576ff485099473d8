"""
Permission resolution: role grants combined with per-user overrides.

Everything here is pure. The request layer (app.core.dependencies) loads a
UserContext from the store once and passes it explicitly to these functions.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import FrozenSet, Iterable, Optional, Tuple

from app.config import settings
from app.config.permissions_config import PERMISSION_KEYS
from app.core.errors import ValidationFault

EDIT_ACTIONS = ("create", "update", "delete")


class PermissionKey(str):
    """A `resource.action` key validated against the permission catalog."""

    __slots__ = ()

    def __new__(cls, value: str):
        if not isinstance(value, str) or value not in PERMISSION_KEYS:
            raise ValidationFault(f"Unknown permission: {value!r}")
        return super().__new__(cls, value)

    @property
    def resource(self) -> str:
        return self.split(".", 1)[0]

    @property
    def action(self) -> str:
        return self.split(".", 1)[1]


def parse_permission_key(value: str) -> PermissionKey:
    return PermissionKey(value)


def permission_for(resource: str, action: str) -> PermissionKey:
    return PermissionKey(f"{resource}.{action}")


@dataclass(frozen=True)
class PermissionOverride:
    permission: PermissionKey
    is_granted: bool
    reason: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def is_active(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now


@dataclass(frozen=True)
class UserContext:
    user_id: str
    organization_id: Optional[str]
    role_key: Optional[str]
    role_permissions: FrozenSet[PermissionKey] = frozenset()
    overrides: Tuple[PermissionOverride, ...] = field(default_factory=tuple)


def _ordered_overrides(overrides: Iterable[PermissionOverride]) -> list:
    # Oldest first so the most recently created applicable override is applied last.
    # Overrides without created_at sort before dated ones, keeping their input order.
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(overrides, key=lambda o: o.created_at or epoch)


def is_allowed(context: UserContext, permission: str, now: datetime) -> bool:
    """Return True when `permission` is effective for the user at `now`."""
    key = PermissionKey(permission)
    allowed = key in context.role_permissions
    for override in _ordered_overrides(context.overrides):
        if override.permission == key and override.is_active(now):
            allowed = override.is_granted
    return allowed


def effective_permissions(context: UserContext, now: datetime) -> FrozenSet[PermissionKey]:
    """Resolve the whole catalog for the user at `now`."""
    granted = set(context.role_permissions)
    for override in _ordered_overrides(context.overrides):
        if not override.is_active(now):
            continue
        if override.is_granted:
            granted.add(override.permission)
        else:
            granted.discard(override.permission)
    return frozenset(granted)


def can_view(context: UserContext, resource: str, now: datetime) -> bool:
    return is_allowed(context, f"{resource}.view", now)


def can_edit(context: UserContext, resource: str, now: datetime) -> bool:
    """Any of create/update/delete; actions the resource does not define are skipped."""
    keys = [f"{resource}.{action}" for action in EDIT_ACTIONS if f"{resource}.{action}" in PERMISSION_KEYS]
    if not keys:
        raise ValidationFault(f"Resource has no edit permissions: {resource!r}")
    return any(is_allowed(context, key, now) for key in keys)


def can_create(context: UserContext, resource: str, now: datetime) -> bool:
    return is_allowed(context, f"{resource}.create", now)


def can_update(context: UserContext, resource: str, now: datetime) -> bool:
    return is_allowed(context, f"{resource}.update", now)


def can_delete(context: UserContext, resource: str, now: datetime) -> bool:
    return is_allowed(context, f"{resource}.delete", now)


def can_export(context: UserContext, resource: str, now: datetime) -> bool:
    return is_allowed(context, f"{resource}.export", now)


def has_any(context: UserContext, permissions: Iterable[str], now: datetime) -> bool:
    return any(is_allowed(context, p, now) for p in permissions)


def has_all(context: UserContext, permissions: Iterable[str], now: datetime) -> bool:
    return all(is_allowed(context, p, now) for p in permissions)


def is_admin(context: UserContext) -> bool:
    return context.role_key == settings.admin_role_key
