"""
Core dependencies for route protection and permission checking
"""

from datetime import datetime, timezone
from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import AuthService
from app.core.errors import AuthenticationFault, IntegrityFault, PermissionDenied, ValidationFault
from app.core.permissions import PermissionKey, PermissionOverride, UserContext, is_allowed
from app.core.safe_fetch import execute, fetch_one, fetch_optional
from supabase import Client
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a PostgREST timestamptz; naive values are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _stored_key(value: Optional[str]) -> PermissionKey:
    """Keys read from the store must be in the catalog; anything else is a data fault."""
    try:
        return PermissionKey(value)
    except ValidationFault as e:
        logger.error(f"Stored permission outside the catalog: {value!r}")
        raise IntegrityFault(f"Stored permission outside the catalog: {value!r}") from e


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(credentials.credentials)


def load_role_permissions(role_id: str, supabase: Client) -> List[PermissionKey]:
    rows = execute(
        supabase.table("role_permissions")
        .select("permission_id, permissions(key)")
        .eq("role_id", role_id),
        "Failed to load role permissions"
    )
    return [_stored_key(r["permissions"]["key"]) for r in rows if r.get("permissions")]


def load_overrides(user_id: str, supabase: Client) -> List[PermissionOverride]:
    rows = execute(
        supabase.table("user_permission_overrides")
        .select("is_granted, reason, expires_at, created_at, permissions(key)")
        .eq("user_id", user_id),
        "Failed to load permission overrides"
    )
    return [
        PermissionOverride(
            permission=_stored_key(r["permissions"]["key"]),
            is_granted=bool(r["is_granted"]),
            reason=r.get("reason"),
            expires_at=parse_timestamp(r.get("expires_at")),
            created_at=parse_timestamp(r.get("created_at")),
        )
        for r in rows if r.get("permissions")
    ]


def load_user_context(user_id: str, supabase: Client) -> UserContext:
    """Build the immutable access context for one user: profile, role grants and overrides."""
    profile = fetch_optional(supabase, "users", {"id": user_id}, "User", "id, organization_id, is_active")
    if not profile or not profile.get("is_active"):
        raise AuthenticationFault("User profile not found or inactive")

    assignment = fetch_optional(
        supabase, "user_roles", {"user_id": user_id}, "User role", "role_id, roles(key, is_active)"
    )
    role_key = None
    role_permissions: List[PermissionKey] = []
    if assignment and assignment.get("roles"):
        role = assignment["roles"]
        # An inactive role keeps its key for display but grants nothing
        role_key = role.get("key")
        if role.get("is_active", True):
            role_permissions = load_role_permissions(assignment["role_id"], supabase)

    return UserContext(
        user_id=user_id,
        organization_id=profile.get("organization_id"),
        role_key=role_key,
        role_permissions=frozenset(role_permissions),
        overrides=tuple(load_overrides(user_id, supabase)),
    )


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for the access context."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_user_context(
    request: Request,
    user_data: dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase)
) -> UserContext:
    cache = _get_request_cache(request)
    if "context" not in cache:
        cache["context"] = load_user_context(user_data["id"], supabase)
    return cache["context"]


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    # Unknown keys fail at import time, not on the first request
    permission = PermissionKey(required_permission)

    def check_permission(context: UserContext = Depends(get_user_context)) -> UserContext:
        """Dependency to check if user has required permission"""
        if not is_allowed(context, permission, utc_now()):
            raise PermissionDenied(permission)
        return context
    return check_permission


def get_organization_user(user_id: str, organization_id: Optional[str], supabase: Client) -> Dict[str, Any]:
    """Target user must belong to the caller's organization; otherwise it does not exist for the caller."""
    return fetch_one(
        supabase, "users", {"id": user_id, "organization_id": organization_id}, "User",
        "id, organization_id, is_active"
    )
