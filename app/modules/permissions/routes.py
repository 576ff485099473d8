from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.permissions.schemas import (
    PermissionResponse, PermissionCheckRequest, PermissionCheckResponse,
    PermissionCheckAnyRequest, PermissionCheckAnyResponse,
    OverrideCreate, OverrideResponse
)
from app.modules.permissions.service import PermissionService
from app.core.audit import AuditLogger
from app.core.dependencies import (
    require_permission,
    get_user_context,
    get_organization_user,
    load_user_context,
    utc_now,
)
from app.core.errors import PermissionDenied
from app.core.permissions import UserContext, is_allowed, has_any
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/permissions", tags=["permissions"])


def get_permission_service(supabase: Client = Depends(get_service_supabase)) -> PermissionService:
    return PermissionService(supabase, AuditLogger(supabase))


def _context_for(user_id: Optional[str], caller: UserContext, supabase: Client) -> UserContext:
    """Checks run for the caller unless another user of the same organization is named."""
    if user_id is None or user_id == caller.user_id:
        return caller
    if not is_allowed(caller, "users.manage_permissions", utc_now()):
        raise PermissionDenied("users.manage_permissions")
    get_organization_user(user_id, caller.organization_id, supabase)
    return load_user_context(user_id, supabase)


@router.get("", response_model=List[PermissionResponse])
async def list_permissions(
    category: Optional[str] = None,
    context: UserContext = Depends(require_permission("roles.view")),
    service: PermissionService = Depends(get_permission_service)
):
    """List the permission catalog ordered by category and display order"""
    return service.list_permissions(category=category)


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permission(
    body: PermissionCheckRequest,
    caller: UserContext = Depends(get_user_context),
    supabase: Client = Depends(get_service_supabase)
):
    """Evaluate one permission for the caller or for a user of the caller's organization"""
    context = _context_for(body.user_id, caller, supabase)
    return PermissionCheckResponse(
        user_id=context.user_id,
        permission=body.permission,
        allowed=is_allowed(context, body.permission, utc_now())
    )


@router.post("/check-any", response_model=PermissionCheckAnyResponse)
async def check_any_permission(
    body: PermissionCheckAnyRequest,
    caller: UserContext = Depends(get_user_context),
    supabase: Client = Depends(get_service_supabase)
):
    """True when at least one of the permissions is effective"""
    context = _context_for(body.user_id, caller, supabase)
    return PermissionCheckAnyResponse(
        user_id=context.user_id,
        allowed=has_any(context, body.permissions, utc_now())
    )


@router.get("/overrides/{user_id}", response_model=List[OverrideResponse])
async def list_overrides(
    user_id: str,
    context: UserContext = Depends(require_permission("users.manage_permissions")),
    service: PermissionService = Depends(get_permission_service)
):
    """List a user's permission overrides"""
    return service.list_overrides(user_id, context, utc_now())


@router.post("/overrides", response_model=OverrideResponse, status_code=201)
async def create_override(
    body: OverrideCreate,
    context: UserContext = Depends(require_permission("users.manage_permissions")),
    service: PermissionService = Depends(get_permission_service)
):
    """Grant or deny a permission for one user, optionally until expires_at"""
    return service.create_override(body, context, utc_now())


@router.delete("/overrides/{override_id}", status_code=204)
async def delete_override(
    override_id: str,
    context: UserContext = Depends(require_permission("users.manage_permissions")),
    service: PermissionService = Depends(get_permission_service)
):
    """Remove a permission override"""
    service.delete_override(override_id, context)
    return None
