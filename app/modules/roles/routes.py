from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.roles.schemas import (
    RoleCreate, RoleUpdate, RoleResponse, RoleWithPermissionsResponse,
    RolePermissionsUpdate, RoleAssign, RoleAssignmentResponse, RoleUserResponse
)
from app.modules.permissions.schemas import PermissionResponse
from app.modules.roles.service import RoleService
from app.core.audit import AuditLogger
from app.core.dependencies import require_permission
from app.core.permissions import UserContext
from supabase import Client
from typing import List

router = APIRouter(prefix="/roles", tags=["roles"])


def get_role_service(supabase: Client = Depends(get_service_supabase)) -> RoleService:
    return RoleService(supabase, AuditLogger(supabase))


@router.get("", response_model=List[RoleResponse])
async def list_roles(
    limit: int = 50,
    offset: int = 0,
    context: UserContext = Depends(require_permission("roles.view")),
    service: RoleService = Depends(get_role_service)
):
    """List roles of the caller's organization"""
    return service.list_roles(context, limit=limit, offset=offset)


@router.post("", response_model=RoleWithPermissionsResponse, status_code=201)
async def create_role(
    role_data: RoleCreate,
    context: UserContext = Depends(require_permission("roles.create")),
    service: RoleService = Depends(get_role_service)
):
    """Create a new role"""
    return service.create_role(role_data, context)


@router.post("/assign", response_model=RoleAssignmentResponse, status_code=200)
async def assign_role(
    assignment: RoleAssign,
    context: UserContext = Depends(require_permission("users.manage_roles")),
    service: RoleService = Depends(get_role_service)
):
    """Assign a role to a user (replaces the user's current role)"""
    return service.assign_role(assignment, context)


@router.delete("/assignments/{user_role_id}", status_code=204)
async def remove_role_assignment(
    user_role_id: str,
    context: UserContext = Depends(require_permission("users.manage_roles")),
    service: RoleService = Depends(get_role_service)
):
    """Remove a user's role assignment"""
    service.remove_assignment(user_role_id, context)
    return None


@router.get("/{role_id}", response_model=RoleWithPermissionsResponse)
async def get_role(
    role_id: str,
    context: UserContext = Depends(require_permission("roles.view")),
    service: RoleService = Depends(get_role_service)
):
    """Get role with all associated permissions"""
    return service.get_role_with_permissions(role_id, context)


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: str,
    role_data: RoleUpdate,
    context: UserContext = Depends(require_permission("roles.update")),
    service: RoleService = Depends(get_role_service)
):
    """Update role"""
    return service.update_role(role_id, role_data, context)


@router.delete("/{role_id}", status_code=204)
async def delete_role(
    role_id: str,
    context: UserContext = Depends(require_permission("roles.delete")),
    service: RoleService = Depends(get_role_service)
):
    """Delete role (system roles are refused)"""
    service.delete_role(role_id, context)
    return None


@router.put("/{role_id}/permissions", response_model=RoleWithPermissionsResponse)
async def set_role_permissions(
    role_id: str,
    body: RolePermissionsUpdate,
    context: UserContext = Depends(require_permission("roles.manage_permissions")),
    service: RoleService = Depends(get_role_service)
):
    """Replace all permissions for a role"""
    return service.set_role_permissions(role_id, body.permissions, context)


@router.get("/{role_id}/permissions", response_model=List[PermissionResponse])
async def get_role_permissions(
    role_id: str,
    context: UserContext = Depends(require_permission("roles.view")),
    service: RoleService = Depends(get_role_service)
):
    """Permission details granted by a role"""
    return service.get_role_permissions(role_id, context)


@router.get("/{role_id}/users", response_model=List[RoleUserResponse])
async def list_role_users(
    role_id: str,
    context: UserContext = Depends(require_permission("users.view")),
    service: RoleService = Depends(get_role_service)
):
    """Users currently holding a role"""
    return service.list_role_users(role_id, context)
