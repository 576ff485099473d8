from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.users.schemas import UserPermissionsResponse
from app.modules.users.service import UserPermissionService
from app.core.dependencies import require_permission, utc_now
from app.core.permissions import UserContext
from supabase import Client

router = APIRouter(prefix="/users", tags=["users"])


def get_user_permission_service(supabase: Client = Depends(get_service_supabase)) -> UserPermissionService:
    return UserPermissionService(supabase)


@router.get("/{user_id}/permissions", response_model=UserPermissionsResponse)
async def get_user_permissions(
    user_id: str,
    context: UserContext = Depends(require_permission("users.view")),
    service: UserPermissionService = Depends(get_user_permission_service)
):
    """Role, active overrides and effective permission keys of a user"""
    return service.get_user_permissions(user_id, context, utc_now())
