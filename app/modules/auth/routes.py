from fastapi import APIRouter, Depends
from app.modules.auth.schemas import LoginRequest, TokenResponse, MeResponse
from app.modules.auth.service import AuthService
from app.config.permissions_config import role_translation_key
from app.core.dependencies import get_auth_service, get_current_user, get_user_context, utc_now
from app.core.permissions import UserContext, effective_permissions, is_admin
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    current_user: Dict = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate session"""
    service.logout()
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(
    current_user: Dict = Depends(get_current_user),
    context: UserContext = Depends(get_user_context),
):
    """Current user with role and effective permission keys (for frontend UI gating)."""
    return MeResponse(
        id=context.user_id,
        email=current_user.get("email"),
        organization_id=context.organization_id,
        role=context.role_key,
        role_translation_key=role_translation_key(context.role_key) if context.role_key else None,
        is_admin=is_admin(context),
        permissions=sorted(effective_permissions(context, utc_now())),
    )
