from datetime import datetime
from supabase import Client
from app.config.permissions_config import role_translation_key
from app.core.dependencies import get_organization_user, load_user_context
from app.core.permissions import UserContext, effective_permissions, is_admin
from app.modules.users.schemas import ActiveOverride, UserPermissionsResponse


class UserPermissionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_permissions(self, user_id: str, actor: UserContext, now: datetime) -> UserPermissionsResponse:
        """Effective permissions of a user of the caller's organization, resolved at `now`"""
        get_organization_user(user_id, actor.organization_id, self.supabase)
        context = load_user_context(user_id, self.supabase)
        return UserPermissionsResponse(
            user_id=context.user_id,
            organization_id=context.organization_id,
            role=context.role_key,
            role_translation_key=role_translation_key(context.role_key) if context.role_key else None,
            is_admin=is_admin(context),
            permissions=sorted(effective_permissions(context, now)),
            overrides=[
                ActiveOverride(permission=o.permission, is_granted=o.is_granted, expires_at=o.expires_at)
                for o in context.overrides
                if o.is_active(now)
            ],
        )
