from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class ActiveOverride(BaseModel):
    permission: str
    is_granted: bool
    expires_at: Optional[datetime] = None


class UserPermissionsResponse(BaseModel):
    user_id: str
    organization_id: Optional[str] = None
    role: Optional[str] = None
    role_translation_key: Optional[str] = None
    is_admin: bool
    permissions: List[str]
    overrides: List[ActiveOverride]
