from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class PermissionResponse(BaseModel):
    id: str
    key: str
    translation_key: str
    resource: str
    action: str
    category: str
    description: Optional[str] = None
    display_order: int = 0

    class Config:
        from_attributes = True


class PermissionCheckRequest(BaseModel):
    permission: str
    user_id: Optional[str] = None  # defaults to the caller


class PermissionCheckResponse(BaseModel):
    user_id: str
    permission: str
    allowed: bool


class PermissionCheckAnyRequest(BaseModel):
    permissions: List[str]
    user_id: Optional[str] = None


class PermissionCheckAnyResponse(BaseModel):
    user_id: str
    allowed: bool


class OverrideCreate(BaseModel):
    user_id: str
    permission: str
    is_granted: bool
    reason: Optional[str] = None
    expires_at: Optional[datetime] = None


class OverrideResponse(BaseModel):
    id: str
    user_id: str
    permission: str
    is_granted: bool
    reason: Optional[str] = None
    expires_at: Optional[datetime] = None
    granted_by: Optional[str] = None
    created_at: Optional[datetime] = None
    is_active: bool

    class Config:
        from_attributes = True
