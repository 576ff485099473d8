from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class RoleCreate(BaseModel):
    key: str = Field(pattern=r"^[a-z][a-z0-9_]*$", max_length=64)
    color: Optional[str] = None
    description: Optional[str] = None
    permissions: List[str] = []


class RoleUpdate(BaseModel):
    color: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class RoleResponse(BaseModel):
    id: str
    key: str
    translation_key: str
    color: Optional[str] = None
    description: Optional[str] = None
    is_system_role: bool = False
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleWithPermissionsResponse(RoleResponse):
    permissions: List[str]


class RolePermissionsUpdate(BaseModel):
    permissions: List[str]


class RoleAssign(BaseModel):
    user_id: str
    role_id: str


class RoleAssignmentResponse(BaseModel):
    id: str
    user_id: str
    role_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleUserResponse(BaseModel):
    assignment_id: str
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    is_active: bool
    assigned_at: Optional[datetime] = None
