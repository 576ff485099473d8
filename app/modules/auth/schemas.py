from pydantic import BaseModel, EmailStr
from typing import List, Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    organization_id: Optional[str] = None


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    organization_id: Optional[str] = None
    role: Optional[str] = None
    role_translation_key: Optional[str] = None
    is_admin: bool
    permissions: List[str]
