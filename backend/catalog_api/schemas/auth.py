from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from catalog_api.core.security import Role
from catalog_api.schemas.common import CamelModel


class Token(CamelModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = Field(None, max_length=255)


class UserRead(CamelModel):
    id: UUID
    email: EmailStr
    full_name: Optional[str] = None
    role: Role
    is_active: bool
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    success: bool = True
    token: Token
    user: UserRead


class UserResponse(CamelModel):
    success: bool = True
    data: UserRead
