"""Request/response schemas for registration, login and the authenticated identity."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from storeauth.core.security import PASSWORD_MAX_BYTES
from storeauth.models import Role


class RegisterRequest(BaseModel):
    """New account details. Email format and role are checked by the account service."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: str = Field(..., min_length=3, max_length=320, description="Email (unique, case-insensitive)")
    phone: str | None = Field(default=None, max_length=64, description="Optional phone number")
    username: str = Field(..., min_length=1, max_length=255, description="Username (unique)")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_BYTES, description="Password")
    role: str = Field(default=Role.STAFF.value, description="admin or staff")


class LoginRequest(BaseModel):
    """Credentials for login; username may also be the account email."""

    username: str = Field(..., min_length=1, max_length=320, description="Username or email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class AccountView(BaseModel):
    """Outward-facing account representation. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str | None = None
    username: str
    role: Role
    is_deleted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LoginResponse(BaseModel):
    """JWT access token plus the authenticated account."""

    success: bool = True
    message: str = "Login successful"
    token: str = Field(..., description="JWT access token; send as 'Authorization: Bearer <token>'")
    token_type: str = Field(default="bearer", description="Token type")
    data: AccountView


class CurrentAccount(BaseModel):
    """Authenticated account (id, username, role) passed to handlers via dependencies."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: Role
