"""Pydantic request/response schemas."""

from storeauth.schemas.account import ChangePasswordRequest, ChangeRoleRequest
from storeauth.schemas.auth import (
    AccountView,
    CurrentAccount,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
)
from storeauth.schemas.common import ApiResponse, ErrorResponse, ListResponse
from storeauth.schemas.health import HealthResponse

__all__ = [
    "AccountView",
    "ApiResponse",
    "ChangePasswordRequest",
    "ChangeRoleRequest",
    "CurrentAccount",
    "ErrorResponse",
    "HealthResponse",
    "ListResponse",
    "LoginRequest",
    "LoginResponse",
    "RegisterRequest",
]
