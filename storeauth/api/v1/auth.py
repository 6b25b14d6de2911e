"""Registration and login endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from storeauth.api.deps import get_account_service
from storeauth.schemas.auth import AccountView, LoginRequest, LoginResponse, RegisterRequest
from storeauth.schemas.common import ApiResponse
from storeauth.services.accounts import AccountService

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[AccountView],
    status_code=status.HTTP_201_CREATED,
)
def register(
    body: RegisterRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[AccountView]:
    """
    Register a new account (role defaults to staff).
    Returns 400 if the email or username is already taken.
    """
    account = service.register(
        name=body.name,
        email=body.email,
        phone=body.phone,
        username=body.username,
        password=body.password,
        role=body.role,
    )
    return ApiResponse(
        message="User registered successfully",
        data=AccountView.model_validate(account),
    )


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> LoginResponse:
    """
    Authenticate with username (or email) and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    token, account = service.login(body.username, body.password)
    return LoginResponse(token=token, data=AccountView.model_validate(account))
