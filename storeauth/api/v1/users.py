"""Account management endpoints: admin-only user administration plus self-service."""

from typing import Annotated

from fastapi import APIRouter, Depends

from storeauth.api.deps import (
    get_account_service,
    get_current_account,
    require_admin,
    require_staff_or_admin,
)
from storeauth.schemas.account import ChangePasswordRequest, ChangeRoleRequest
from storeauth.schemas.auth import AccountView, CurrentAccount
from storeauth.schemas.common import ApiResponse, ListResponse
from storeauth.services.accounts import AccountService

router = APIRouter()

# Static paths are declared before "/{account_id}" so they are matched first.


@router.get("/me", response_model=ApiResponse[AccountView])
def get_me(
    current: Annotated[CurrentAccount, Depends(require_staff_or_admin)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[AccountView]:
    """Return the caller's own account (admin or staff)."""
    account = service.get_account(current.id)
    return ApiResponse(data=AccountView.model_validate(account))


@router.patch("/change-password", response_model=ApiResponse[None])
def change_password(
    body: ChangePasswordRequest,
    current: Annotated[CurrentAccount, Depends(get_current_account)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[None]:
    """
    Change the caller's password. The current password must be supplied and
    correct, and the new password must match its confirmation.
    """
    service.change_password(
        current.id,
        body.current_password,
        body.new_password,
        body.confirm_new_password,
    )
    return ApiResponse(message="Password changed successfully")


@router.get("", response_model=ListResponse[AccountView])
def list_users(
    _admin: Annotated[CurrentAccount, Depends(require_admin)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ListResponse[AccountView]:
    """List all active accounts, newest first (admin only)."""
    accounts = [AccountView.model_validate(a) for a in service.list_accounts()]
    return ListResponse(count=len(accounts), data=accounts)


@router.get("/{account_id}", response_model=ApiResponse[AccountView])
def get_user(
    account_id: int,
    _admin: Annotated[CurrentAccount, Depends(require_admin)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[AccountView]:
    """Get one active account by id (admin only)."""
    account = service.get_account(account_id)
    return ApiResponse(data=AccountView.model_validate(account))


@router.patch("/{account_id}/role", response_model=ApiResponse[AccountView])
def change_user_role(
    account_id: int,
    body: ChangeRoleRequest,
    _admin: Annotated[CurrentAccount, Depends(require_admin)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[AccountView]:
    """Set an active account's role to admin or staff (admin only)."""
    account = service.change_role(account_id, body.role)
    return ApiResponse(
        message="User role updated successfully",
        data=AccountView.model_validate(account),
    )


@router.delete("/{account_id}", response_model=ApiResponse[None])
def delete_user(
    account_id: int,
    _admin: Annotated[CurrentAccount, Depends(require_admin)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[None]:
    """Soft delete an account (admin only). Its existing tokens stop working."""
    service.soft_delete(account_id)
    return ApiResponse(message="User deleted successfully")


@router.patch("/{account_id}/restore", response_model=ApiResponse[AccountView])
def restore_user(
    account_id: int,
    _admin: Annotated[CurrentAccount, Depends(require_admin)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse[AccountView]:
    """Restore a soft-deleted account (admin only)."""
    account = service.restore(account_id)
    return ApiResponse(
        message="User restored successfully",
        data=AccountView.model_validate(account),
    )
