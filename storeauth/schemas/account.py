"""Request schemas for admin account management and self-service password change."""

from pydantic import BaseModel, Field

from storeauth.core.security import PASSWORD_MAX_BYTES


class ChangeRoleRequest(BaseModel):
    # Plain string so an unknown role reaches the service and gets its message.
    role: str | None = Field(default=None, description="admin or staff")


class ChangePasswordRequest(BaseModel):
    """Current password is re-verified even though the caller is authenticated."""

    current_password: str = Field(..., alias="currentPassword", min_length=1, max_length=128)
    new_password: str = Field(..., alias="newPassword", min_length=1, max_length=PASSWORD_MAX_BYTES)
    confirm_new_password: str = Field(..., alias="confirmNewPassword", min_length=1, max_length=PASSWORD_MAX_BYTES)

    model_config = {"populate_by_name": True}
