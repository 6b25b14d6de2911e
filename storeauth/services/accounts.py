"""Account lifecycle: registration, login, role changes, soft delete/restore, password changes."""

import logging
import re
from typing import TYPE_CHECKING

from storeauth.core.config import get_settings
from storeauth.core.errors import (
    CurrentPasswordMismatchError,
    InvalidCredentialsError,
    InvalidInputError,
    NotFoundError,
)
from storeauth.core.security import (
    DUMMY_PASSWORD_HASH,
    PASSWORD_MAX_BYTES,
    TokenIssuer,
    hash_password,
    password_byte_length,
    verify_password,
)
from storeauth.models import Account, Role

if TYPE_CHECKING:
    from storeauth.repositories import AccountStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
USER_NOT_FOUND_MESSAGE = "User not found"
INVALID_ROLE_MESSAGE = 'Invalid role. Role must be either "admin" or "staff"'

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


def validate_email(email: str) -> str:
    """Return the trimmed, lower-cased email or raise InvalidInputError."""
    normalized = (email or "").strip().lower()
    if not EMAIL_PATTERN.match(normalized):
        raise InvalidInputError("Please enter a valid email")
    return normalized


def parse_role(value: Role | str | None) -> Role:
    """Turn an external role string into a Role, or raise InvalidInputError."""
    try:
        return Role(value)
    except ValueError:
        raise InvalidInputError(INVALID_ROLE_MESSAGE) from None


class AccountService:
    """
    Orchestrates the store, the password hasher and the token issuer.

    One instance per request; the store carries the request's DB session.
    Callers are responsible for authorization (see services.authentication).
    """

    def __init__(
        self,
        store: "AccountStore",
        issuer: TokenIssuer | None = None,
        password_min_len: int | None = None,
    ) -> None:
        self.store = store
        self.issuer = issuer
        self.password_min_len = password_min_len or get_settings().PASSWORD_MIN_LEN

    def _check_password_length(self, password: str, label: str) -> None:
        if len(password) < self.password_min_len:
            raise InvalidInputError(
                f"{label} must be at least {self.password_min_len} characters long"
            )
        if password_byte_length(password) > PASSWORD_MAX_BYTES:
            raise InvalidInputError(
                f"{label} must be at most {PASSWORD_MAX_BYTES} bytes long"
            )

    def register(
        self,
        name: str,
        email: str,
        username: str,
        password: str,
        phone: str | None = None,
        role: Role | str = Role.STAFF,
    ) -> Account:
        """Create a new active account. Duplicate email/username raises ConflictError."""
        parsed_role = parse_role(role)
        if not name or not name.strip():
            raise InvalidInputError("Name is required")
        if not username or not username.strip():
            raise InvalidInputError("Username is required")
        # Login accepts username or email; "@" is reserved for emails.
        if "@" in username:
            raise InvalidInputError("Username cannot contain @")
        normalized_email = validate_email(email)
        self._check_password_length(password, "Password")

        account = Account(
            name=name.strip(),
            email=normalized_email,
            phone=phone.strip() if phone and phone.strip() else None,
            username=username.strip(),
            password_hash=hash_password(password),
            role=parsed_role,
            is_deleted=False,
        )
        account = self.store.insert(account)
        logger.info(
            "Account registered",
            extra={"account_id": account.id, "role": parsed_role.value},
        )
        return account

    def login(self, identifier: str, password: str) -> tuple[str, Account]:
        """
        Verify credentials and issue a token.

        Unknown identifier, deleted account and wrong password all raise the
        same InvalidCredentialsError after the same amount of bcrypt work.
        """
        if self.issuer is None:
            raise RuntimeError("AccountService.login requires a TokenIssuer")

        account = self.store.find_by_identifier(identifier)
        if account is None or account.is_deleted:
            verify_password(password, DUMMY_PASSWORD_HASH)
            logger.info("Login failed")
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)
        if not verify_password(password, account.password_hash):
            logger.info("Login failed")
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        token = self.issuer.issue(account.id, account.role)
        logger.info("Login succeeded", extra={"account_id": account.id})
        return token, account

    def list_accounts(self) -> list[Account]:
        return self.store.list_active()

    def get_account(self, account_id: int) -> Account:
        account = self.store.find_by_id(account_id)
        if account is None or account.is_deleted:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        return account

    def change_role(self, account_id: int, new_role: Role | str | None) -> Account:
        role = parse_role(new_role)
        account = self.store.update_fields(
            account_id, {"role": role}, include_deleted=False
        )
        if account is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        logger.info(
            "Account role changed",
            extra={"account_id": account_id, "role": role.value},
        )
        return account

    def soft_delete(self, account_id: int) -> Account:
        """Mark the account deleted. Deleting an already-deleted account succeeds."""
        account = self.store.update_fields(account_id, {"is_deleted": True})
        if account is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        logger.info("Account soft-deleted", extra={"account_id": account_id})
        return account

    def restore(self, account_id: int) -> Account:
        """Clear the deleted flag. Restoring an active account succeeds."""
        account = self.store.update_fields(account_id, {"is_deleted": False})
        if account is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        logger.info("Account restored", extra={"account_id": account_id})
        return account

    def change_password(
        self,
        account_id: int,
        current_password: str,
        new_password: str,
        confirm_new_password: str,
    ) -> Account:
        """
        Replace the password after re-verifying the current one.

        The current password is required even though the caller holds a valid
        token, so a stolen token alone cannot lock the owner out.
        """
        if new_password != confirm_new_password:
            raise InvalidInputError("New password and confirmation do not match")
        self._check_password_length(new_password, "New password")

        account = self.store.find_by_id(account_id)
        if account is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        if not verify_password(current_password, account.password_hash):
            logger.info("Password change rejected", extra={"account_id": account_id})
            raise CurrentPasswordMismatchError("Current password is incorrect")

        updated = self.store.update_fields(
            account_id, {"password_hash": hash_password(new_password)}
        )
        if updated is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        logger.info("Password changed", extra={"account_id": account_id})
        return updated
