"""
Account persistence behind a small repository interface.

AccountStore is what services depend on; SqlAccountStore implements it on top
of a SQLAlchemy Session. Uniqueness of email and username is left to the
database's unique indexes so concurrent registrations cannot both succeed.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy import case, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storeauth.core.errors import ConflictError
from storeauth.models import Account

logger = logging.getLogger(__name__)

# Fields callers may change through update_fields(); id and timestamps are store-owned.
UPDATABLE_FIELDS = frozenset(
    {"name", "email", "phone", "username", "password_hash", "role", "is_deleted"}
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountStore(ABC):
    """Operations the lifecycle manager and authentication need from persistence."""

    @abstractmethod
    def find_by_identifier(self, identifier: str) -> Account | None:
        """
        Match username exactly or email case-insensitively.
        Active rows win over deleted ones, then an email match over a username match.
        """

    @abstractmethod
    def find_by_id(self, account_id: int) -> Account | None:
        """Return the account with this id, deleted or not."""

    @abstractmethod
    def insert(self, account: Account) -> Account:
        """Persist a new account. Raises ConflictError if email or username is taken."""

    @abstractmethod
    def update_fields(
        self,
        account_id: int,
        fields: dict[str, Any],
        *,
        include_deleted: bool = True,
    ) -> Account | None:
        """
        Apply fields in a single conditional UPDATE and return the fresh row.
        Returns None if no row matched (missing, or deleted when include_deleted=False).
        """

    @abstractmethod
    def list_active(self) -> list[Account]:
        """Non-deleted accounts, newest first."""


class SqlAccountStore(AccountStore):
    """AccountStore over one request-scoped SQLAlchemy Session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_identifier(self, identifier: str) -> Account | None:
        identifier = identifier.strip()
        if not identifier:
            return None
        email = normalize_email(identifier)
        return (
            self.session.query(Account)
            .filter(or_(Account.username == identifier, Account.email == email))
            .order_by(
                Account.is_deleted,
                case((Account.email == email, 0), else_=1),
                Account.id,
            )
            .first()
        )

    def find_by_id(self, account_id: int) -> Account | None:
        return self.session.get(Account, account_id)

    def insert(self, account: Account) -> Account:
        account.email = normalize_email(account.email)
        self.session.add(account)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.info(
                "Account insert rejected by unique constraint",
                extra={"username": account.username},
            )
            raise ConflictError("User with this email or username already exists") from e
        self.session.refresh(account)
        return account

    def update_fields(
        self,
        account_id: int,
        fields: dict[str, Any],
        *,
        include_deleted: bool = True,
    ) -> Account | None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown account fields: {sorted(unknown)!r}")
        if "email" in fields:
            fields = {**fields, "email": normalize_email(fields["email"])}

        query = self.session.query(Account).filter(Account.id == account_id)
        if not include_deleted:
            query = query.filter(Account.is_deleted.is_(False))
        try:
            updated = query.update(fields, synchronize_session=False)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise ConflictError("User with this email or username already exists") from e
        if updated == 0:
            return None

        account = self.session.get(Account, account_id)
        if account is not None:
            self.session.refresh(account)
        return account

    def list_active(self) -> list[Account]:
        return (
            self.session.query(Account)
            .filter(Account.is_deleted.is_(False))
            .order_by(Account.created_at.desc(), Account.id.desc())
            .all()
        )
