"""ORM model for store accounts (auth and RBAC)."""

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String, func

from storeauth.models.base import Base


class Role(str, enum.Enum):
    """Closed set of account roles. Parse external strings with ``Role(value)``."""

    ADMIN = "admin"
    STAFF = "staff"


ROLE_VALUES: frozenset[str] = frozenset(r.value for r in Role)


class Account(Base):
    """
    Account for JWT authentication and role-based access control.

    email is stored lower-cased so the unique index is case-insensitive.
    Soft-deleted rows keep their email and username reserved.
    """

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    phone = Column(String(64), nullable=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(
            Role,
            name="account_role",
            native_enum=False,
            create_constraint=True,
            length=32,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=Role.STAFF,
    )
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Account id={self.id} username={self.username!r} role={self.role}>"
