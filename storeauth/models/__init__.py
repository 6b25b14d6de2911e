"""SQLAlchemy ORM models."""

from storeauth.models.account import ROLE_VALUES, Account, Role
from storeauth.models.base import Base

__all__ = ["Account", "Base", "ROLE_VALUES", "Role"]
