"""Persistence adapters."""

from storeauth.repositories.accounts import AccountStore, SqlAccountStore

__all__ = ["AccountStore", "SqlAccountStore"]
