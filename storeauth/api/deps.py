"""FastAPI dependencies: store, services, current account and role guards."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storeauth.core.database import get_db
from storeauth.core.security import TokenIssuer
from storeauth.models import Role
from storeauth.repositories import AccountStore, SqlAccountStore
from storeauth.schemas.auth import CurrentAccount
from storeauth.services.accounts import AccountService
from storeauth.services.authentication import authenticate_token, authorize

security = HTTPBearer(auto_error=False)


def get_account_store(db: Annotated[Session, Depends(get_db)]) -> AccountStore:
    return SqlAccountStore(db)


def get_token_issuer(request: Request) -> TokenIssuer:
    """The issuer created at startup in storeauth.main."""
    return request.app.state.token_issuer


def get_account_service(
    store: Annotated[AccountStore, Depends(get_account_store)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AccountService:
    return AccountService(store, issuer)


def get_current_account(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: Annotated[AccountStore, Depends(get_account_store)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> CurrentAccount:
    """Dependency: require a valid Bearer JWT for a live account. Raises 401 otherwise."""
    token = credentials.credentials if credentials is not None else None
    account = authenticate_token(token, store, issuer)
    return CurrentAccount.model_validate(account)


def require_roles(*roles: Role) -> Callable[..., CurrentAccount]:
    """
    Build a dependency that admits only the given roles (403 otherwise).

    Usage:
        @router.get("/")
        def route(admin: Annotated[CurrentAccount, Depends(require_roles(Role.ADMIN))]): ...
    """
    allowed = frozenset(roles)

    def guard(
        current_account: Annotated[CurrentAccount, Depends(get_current_account)],
    ) -> CurrentAccount:
        return authorize(current_account, allowed)

    return guard


require_admin = require_roles(Role.ADMIN)
require_staff_or_admin = require_roles(Role.ADMIN, Role.STAFF)
