"""Bearer-token authentication and role authorization, independent of the web framework."""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

from storeauth.core.errors import ForbiddenError, UnauthenticatedError
from storeauth.core.security import TokenIssuer, TokenRejected
from storeauth.models import Account, Role

if TYPE_CHECKING:
    from storeauth.repositories import AccountStore

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Unauthorized - Invalid token"


class HasRole(Protocol):
    role: Role


def authenticate_token(
    token: str | None,
    store: "AccountStore",
    issuer: TokenIssuer,
) -> Account:
    """
    Resolve a bearer token to the live, non-deleted account it names.

    The account is always re-read from the store, so a token issued before a
    soft delete stops working immediately and role changes take effect
    without a new login. Raises UnauthenticatedError on every failure.
    """
    if not token:
        raise UnauthenticatedError("Not authenticated")

    try:
        claims = issuer.verify(token)
    except TokenRejected as e:
        logger.info("Bearer token rejected", extra={"reason": e.reason.value})
        raise UnauthenticatedError(INVALID_TOKEN_MESSAGE) from e

    account = store.find_by_id(claims.id)
    if account is None or account.is_deleted:
        logger.info(
            "Token subject is missing or deleted",
            extra={"account_id": claims.id},
        )
        raise UnauthenticatedError(INVALID_TOKEN_MESSAGE)
    return account


def authorize(identity: HasRole | None, allowed: Iterable[Role]) -> HasRole:
    """
    Return identity unchanged if its role is in allowed.

    Raises UnauthenticatedError when no identity was resolved (authentication
    must run first) and ForbiddenError when the role is not allowed.
    """
    if identity is None:
        raise UnauthenticatedError(
            "User not authenticated - Make sure authentication runs before authorization"
        )
    if identity.role not in frozenset(allowed):
        raise ForbiddenError("Unauthorized - Insufficient permissions")
    return identity
