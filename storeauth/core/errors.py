"""Failure taxonomy for account and access-control operations.

Every error carries a user-facing ``message`` plus the HTTP status and a short
machine code used by the boundary handler in ``storeauth.main``. Services raise
these; routers never catch them.
"""


class AuthError(Exception):
    """Base class for expected, typed failures surfaced to API callers."""

    status_code: int = 400
    code: str = "error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInputError(AuthError):
    """Malformed or missing fields, or a policy violation (e.g. password too short)."""

    status_code = 400
    code = "invalid_input"


class ConflictError(AuthError):
    """Email or username is already taken."""

    status_code = 400
    code = "conflict"


class InvalidCredentialsError(AuthError):
    """Identifier/password pair did not verify. Deliberately non-specific."""

    status_code = 401
    code = "invalid_credentials"


class CurrentPasswordMismatchError(InvalidCredentialsError):
    """Authenticated caller supplied the wrong current password."""

    status_code = 400


class UnauthenticatedError(AuthError):
    """Missing, invalid or expired token, or the account behind it is gone."""

    status_code = 401
    code = "unauthenticated"


class ForbiddenError(AuthError):
    """Authenticated, but the role is not allowed to perform the operation."""

    status_code = 403
    code = "forbidden"


class NotFoundError(AuthError):
    status_code = 404
    code = "not_found"
