"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storeauth.api.v1 import router as api_router
from storeauth.core.config import settings
from storeauth.core.errors import AuthError, InvalidInputError, UnauthenticatedError
from storeauth.core.logging import configure_logging
from storeauth.core.security import TokenIssuer
from storeauth.schemas.common import ErrorResponse

configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Store Auth API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Signing secret is read once here and injected; rotating it invalidates all tokens.
app.state.token_issuer = TokenIssuer.from_settings(settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_PREFIX)


def _error_response(status_code: int, body: ErrorResponse, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, exclude_none=True),
        headers=headers,
    )


# Pydantic error keys that may echo request values (e.g. a password) back to the caller.
_REDACTED_ERROR_KEYS = frozenset({"input", "ctx"})


def _redact_validation_errors(errors: Sequence[Any]) -> list[dict[str, Any]]:
    return [{k: v for k, v in err.items() if k not in _REDACTED_ERROR_KEYS} for err in errors]


@app.exception_handler(AuthError)
async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
    """Typed operation failures: status and code come from the error class."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return _error_response(exc.status_code, ErrorResponse(message=exc.message, code=exc.code), headers)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing request fields are InvalidInput (400)."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
    message = f"Invalid {field}: {first.get('msg', 'invalid value')}"
    detail = jsonable_encoder(_redact_validation_errors(errors)) if settings.APP_ENV == "dev" else None
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(message=message, code=InvalidInputError.code, error=detail),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Store or infrastructure failures. Detail is exposed only in dev."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = f"{type(exc).__name__}: {exc}" if settings.APP_ENV == "dev" else None
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(message="Internal server error", code="unexpected", error=detail),
    )


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Store Auth API"}
