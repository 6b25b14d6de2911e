"""Password hashing and JWT creation/verification for authentication."""

import enum
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from storeauth.core.config import settings
from storeauth.models.account import Role

if TYPE_CHECKING:
    from storeauth.core.config import Settings

# bcrypt only looks at the first 72 bytes of its input; longer passwords are refused.
PASSWORD_MAX_BYTES = 72

TOKEN_LIFETIME = timedelta(days=1)


def password_byte_length(plain_password: str) -> int:
    return len(plain_password.encode("utf-8"))


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage with a fresh random salt."""
    pw_bytes = plain_password.encode("utf-8")
    if len(pw_bytes) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password exceeds {PASSWORD_MAX_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a plain password against a stored hash. Corrupt hashes verify as False.

    Over-long input never verifies, but still pays for one bcrypt check.
    """
    pw_bytes = plain_password.encode("utf-8")
    too_long = len(pw_bytes) > PASSWORD_MAX_BYTES
    try:
        matched = bcrypt.checkpw(pw_bytes[:PASSWORD_MAX_BYTES], hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False
    return matched and not too_long


# Verified against when a login identifier matches no account, so unknown
# users cost the same bcrypt work as wrong passwords.
DUMMY_PASSWORD_HASH: str = hash_password("storeauth-timing-equalizer")


class TokenRejectionReason(str, enum.Enum):
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    MALFORMED = "malformed"


class TokenRejected(Exception):
    """Raised by TokenIssuer.verify; ``reason`` tells why the token was refused."""

    def __init__(self, reason: TokenRejectionReason) -> None:
        self.reason = reason
        super().__init__(reason.value)


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified bearer token."""

    id: int
    role: Role
    expires_at: datetime


class TokenIssuer:
    """
    Signs and verifies bearer tokens with one process-wide HMAC secret.

    Built once at startup from settings and handed to whoever needs it.
    Changing the secret invalidates every token issued under the old one.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = TOKEN_LIFETIME,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenIssuer":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            lifetime=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
        )

    def issue(self, account_id: int, role: Role | str, now: datetime | None = None) -> str:
        """Create a signed token with sub (account id), role, iat and exp."""
        issued_at = now or datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(account_id),
            "role": Role(role).value,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str, now: datetime | None = None) -> TokenClaims:
        """
        Check signature, then expiry, then claim shape.
        Raises TokenRejected with the matching reason on any failure.
        """
        options: dict[str, Any] = {"require": ["sub", "exp"]}
        if now is not None:
            # PyJWT compares exp and iat against the wall clock; use the given now instead.
            options["verify_exp"] = False
            options["verify_iat"] = False
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options=options,
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenRejected(TokenRejectionReason.EXPIRED) from e
        except jwt.InvalidSignatureError as e:
            raise TokenRejected(TokenRejectionReason.INVALID_SIGNATURE) from e
        except jwt.PyJWTError as e:
            raise TokenRejected(TokenRejectionReason.MALFORMED) from e

        try:
            account_id = int(payload["sub"])
            role = Role(payload.get("role"))
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
        except (TypeError, ValueError) as e:
            raise TokenRejected(TokenRejectionReason.MALFORMED) from e

        if now is not None and now >= expires_at:
            raise TokenRejected(TokenRejectionReason.EXPIRED)
        return TokenClaims(id=account_id, role=role, expires_at=expires_at)
