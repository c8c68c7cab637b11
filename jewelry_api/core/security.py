# jewelry_api/core/security.py
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError
from jose import ExpiredSignatureError, JWTError, jwt

from jewelry_api.core.config import get_settings
from jewelry_api.core.errors import ExpiredTokenError, InvalidTokenError

settings = get_settings()

TOKEN_TYPE = "admin_access"

# Argon2id with configurable cost. The defaults (64 MiB, 3 passes) keep
# a single verification well under a second on commodity hardware.
pwd_hasher = PasswordHasher(
    time_cost=settings.ARGON2_TIME_COST,
    memory_cost=settings.ARGON2_MEMORY_COST,
    parallelism=settings.ARGON2_PARALLELISM,
    type=Type.ID,
)

# Hash of a random throwaway password, used by dummy_verify()
_DUMMY_HASH = pwd_hasher.hash(uuid.uuid4().hex)


def hash_password(password: str) -> str:
    return pwd_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return False (never raise) for wrong passwords and malformed hashes."""
    try:
        return pwd_hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """True when the hash was made with different cost parameters."""
    return pwd_hasher.check_needs_rehash(password_hash)


def dummy_verify() -> None:
    """
    Burn the same time a real verification would.

    Called when the login email is unknown so that response time does
    not reveal which emails have accounts.
    """
    verify_password("not-the-password", _DUMMY_HASH)


# ---- Password policy ----

SPECIAL_CHARS_RE = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

PASSWORD_RULES: list[tuple[str, Any]] = [
    ("Password must be at least 8 characters long", lambda p: len(p) >= 8),
    ("Password must contain at least one uppercase letter", lambda p: re.search(r"[A-Z]", p)),
    ("Password must contain at least one lowercase letter", lambda p: re.search(r"[a-z]", p)),
    ("Password must contain at least one number", lambda p: re.search(r"\d", p)),
    ("Password must contain at least one special character", lambda p: SPECIAL_CHARS_RE.search(p)),
]


def password_strength_errors(password: str) -> list[str]:
    """Return every unmet rule; an empty list means the password is acceptable."""
    return [message for message, check in PASSWORD_RULES if not check(password)]


# ---- Access tokens ----


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(admin_id: uuid.UUID) -> tuple[str, int]:
    """
    Issue a signed admin access token.

    Returns:
        (token, expires_in_seconds)
    """
    issued_at = now_utc()
    expires_in = settings.JWT_EXPIRATION_HOURS * 60 * 60
    payload = {
        "sub": str(admin_id),
        "type": TOKEN_TYPE,
        "scope": "admin",
        "iss": settings.JWT_ISSUER,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=expires_in),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_in


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature, issuer and expiration of an admin access token.

    Raises:
        ExpiredTokenError: token is past its exp claim.
        InvalidTokenError: bad signature, malformed, wrong issuer/type.
    """
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=settings.JWT_ISSUER,
        )
    except ExpiredSignatureError:
        raise ExpiredTokenError()
    except JWTError:
        raise InvalidTokenError()

    if claims.get("type") != TOKEN_TYPE:
        raise InvalidTokenError()
    return claims
