"""
Security: password hashing and JWT.
Tokens carry the user id and role so the gate never needs a DB round-trip.
"""

import hmac
from datetime import datetime, timezone, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from solarpanels.config import get_settings

settings = get_settings()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """One-way hash for storage. Never store plain passwords."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Constant-time comparison for login."""
    return pwd_context.verify(plain, hashed)


def create_access_token(
    subject: str | int,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create JWT for an authenticated user. Subject is the user id."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode = {"sub": str(subject), "role": role, "iat": now, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode and validate JWT (signature and expiry). Returns payload or None if invalid."""
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError:
        return None


def remaining_lifetime_seconds(expires_at: int) -> int:
    """Seconds until a token with `exp` claim `expires_at` expires (never negative)."""
    remaining = expires_at - int(datetime.now(timezone.utc).timestamp())
    return max(remaining, 0)


def verify_service_token(token: str) -> bool:
    """Check the shared token the calculation service sends with its results."""
    return hmac.compare_digest(token.encode(), settings.calculation_service_token.encode())
