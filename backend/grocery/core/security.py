"""Verification of bearer tokens issued by the external identity provider.

The provider signs with the shared ``SECRET_KEY``. :func:`create_access_token`
mints tokens with the same claims for scripts and tests.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import jwt

from grocery.core.config import settings


def create_access_token(
    user_id: UUID,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verified claims. Raises JWTError on a bad signature or an expired token."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
