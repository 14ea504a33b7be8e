"""Request dependencies: the caller's identity and back-office access."""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from grocery.core.security import decode_access_token
from grocery.schemas.auth import ADMIN_ROLE, CurrentUser

# Tokens come from the external identity provider; this URL is documentation only.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """401 unless the token verifies and carries ``sub`` and ``role``."""
    try:
        return CurrentUser.from_claims(decode_access_token(token))
    except (JWTError, KeyError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_role(*allowed_roles: str):
    """Dependency factory: 403 unless the caller holds one of ``allowed_roles``."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{user.role}' not allowed. Required: {', '.join(allowed_roles)}",
            )
        return user

    return checker


# Inventory, sales, catalogue writes and order handling are back-office only
require_admin = require_role(ADMIN_ROLE)
