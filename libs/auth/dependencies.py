from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser, Role
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)
security = HTTPBearer()


async def get_current_user(
    token: Annotated[HTTPAuthorizationCredentials, Depends(security)]
) -> AuthUser:
    """
    Validate the bearer JWT and return the authenticated user.
    """
    settings = get_settings()
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token.credentials,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options={"verify_aud": settings.JWT_AUDIENCE is not None},
        )
        return AuthUser(**payload)

    except (JWTError, ValidationError):
        raise credentials_exception


def ensure_role(user: AuthUser, allowed: tuple[Role, ...], detail: str) -> AuthUser:
    """Raise 403 unless ``user`` holds one of the ``allowed`` roles."""
    if user.role not in allowed:
        logger.warning(
            "User %s with role %s denied (requires %s)",
            user.user_id,
            user.role.value,
            ",".join(r.value for r in allowed),
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return user


def ensure_admin(user: AuthUser) -> AuthUser:
    return ensure_role(user, (Role.ADMIN,), "Admin privileges required")


def ensure_coach(user: AuthUser) -> AuthUser:
    return ensure_role(user, (Role.ADMIN, Role.COACH), "Coach privileges required")


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> AuthUser:
    """Ensure the user has the ADMIN role."""
    return ensure_admin(current_user)


async def require_coach(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> AuthUser:
    """Ensure the user is a COACH or an ADMIN."""
    return ensure_coach(current_user)
