"""TradeBoost — Request Authentication Dependency.

Sessions are issued by the identity provider as HS256 JWTs; the ``sub``
claim is the user id. Requests without a valid token are rejected before
any database or network I/O.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from tradeboost.config import settings
from tradeboost.core.logging import get_logger

logger = get_logger("api.auth")

_bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> str:
    """Return the authenticated user id from the Bearer token."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("User not authenticated")
    if not settings.auth_jwt_secret:
        logger.error("AUTH_JWT_SECRET is not configured; rejecting request")
        raise _unauthorized("User not authenticated")

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
        )
    except JWTError:
        raise _unauthorized("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token payload")
    return str(user_id)
