"""Request gate: resolve the session cookie before any protected handler runs."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyCookie

from kodbank.core.config import settings
from kodbank.core.errors import Unauthorized
from kodbank.models import Role
from kodbank.schemas.auth import CurrentUser
from kodbank.services.sessions import require_session

session_cookie = APIKeyCookie(name=settings.COOKIE_NAME, auto_error=False)


def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(session_cookie)],
) -> CurrentUser:
    """
    Dependency: require a valid session cookie and return the token's identity.

    Raises 401 if the cookie is missing, tampered with or expired. The store is
    not consulted; claims are used as issued.
    """
    try:
        result = require_session(token)
    except Unauthorized as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
        ) from e
    current_user = CurrentUser(username=result.subject, role=result.role)
    request.state.current_user = current_user
    return current_user


def require_roles(*roles: Role) -> Callable[..., CurrentUser]:
    """Dependency factory: require an authenticated user whose token role is in roles."""
    allowed = frozenset(roles)

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role for this action",
            )
        return current_user

    return dependency
