"""Registration, cookie-based login, password rotation and logout."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kodbank.api.gate import get_current_user, session_cookie
from kodbank.core.config import Settings, ensure_configured, get_settings
from kodbank.core.database import get_db, unit_of_work
from kodbank.core.errors import ConfigurationError, DuplicateIdentity, InvalidCredentials
from kodbank.core.security import hash_password, verify_password
from kodbank.schemas.auth import (
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
)
from kodbank.services.accounts import register_account
from kodbank.services.audit import log_security_event
from kodbank.services.credentials import CredentialStore
from kodbank.services.sessions import SessionIssuer, validate_session

logger = logging.getLogger(__name__)

router = APIRouter()


def require_configuration(
    cfg: Annotated[Settings, Depends(get_settings)],
) -> Settings:
    """Dependency: fail with 500 before touching the store when secrets are placeholders."""
    try:
        ensure_configured(cfg)
    except ConfigurationError as e:
        logger.error("Refusing request: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        ) from e
    return cfg


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    _cfg: Annotated[Settings, Depends(require_configuration)],
) -> RegisterResponse:
    """Create a Customer account with the opening balance and seeded ledger."""
    try:
        user = register_account(
            db,
            username=body.username,
            email=body.email,
            password=body.password,
            phone=body.phone,
        )
    except DuplicateIdentity as e:
        log_security_event("REGISTRATION_CONFLICT", None, f"Username: {body.username}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    except SQLAlchemyError as e:
        logger.exception("Registration failed for username=%s", body.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed. Please try again later.",
        ) from e
    return RegisterResponse(user_id=user.id)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    cfg: Annotated[Settings, Depends(require_configuration)],
) -> LoginResponse:
    """
    Authenticate with username and password; sets the session cookie.

    Unknown user and wrong password produce the same 401 body.
    """
    try:
        with unit_of_work(db):
            issued = SessionIssuer(db).authenticate(body.username, body.password)
    except InvalidCredentials as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message) from e
    except SQLAlchemyError as e:
        logger.exception("Login failed for username=%s", body.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed",
        ) from e

    response.set_cookie(
        key=cfg.COOKIE_NAME,
        value=issued.token,
        max_age=cfg.JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=cfg.COOKIE_SECURE,
        samesite="lax",
    )
    return LoginResponse(username=issued.username, role=issued.role)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> MessageResponse:
    """Rotate the password after re-checking the current one. Existing tokens stay valid."""
    store = CredentialStore(db)
    try:
        user = store.find_by_username(current_user.username)
    except SQLAlchemyError as e:
        logger.exception("Password change lookup failed for username=%s", current_user.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Password update failed",
        ) from e
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not verify_password(body.current_password, user.password_hash):
        log_security_event(
            "PASSWORD_CHANGE_FAILURE", user.id, f"Username: {current_user.username}"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )

    new_hash = hash_password(body.new_password)
    try:
        with unit_of_work(db):
            store.update_password(user.id, new_hash)
    except SQLAlchemyError as e:
        logger.exception("Password change failed for user_id=%s", user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Password update failed",
        ) from e
    log_security_event("PASSWORD_CHANGED", user.id, f"Username: {current_user.username}")
    return MessageResponse(message="Password updated successfully")


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    token: Annotated[str | None, Depends(session_cookie)],
    cfg: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """Clear the session cookie. The token itself stays valid until it expires."""
    result = validate_session(token)
    if result.is_authenticated:
        log_security_event("LOGOUT", None, f"Username: {result.subject}")
    response.delete_cookie(
        key=cfg.COOKIE_NAME,
        httponly=True,
        secure=cfg.COOKIE_SECURE,
        samesite="lax",
    )
    return MessageResponse(message="Logged out")
