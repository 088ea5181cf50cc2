"""Session issuing (login) and stateless session validation."""

import enum
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

import jwt
from sqlalchemy.orm import Session

from kodbank.core.errors import InvalidCredentials, Unauthorized
from kodbank.core.security import create_access_token, decode_access_token, verify_password
from kodbank.models import Role, User, UserToken
from kodbank.services.audit import log_security_event
from kodbank.services.credentials import CredentialStore

logger = logging.getLogger(__name__)

# Same text for unknown user and wrong password; do not vary it per cause.
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


@dataclass(frozen=True)
class IssuedSession:
    token: str
    expires_at: datetime
    username: str
    role: Role


class SessionState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


@dataclass(frozen=True)
class SessionResult:
    state: SessionState
    subject: str | None = None
    role: Role | None = None
    reason: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED


class SessionIssuer:
    """
    Mints signed tokens and records each one in the audit table.

    Issuing never revokes earlier tokens for the same user.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.credentials = CredentialStore(db)

    def issue(self, user: User, now: datetime | None = None) -> IssuedSession:
        """Sign {sub: username, role} and persist {token, user_id, expiry}."""
        role = Role(user.role)
        issued_at = now or datetime.now(UTC)
        token, expires_at = create_access_token(
            user.username, role.value, issued_at=issued_at
        )
        record = UserToken(
            token=token,
            user_id=user.id,
            issued_at=issued_at,
            expires_at=expires_at,
        )
        self.db.add(record)
        self.db.flush()
        return IssuedSession(
            token=token,
            expires_at=expires_at,
            username=user.username,
            role=role,
        )

    def authenticate(self, username: str, password: str) -> IssuedSession:
        """
        Verify credentials and issue a session.

        Raises InvalidCredentials with one generic message for every failure cause.
        """
        user = self.credentials.find_by_username(username)
        if user is None:
            log_security_event("LOGIN_FAILURE", None, f"Unknown username: {username}")
            raise InvalidCredentials(INVALID_CREDENTIALS_MESSAGE)
        if not verify_password(password, user.password_hash):
            log_security_event(
                "LOGIN_FAILURE_WRONG_PASSWORD", user.id, f"Username: {username}"
            )
            raise InvalidCredentials(INVALID_CREDENTIALS_MESSAGE)

        issued = self.issue(user)
        log_security_event("LOGIN_SUCCESS", user.id, f"Role: {issued.role.value}")
        return issued


def validate_session(token: str | None) -> SessionResult:
    """
    Resolve a raw token to a session state.

    Pure function of the token, the server secret and the current time;
    the issued-token table is not consulted.
    """
    if not token:
        return SessionResult(SessionState.UNAUTHENTICATED, reason="No token provided")
    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        return SessionResult(SessionState.REJECTED, reason="Token expired")
    except jwt.PyJWTError as e:
        logger.debug("Rejected session token: %s", e)
        return SessionResult(SessionState.REJECTED, reason="Invalid token")

    subject = payload.get("sub")
    try:
        role = Role(payload.get("role"))
    except ValueError:
        return SessionResult(SessionState.REJECTED, reason="Invalid token payload")
    if not subject:
        return SessionResult(SessionState.REJECTED, reason="Invalid token payload")
    return SessionResult(SessionState.AUTHENTICATED, subject=subject, role=role)


def require_session(token: str | None) -> SessionResult:
    """Return the authenticated result or raise Unauthorized with a client-safe message."""
    result = validate_session(token)
    if result.state is SessionState.UNAUTHENTICATED:
        raise Unauthorized("Unauthorized: No token provided")
    if result.state is SessionState.REJECTED:
        raise Unauthorized("Unauthorized: Invalid or expired token")
    return result
