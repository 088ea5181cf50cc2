"""Security audit log. Never pass plaintext passwords or tokens as details."""

import logging

security_logger = logging.getLogger("kodbank.security")


def log_security_event(event: str, uid: int | None, details: str) -> None:
    """Write one security event line (e.g. LOGIN_SUCCESS, LOGIN_FAILURE)."""
    security_logger.info(
        "[SECURITY EVENT]: %s | UID: %s | Info: %s",
        event,
        uid if uid is not None else "N/A",
        details,
    )
