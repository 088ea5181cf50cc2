"""Domain errors raised by services and translated to HTTP responses by the API layer."""


class KodbankError(Exception):
    """Base class for expected failures; message is safe to show to the client."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class ConfigurationError(KodbankError):
    """Missing or placeholder secrets; fatal for the request (500)."""


class DuplicateIdentity(KodbankError):
    """Username or email already registered."""


class InvalidCredentials(KodbankError):
    """Login failed. Same message whether the user is unknown or the password is wrong."""


class Unauthorized(KodbankError):
    """Missing, invalid or expired session token."""


class UserNotFound(KodbankError):
    """The resolved identity has no backing user record."""
