"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kodbank.core.security import (
    EMAIL_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    PHONE_MAX_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from kodbank.models.user import Role

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    """New customer account. Role is never accepted from the client."""

    model_config = ConfigDict(extra="ignore")

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: str = Field(..., max_length=EMAIL_MAX_LEN, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    phone: str | None = Field(default=None, max_length=PHONE_MAX_LEN)

    @field_validator("username", "email", mode="before")
    @classmethod
    def strip_identity(cls, v: object) -> object:
        # Length and pattern checks run on the stripped value.
        return v.strip() if isinstance(v, str) else v

    @field_validator("phone", mode="before")
    @classmethod
    def strip_phone(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip() or None
        return v


class RegisterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Registration successful"
    user_id: int = Field(..., alias="userId")


class LoginRequest(BaseModel):
    """Credentials for login. Lengths are not checked here so failures stay uniform."""

    username: str = Field(..., max_length=255, description="Username")
    password: str = Field(..., max_length=PASSWORD_MAX_LEN, description="Password")


class LoginResponse(BaseModel):
    """Body returned with the session cookie after a successful login."""

    message: str = "Login successful"
    username: str
    role: Role


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword", max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(
        ...,
        alias="newPassword",
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
    )


class MessageResponse(BaseModel):
    message: str


class CurrentUser(BaseModel):
    """Identity resolved from a valid session token (claims as issued)."""

    username: str
    role: Role


class UserListItem(BaseModel):
    """User entry for the staff list (no password hash, no balance)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role


class UsersListResponse(BaseModel):
    """Response for GET /admin/users (Manager or Admin only)."""

    users: list[UserListItem]
