"""Pydantic request/response schemas."""

from kodbank.schemas.auth import (
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    UserListItem,
    UsersListResponse,
)
from kodbank.schemas.bank import BalanceResponse, LedgerEntryOut, ProfileResponse
from kodbank.schemas.health import HealthResponse

__all__ = [
    "BalanceResponse",
    "ChangePasswordRequest",
    "CurrentUser",
    "HealthResponse",
    "LedgerEntryOut",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "ProfileResponse",
    "RegisterRequest",
    "RegisterResponse",
    "UserListItem",
    "UsersListResponse",
]
