"""SQLAlchemy ORM models."""

from kodbank.models.base import Base
from kodbank.models.ledger import LedgerEntry, LedgerKind, LedgerStatus
from kodbank.models.token import UserToken
from kodbank.models.user import Role, User

__all__ = [
    "Base",
    "LedgerEntry",
    "LedgerKind",
    "LedgerStatus",
    "Role",
    "User",
    "UserToken",
]
