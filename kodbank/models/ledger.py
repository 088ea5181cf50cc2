"""ORM model for the append-only transaction ledger."""

import enum
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String

from kodbank.models.base import Base
from kodbank.models.user import _enum_values


class LedgerKind(str, enum.Enum):
    CREDIT = "Credit"
    DEBIT = "Debit"


class LedgerStatus(str, enum.Enum):
    COMPLETED = "Completed"
    PENDING = "Pending"
    FLAGGED = "Flagged"


class LedgerEntry(Base):
    """
    Immutable ledger record. The sign of amount is implied by kind.

    created_at is set application-side with microsecond resolution so
    entries written in the same second still order deterministically.
    """

    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind = Column(
        Enum(LedgerKind, name="ledger_kind", values_callable=_enum_values),
        nullable=False,
    )
    amount = Column(Numeric(15, 2), nullable=False)
    description = Column(String(255), nullable=False, default="")
    status = Column(
        Enum(LedgerStatus, name="ledger_status", values_callable=_enum_values),
        nullable=False,
        default=LedgerStatus.COMPLETED,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )
