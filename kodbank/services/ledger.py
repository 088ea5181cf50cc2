"""Append-only transaction ledger, including the balance-view audit entry."""

import logging
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from kodbank.core.errors import UserNotFound
from kodbank.models import LedgerEntry, LedgerKind, LedgerStatus, User

logger = logging.getLogger(__name__)

BALANCE_VIEW_DESCRIPTION = "Security Verification: Vault Value Checked"
DEFAULT_LIST_LIMIT = 10

# Opening sequence after the initial deposit (kind, amount, description).
MEMBERSHIP_FEE = (LedgerKind.DEBIT, Decimal("500.00"), "Elite Membership Fee")
WELCOME_DIVIDEND = (LedgerKind.CREDIT, Decimal("1200.50"), "Quarterly Dividend")
INITIAL_DEPOSIT_DESCRIPTION = "Initial Deposit"


class LedgerRecorder:
    """
    Inserts and reads ledger entries. There is no update or delete path.

    Writes are flushed, not committed; the caller owns the unit of work.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def append(
        self,
        user_id: int,
        kind: LedgerKind,
        amount: Decimal,
        description: str,
        status: LedgerStatus = LedgerStatus.COMPLETED,
    ) -> LedgerEntry:
        """Insert one entry. amount is a magnitude; kind carries the sign."""
        amount = Decimal(amount)
        if amount < 0:
            raise ValueError("Ledger amount must not be negative; use kind for direction")
        entry = LedgerEntry(
            user_id=user_id,
            kind=kind,
            amount=amount,
            description=description,
            status=status,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def seed_opening_entries(
        self, user_id: int, opening_balance: Decimal
    ) -> list[LedgerEntry]:
        """Write the opening credit, membership debit and dividend credit, in that order."""
        sequence = [
            (LedgerKind.CREDIT, opening_balance, INITIAL_DEPOSIT_DESCRIPTION),
            MEMBERSHIP_FEE,
            WELCOME_DIVIDEND,
        ]
        return [
            self.append(user_id, kind, amount, description)
            for kind, amount, description in sequence
        ]

    def list_recent(
        self, user_id: int | None, limit: int = DEFAULT_LIST_LIMIT
    ) -> list[LedgerEntry]:
        """Newest first, at most limit entries. No backing user yields an empty list."""
        if user_id is None:
            return []
        return (
            self.db.query(LedgerEntry)
            .filter(LedgerEntry.user_id == user_id)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .limit(limit)
            .all()
        )

    def count_for_user(self, user_id: int) -> int:
        count = (
            self.db.query(func.count(LedgerEntry.id))
            .filter(LedgerEntry.user_id == user_id)
            .scalar()
        )
        return count or 0

    def record_balance_view(self, user_id: int) -> Decimal:
        """
        Read the balance and append a zero-amount Credit verification entry.

        Every disclosure of the balance leaves exactly one ledger row.
        Raises UserNotFound when the user does not exist.
        """
        balance = self.db.query(User.balance).filter(User.id == user_id).scalar()
        if balance is None:
            raise UserNotFound("User not found")
        self.append(
            user_id,
            LedgerKind.CREDIT,
            Decimal("0.00"),
            BALANCE_VIEW_DESCRIPTION,
        )
        logger.debug("Balance view recorded for user_id=%s", user_id)
        return balance
