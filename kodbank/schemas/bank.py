"""Schemas for balance, ledger and profile responses."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from kodbank.models.ledger import LedgerKind, LedgerStatus
from kodbank.models.user import Role

# Stored as fixed-point Decimal; rendered as a JSON number for the client.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class BalanceResponse(BaseModel):
    balance: Money


class LedgerEntryOut(BaseModel):
    """One ledger row as shown in the transaction history."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    type: LedgerKind = Field(..., validation_alias="kind")
    amount: Money
    description: str
    status: LedgerStatus
    created_at: datetime


class ProfileResponse(BaseModel):
    """Account details without the balance (balance reads go through the ledger)."""

    username: str
    email: str
    phone: str | None = None
    role: Role
    transaction_count: int = Field(..., ge=0)
