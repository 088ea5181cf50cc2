"""Balance, transaction history and profile for the signed-in user."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kodbank.api.gate import get_current_user
from kodbank.core.config import settings
from kodbank.core.database import get_db, unit_of_work
from kodbank.core.errors import UserNotFound
from kodbank.schemas.auth import CurrentUser
from kodbank.schemas.bank import BalanceResponse, LedgerEntryOut, ProfileResponse
from kodbank.services.audit import log_security_event
from kodbank.services.credentials import CredentialStore
from kodbank.services.ledger import LedgerRecorder

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> BalanceResponse:
    """
    Return the current balance.

    Each call appends a zero-amount Credit verification entry to the ledger;
    the read and the append commit together.
    """
    try:
        user = CredentialStore(db).find_by_username(current_user.username)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        with unit_of_work(db):
            balance = LedgerRecorder(db).record_balance_view(user.id)
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    except SQLAlchemyError as e:
        logger.exception("Balance check failed for username=%s", current_user.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Balance check failed",
        ) from e
    log_security_event("BALANCE_VIEWED", user.id, f"Username: {current_user.username}")
    return BalanceResponse(balance=balance)


@router.get("/transactions", response_model=list[LedgerEntryOut])
def list_transactions(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> list[LedgerEntryOut]:
    """Most recent ledger entries, newest first. Empty when the identity has no account."""
    try:
        user = CredentialStore(db).find_by_username(current_user.username)
        entries = LedgerRecorder(db).list_recent(
            user.id if user is not None else None,
            limit=limit or settings.TRANSACTIONS_LIMIT,
        )
    except SQLAlchemyError as e:
        logger.exception("Transaction listing failed for username=%s", current_user.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not load transactions",
        ) from e
    return [LedgerEntryOut.model_validate(entry) for entry in entries]


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ProfileResponse:
    """Account details and ledger size. Does not disclose the balance."""
    try:
        profile = CredentialStore(db).get_profile(current_user.username)
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    except SQLAlchemyError as e:
        logger.exception("Profile lookup failed for username=%s", current_user.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not load profile",
        ) from e
    return ProfileResponse(
        username=profile.user.username,
        email=profile.user.email,
        phone=profile.user.phone,
        role=profile.user.role,
        transaction_count=profile.transaction_count,
    )
