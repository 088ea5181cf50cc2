"""Account registration: user row plus opening ledger entries in one transaction."""

from decimal import Decimal

from sqlalchemy.orm import Session

from kodbank.core.config import settings
from kodbank.core.database import unit_of_work
from kodbank.core.security import hash_password
from kodbank.models import Role, User
from kodbank.services.audit import log_security_event
from kodbank.services.credentials import CredentialStore
from kodbank.services.ledger import LedgerRecorder


def register_account(
    db: Session,
    username: str,
    email: str,
    password: str,
    phone: str | None,
    role: Role = Role.CUSTOMER,
    opening_balance: Decimal | None = None,
) -> User:
    """
    Create a user and seed the ledger, committing both or neither.

    Raises DuplicateIdentity if the username or email is taken; nothing is
    written in that case.
    """
    balance = settings.OPENING_BALANCE if opening_balance is None else opening_balance
    password_hash = hash_password(password)

    with unit_of_work(db):
        user = CredentialStore(db).create_user(
            username=username,
            email=email,
            password_hash=password_hash,
            phone=phone,
            balance=balance,
            role=role,
        )
        LedgerRecorder(db).seed_opening_entries(user.id, balance)

    log_security_event("USER_REGISTRATION", user.id, f"Username: {username}")
    return user
