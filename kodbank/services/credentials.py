"""Credential store: user records keyed by username and email."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kodbank.core.errors import DuplicateIdentity, UserNotFound
from kodbank.models import Role, User
from kodbank.services.ledger import LedgerRecorder

logger = logging.getLogger(__name__)

# Shown for any registration conflict so the response does not confirm which field exists.
DUPLICATE_IDENTITY_MESSAGE = (
    "Registration failed. Username/Email might exist or DB is unconfigured."
)


@dataclass(frozen=True)
class UserProfile:
    user: User
    transaction_count: int


class CredentialStore:
    """
    Reads and writes users through an injected Session.

    Writes are flushed, not committed; the caller owns the unit of work.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def create_user(
        self,
        username: str,
        email: str,
        password_hash: str,
        phone: str | None,
        balance: Decimal,
        role: Role = Role.CUSTOMER,
    ) -> User:
        """Insert a user; raises DuplicateIdentity if username or email is taken."""
        existing = (
            self.db.query(User.id)
            .filter(or_(User.username == username, User.email == email))
            .first()
        )
        if existing is not None:
            raise DuplicateIdentity(DUPLICATE_IDENTITY_MESSAGE)

        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            phone=phone,
            balance=balance,
            role=role,
        )
        self.db.add(user)
        try:
            self.db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same identity.
            logger.info("Unique constraint hit while creating user: %s", e.orig)
            raise DuplicateIdentity(DUPLICATE_IDENTITY_MESSAGE, cause=e) from e
        return user

    def find_by_username(self, username: str) -> User | None:
        return self.db.query(User).filter(User.username == username).first()

    def get_by_id(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise UserNotFound("User not found")
        return user

    def update_password(self, user_id: int, new_hash: str) -> None:
        user = self.get_by_id(user_id)
        user.password_hash = new_hash
        self.db.flush()

    def get_profile(self, username: str) -> UserProfile:
        """Return the user with a derived ledger entry count; raises UserNotFound."""
        user = self.find_by_username(username)
        if user is None:
            raise UserNotFound("User not found")
        count = LedgerRecorder(self.db).count_for_user(user.id)
        return UserProfile(user=user, transaction_count=count)

    def list_users(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()
