"""ORM model for bank customers and staff (credentials, role, balance)."""

import enum
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Enum, Integer, Numeric, String

from kodbank.models.base import Base


class Role(str, enum.Enum):
    """Closed set of account roles. Registration always assigns CUSTOMER."""

    CUSTOMER = "Customer"
    MANAGER = "Manager"
    ADMIN = "Admin"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class User(Base):
    """
    Account holder for cookie-based JWT sessions.

    password_hash is the only persisted form of the credential.
    balance is fixed-point; negative values are not prevented at this layer.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    role = Column(
        Enum(Role, name="user_role", values_callable=_enum_values),
        nullable=False,
        default=Role.CUSTOMER,
    )
    balance = Column(Numeric(15, 2), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
