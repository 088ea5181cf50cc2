"""ORM model for the issued-token audit trail."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text

from kodbank.models.base import Base


class UserToken(Base):
    """
    One row per successful login.

    Audit only: session validation never reads this table.
    """

    __tablename__ = "user_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(Text, nullable=False)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    issued_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
