import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.sql import func

from peterparts.db.base import Base


class VerificationCode(Base):
    """
    One-time login code emailed to a user.

    A code is usable only while ``used_at`` is null and ``expires_at`` is
    in the future.
    """

    __tablename__ = "verification_codes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    code = Column(String(6), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_verification_codes_user_code", "user_id", "code"),
        Index("ix_verification_codes_expires_at", "expires_at"),
    )

    def mark_used(self) -> None:
        """Consume the code."""
        self.used_at = datetime.now(timezone.utc)
