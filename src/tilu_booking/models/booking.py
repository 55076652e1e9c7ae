"""SQLAlchemy Booking model."""

from datetime import UTC, date, datetime
from uuid import uuid4

from sqlalchemy import BigInteger, Boolean, Date, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from tilu_booking.models.base import Base


class Booking(Base):
    """A booking owned by one user and confirmed through an emailed OTP.

    The three ``otp_*`` columns are written together, once, when the
    challenge is issued. Only the keyed hash of the OTP is kept.
    """

    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False
    )
    booking_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    otp_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    otp_salt: Mapped[str | None] = mapped_column(String(64), nullable=True)
    otp_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    __table_args__ = (Index("ix_bookings_user_created", "user_id", "created_at"),)

    def to_dict(self) -> dict:
        """Public representation; the OTP hash and salt are never exposed."""
        return {
            "id": self.id,
            "booking_date": self.booking_date.isoformat(),
            "amount": self.amount,
            "is_verified": self.is_verified,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return (
            f"<Booking id={self.id} user_id={self.user_id} "
            f"date={self.booking_date} verified={self.is_verified}>"
        )
