"""Payment confirmations reported back by clients."""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from qcktlk_forum.db.session import Base
from qcktlk_forum.db.time import utcnow

PAYMENT_STATUS_SUCCEEDED = "succeeded"


class Payment(Base):
    """Recorded payment; `payment_intent_id` is the settlement idempotency key."""

    __tablename__ = "payment"
    __table_args__ = (Index("ix_payment_email_date", "email", "date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    # Minor currency units, as reported by the processor.
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="usd")
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    payment_intent_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    membership_type: Mapped[str] = mapped_column(String(16), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
