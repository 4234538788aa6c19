"""Payment settlement: the only writer of membership state.

A payment confirmation is recorded and, when it succeeded, the payer's
membership is upgraded in the same transaction. `payment_intent_id` is the
idempotency key: resubmitting a confirmation never credits twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from qcktlk_forum.core.errors import InvalidArgumentError
from qcktlk_forum.core.settings import settings
from qcktlk_forum.db.time import utcnow
from qcktlk_forum.models import Payment, User
from qcktlk_forum.models.payment import PAYMENT_STATUS_SUCCEEDED
from qcktlk_forum.models.user import (
    BADGE_BRONZE,
    BADGE_GOLD,
    MEMBERSHIP_FREE,
    MEMBERSHIP_PREMIUM,
)
from qcktlk_forum.services.transactions import run_in_transaction
from qcktlk_forum.services.users import new_profile

logger = logging.getLogger(__name__)

__all__ = ["PaymentConfirmation", "SettlementResult", "settle_payment"]

MEMBERSHIP_TIERS = (MEMBERSHIP_FREE, MEMBERSHIP_PREMIUM)


@dataclass(frozen=True)
class PaymentConfirmation:
    """Payment outcome reported by the client after checkout."""

    email: str
    amount: int
    status: str
    payment_intent_id: str
    membership_type: str = MEMBERSHIP_PREMIUM
    currency: str | None = None
    date: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == PAYMENT_STATUS_SUCCEEDED


@dataclass(frozen=True)
class SettlementResult:
    """Recorded payment and whether this call changed membership."""

    payment: Payment
    membership_updated: bool
    duplicate: bool = False


def _validate(confirmation: PaymentConfirmation) -> None:
    if not confirmation.email or not confirmation.email.strip():
        raise InvalidArgumentError("Payment email is required")
    if not confirmation.payment_intent_id or not confirmation.payment_intent_id.strip():
        raise InvalidArgumentError("Payment intent id is required", email=confirmation.email)
    if not confirmation.status:
        raise InvalidArgumentError(
            "Payment status is required",
            payment_intent_id=confirmation.payment_intent_id,
        )
    if confirmation.amount <= 0:
        raise InvalidArgumentError(
            "Payment amount must be positive",
            payment_intent_id=confirmation.payment_intent_id,
        )
    if confirmation.membership_type not in MEMBERSHIP_TIERS:
        raise InvalidArgumentError(
            "Invalid membership type",
            membership_type=confirmation.membership_type,
        )


def _find_payment(db: Session, payment_intent_id: str) -> Payment | None:
    return db.execute(
        select(Payment).where(Payment.payment_intent_id == payment_intent_id)
    ).scalar_one_or_none()


def _upsert_membership(db: Session, email: str, tier: str) -> User:
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        user = new_profile(email)
        db.add(user)
    user.membership = tier
    user.membership_upgraded_at = utcnow()
    user.badge = BADGE_GOLD if tier == MEMBERSHIP_PREMIUM else BADGE_BRONZE
    return user


def settle_payment(db: Session, confirmation: PaymentConfirmation) -> SettlementResult:
    """Record a payment and credit membership on success, exactly once.

    The duplicate check runs inside the transaction. If a concurrent request
    inserts the same intent first, the unique constraint fails this commit and
    the retry resolves to that request's payment.

    Raises:
        InvalidArgumentError: If the confirmation is missing required fields.
        StoreConflictError: If the transaction kept failing after retries.
    """
    _validate(confirmation)

    def _record(session: Session) -> tuple[Payment, bool]:
        existing = _find_payment(session, confirmation.payment_intent_id)
        if existing is not None:
            return existing, True

        payment = Payment(
            email=confirmation.email,
            amount=confirmation.amount,
            currency=confirmation.currency or settings.payment_currency,
            status=confirmation.status,
            payment_intent_id=confirmation.payment_intent_id,
            membership_type=confirmation.membership_type,
            date=confirmation.date or utcnow(),
        )
        session.add(payment)
        if confirmation.succeeded:
            _upsert_membership(session, confirmation.email, confirmation.membership_type)
        session.flush()
        return payment, False

    payment, duplicate = run_in_transaction(
        db,
        _record,
        attempts=settings.settlement_max_retries,
        description=f"settlement of {confirmation.payment_intent_id}",
    )

    if duplicate:
        logger.info(
            "Ignoring duplicate payment %s for %s",
            confirmation.payment_intent_id,
            confirmation.email,
            extra={"payment_intent_id": confirmation.payment_intent_id},
        )
        return SettlementResult(payment=payment, membership_updated=False, duplicate=True)

    logger.info(
        "Recorded payment %s for %s (status=%s, membership_updated=%s)",
        confirmation.payment_intent_id,
        confirmation.email,
        confirmation.status,
        confirmation.succeeded,
        extra={"payment_intent_id": confirmation.payment_intent_id},
    )
    return SettlementResult(payment=payment, membership_updated=confirmation.succeeded)
