"""Payment endpoints: intent creation and settlement of confirmations."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import desc

from qcktlk_forum.api.v1.dependencies import (
    CurrentIdentityDep,
    SessionDep,
    ensure_matches_identity,
)
from qcktlk_forum.models import Payment
from qcktlk_forum.schemas.payment import (
    PaymentIntentCreate,
    PaymentIntentResponse,
    PaymentRecordCreate,
    PaymentRecordResponse,
    PaymentResponse,
)
from qcktlk_forum.services.payments import (
    PaymentProcessorClient,
    PaymentProcessorDisabledError,
    PaymentProcessorError,
    get_payment_client,
)
from qcktlk_forum.services.settlement import PaymentConfirmation, settle_payment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


def get_payment_client_dep() -> PaymentProcessorClient:
    """Get the payment processor client for dependency injection."""
    return get_payment_client()


PaymentClientDep = Annotated[PaymentProcessorClient, Depends(get_payment_client_dep)]


@router.post("/intents", response_model=PaymentIntentResponse)
async def create_payment_intent(
    intent_data: PaymentIntentCreate,
    identity: CurrentIdentityDep,
    client: PaymentClientDep,
) -> PaymentIntentResponse:
    """Create a payment intent with the processor for a premium upgrade.

    Raises:
        HTTPException: 503 when payments are not configured, 502 when the
            processor rejects the request or cannot be reached.
    """
    try:
        handle = await client.create_payment_intent(
            intent_data.amount,
            metadata={"email": identity.email},
        )
    except PaymentProcessorDisabledError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payments are not enabled",
        ) from exc
    except PaymentProcessorError as exc:
        logger.warning("Payment intent for %s failed: %s", identity.email, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc

    return PaymentIntentResponse(
        client_secret=handle.client_secret,
        payment_intent_id=handle.id,
    )


@router.post("/", response_model=PaymentRecordResponse)
async def record_payment(
    payment_data: PaymentRecordCreate,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> PaymentRecordResponse:
    """Record a payment confirmation and upgrade membership on success.

    Resubmitting the same `paymentIntentId` is acknowledged without crediting
    membership a second time.
    """
    ensure_matches_identity(payment_data.email, identity, "email")

    result = settle_payment(
        db,
        PaymentConfirmation(
            email=identity.email,
            amount=payment_data.amount,
            status=payment_data.status,
            payment_intent_id=payment_data.payment_intent_id.strip(),
            membership_type=payment_data.membership_type,
            date=payment_data.date,
        ),
    )

    return PaymentRecordResponse(
        message="Payment already recorded" if result.duplicate else "Payment recorded successfully",
        membership_updated=result.membership_updated,
        duplicate=result.duplicate,
    )


@router.get("/", response_model=list[PaymentResponse])
async def list_payments(identity: CurrentIdentityDep, db: SessionDep) -> list[Payment]:
    """List the caller's payments, newest first."""
    return (
        db.query(Payment)
        .filter(Payment.email == identity.email)
        .order_by(desc(Payment.date), desc(Payment.id))
        .all()
    )


@router.get("/history", response_model=list[PaymentResponse])
async def payment_history(identity: CurrentIdentityDep, db: SessionDep) -> list[Payment]:
    """Alias of the payment listing kept for older clients."""
    return await list_payments(identity, db)
