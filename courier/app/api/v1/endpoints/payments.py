"""
Payment API Endpoints.

Charge intents and confirmations are called by the checkout page;
history is visible to its owner only.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from courier.app.core.dependencies import Identity, get_current_identity, get_payment_ledger
from courier.app.core.exceptions import ValidationError
from courier.app.core.guards import enforce_self
from courier.app.db.session import get_db
from courier.app.domain.billing.payment_ledger import PaymentLedger
from courier.app.schemas.payment import (
    PaymentIntentRequest, PaymentIntentResponse, PaymentConfirm,
    PaymentRecordedResponse, PaymentHistoryResponse, PaymentResponse,
)
from courier.app.services.audit import record_event, AuditAction

router = APIRouter(tags=["Payments"])


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    request: PaymentIntentRequest,
    ledger: PaymentLedger = Depends(get_payment_ledger)
):
    """Create a provider charge intent and return its client secret."""
    intent = await ledger.create_intent(request.amount_in_cents)
    return PaymentIntentResponse(message="Payment intent created", client_secret=intent.client_secret)


@router.post("/payments", response_model=PaymentRecordedResponse, status_code=status.HTTP_201_CREATED)
async def confirm_payment(
    confirmation: PaymentConfirm,
    ledger: PaymentLedger = Depends(get_payment_ledger),
    db: AsyncSession = Depends(get_db)
):
    """
    Record a confirmed charge and mark the parcel paid.

    Check ``parcelModifiedCount``: 0 means the payment was stored but the
    parcel was missing or already paid.
    """
    record = await ledger.confirm(confirmation)
    await record_event(
        db, AuditAction.PAYMENT_RECORDED,
        actor_email=confirmation.email,
        metadata={
            "payment_id": record.payment_id,
            "parcel_id": confirmation.parcel_id,
            "parcel_modified_count": record.parcel_modified_count,
        },
    )
    if record.parcel_modified_count:
        message = "Payment saved and parcel updated successfully"
    else:
        message = "Payment saved but no parcel was updated"
    return PaymentRecordedResponse(
        message=message,
        payment_id=record.payment_id,
        parcel_modified_count=record.parcel_modified_count,
    )


@router.get("/payments", response_model=PaymentHistoryResponse)
async def payment_history(
    email: Optional[str] = Query(None, description="Must match the caller's email"),
    identity: Identity = Depends(get_current_identity),
    ledger: PaymentLedger = Depends(get_payment_ledger)
):
    """Payment history of the caller, newest first."""
    if not email:
        raise ValidationError("Email is required in query")
    enforce_self(identity, email)
    payments = await ledger.history(email)
    return PaymentHistoryResponse(
        message=f"{len(payments)} payment(s) found",
        count=len(payments),
        payments=[PaymentResponse.model_validate(payment) for payment in payments],
    )
