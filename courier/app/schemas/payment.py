"""
Payment Pydantic schemas.
"""

from pydantic import AliasChoices, BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, List
from courier.app.models.parcel_enums import PaymentStatus
from courier.app.schemas.common import ActionResponse


class PaymentIntentRequest(BaseModel):
    """Amount to authorise, in integer minor currency units."""
    amount_in_cents: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("amountInCents", "amountInCent", "amount_in_cents"),
    )


class PaymentIntentResponse(ActionResponse):
    client_secret: str = Field(..., alias="clientSecret")

    class Config:
        populate_by_name = True


class PaymentConfirm(BaseModel):
    """Schema for recording a confirmed charge."""
    email: EmailStr
    transaction_id: str = Field(..., alias="transactionId", min_length=1, max_length=255)
    amount: float = Field(..., gt=0)
    parcel_id: Optional[int] = Field(None, alias="parcelId")
    payment_method: Optional[str] = Field(None, alias="paymentMethod", max_length=100)

    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class PaymentRecordedResponse(ActionResponse):
    """
    Response after a payment is recorded.

    ``parcelModifiedCount`` is 0 when the parcel was missing or already paid;
    the payment itself is still stored.
    """
    payment_id: int = Field(..., alias="paymentId")
    parcel_modified_count: int = Field(..., alias="parcelModifiedCount")

    class Config:
        populate_by_name = True


class PaymentResponse(BaseModel):
    id: int
    email: str
    parcel_id: Optional[int] = Field(None, alias="parcelId")
    amount: float
    transaction_id: str = Field(..., alias="transactionId")
    payment_method: Optional[str] = Field(None, alias="paymentMethod")
    payment_status: PaymentStatus
    date: datetime

    class Config:
        from_attributes = True
        populate_by_name = True


class PaymentHistoryResponse(ActionResponse):
    count: int
    payments: List[PaymentResponse]
