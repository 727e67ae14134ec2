"""
Payment Ledger (Domain Logic).

Bridges the payment provider and the parcel lifecycle: charge intents are
created at the provider with no local state; confirmations are recorded
through ``ParcelLifecycle.record_payment``.
"""

import logging
from typing import List

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from courier.app.domain.base import StorageComponent
from courier.app.domain.parcels.parcel_lifecycle import ParcelLifecycle, PaymentRecord
from courier.app.models.payment import Payment
from courier.app.schemas.payment import PaymentConfirm
from courier.app.services.payment_gateway import ChargeIntent, StripePaymentGateway

logger = logging.getLogger("courier.payments")


class PaymentLedger(StorageComponent):

    def __init__(self, db: AsyncSession, gateway: StripePaymentGateway, parcels: ParcelLifecycle):
        super().__init__(db)
        self.gateway = gateway
        self.parcels = parcels

    async def create_intent(self, amount_in_cents: int) -> ChargeIntent:
        return await self.gateway.create_intent(amount_in_cents)

    async def confirm(self, confirmation: PaymentConfirm) -> PaymentRecord:
        record = await self.parcels.record_payment(confirmation)
        logger.info(
            "Payment %s confirmed for %s (parcel modified: %s)",
            record.payment_id, confirmation.email, record.parcel_modified_count,
        )
        return record

    async def history(self, email: str) -> List[Payment]:
        """All payments made by ``email``, newest first."""
        result = await self._execute(
            select(Payment)
            .where(Payment.email == email)
            .order_by(desc(Payment.date), desc(Payment.id))
        )
        return list(result.scalars().all())
