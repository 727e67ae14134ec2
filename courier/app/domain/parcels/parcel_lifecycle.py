"""
Parcel Lifecycle (Domain Logic).

Owns the two one-way axes of a parcel:

    payment:  unpaid → paid                       (driven only by a recorded payment)
    delivery: not_collected → in_transit → delivered

Every transition is a single conditional UPDATE: the WHERE clause carries
the parcel id and the state the transition expects, so of two concurrent
attempts the second matches zero rows and is reported as not found.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update, delete, desc
from sqlalchemy.exc import IntegrityError

from courier.app.core.exceptions import ConflictError, DependencyUnavailableError, ResourceNotFoundError
from courier.app.domain.base import StorageComponent
from courier.app.models.parcel import Parcel
from courier.app.models.payment import Payment
from courier.app.models.parcel_enums import PaymentStatus, DeliveryStatus
from courier.app.models.timestamps import as_aware, utcnow
from courier.app.schemas.parcel import ParcelCreate, AssignRiderRequest
from courier.app.schemas.payment import PaymentConfirm

logger = logging.getLogger("courier.parcels")


@dataclass(frozen=True)
class PaymentRecord:
    """Outcome of RecordPayment. A zero count means the parcel was not flipped to paid."""
    payment_id: int
    parcel_modified_count: int


@dataclass(frozen=True)
class Assignment:
    parcel_id: int
    rider_id: str
    rider_name: Optional[str]
    rider_contact: Optional[str]
    assigned_at: datetime


def sort_by_creation_date(parcels: List[Parcel]) -> List[Parcel]:
    """
    Newest first by parsed creation date.

    Stored values may be naive datetimes or ISO strings depending on the
    backend; both are normalised to aware UTC before comparing.
    """
    return sorted(parcels, key=lambda parcel: as_aware(parcel.creation_date), reverse=True)


class ParcelLifecycle(StorageComponent):

    async def create(self, data: ParcelCreate) -> Parcel:
        """
        Create a parcel in its initial state (unpaid, not collected).

        Required descriptive fields are enforced by ``ParcelCreate``.
        """
        fields = data.model_dump(exclude={"creation_date"})
        parcel = Parcel(
            **fields,
            payment_status=PaymentStatus.UNPAID,
            delivery_status=DeliveryStatus.NOT_COLLECTED,
            creation_date=as_aware(data.creation_date) if data.creation_date else utcnow(),
        )
        await self._insert(parcel)
        logger.info("Parcel %s created for %s", parcel.id, parcel.user_email)
        return parcel

    async def get(self, parcel_id: int) -> Parcel:
        result = await self._execute(select(Parcel).where(Parcel.id == parcel_id).execution_options(populate_existing=True))
        parcel = result.scalar_one_or_none()
        if parcel is None:
            raise ResourceNotFoundError("Parcel", parcel_id, message="Parcel not found")
        return parcel

    async def list_parcels(
        self,
        email: Optional[str] = None,
        payment_status: Optional[PaymentStatus] = None,
        delivery_status: Optional[DeliveryStatus] = None,
    ) -> List[Parcel]:
        """All filters optional and conjunctive; newest creation date first."""
        query = select(Parcel).execution_options(populate_existing=True)
        if email:
            query = query.where(Parcel.user_email == email)
        if payment_status:
            query = query.where(Parcel.payment_status == payment_status)
        if delivery_status:
            query = query.where(Parcel.delivery_status == delivery_status)
        query = query.order_by(desc(Parcel.creation_date))

        result = await self._execute(query)
        return sort_by_creation_date(list(result.scalars().all()))

    async def list_assigned(self, rider_id: str) -> List[Parcel]:
        """Parcels assigned to a rider, most recent assignment first."""
        result = await self._execute(
            select(Parcel)
            .where(Parcel.assign_rider_id == rider_id)
            .execution_options(populate_existing=True)
            .order_by(desc(Parcel.assigned_at), desc(Parcel.id))
        )
        return list(result.scalars().all())

    async def delete(self, parcel_id: int) -> None:
        deleted = await self._apply(delete(Parcel).where(Parcel.id == parcel_id))
        if deleted == 0:
            raise ResourceNotFoundError("Parcel", parcel_id, message="Parcel not found")
        logger.info("Parcel %s deleted", parcel_id)

    async def record_payment(self, confirmation: PaymentConfirm) -> PaymentRecord:
        """
        Insert the payment, then flip the parcel unpaid → paid.

        The two writes are committed separately. If the parcel is missing or
        already paid the payment stays recorded and the modified count is 0.
        """
        payment = Payment(
            email=confirmation.email,
            parcel_id=confirmation.parcel_id,
            amount=confirmation.amount,
            transaction_id=confirmation.transaction_id,
            payment_method=confirmation.payment_method,
            payment_status=PaymentStatus.PAID,
            date=utcnow(),
        )
        try:
            await self._insert(payment)
        except IntegrityError as exc:
            logger.warning(
                "Duplicate payment rejected: txn=%s parcel=%s",
                confirmation.transaction_id, confirmation.parcel_id,
            )
            raise ConflictError(
                "Payment already recorded for this transaction or parcel",
                details={"transactionId": confirmation.transaction_id, "parcelId": confirmation.parcel_id},
            ) from exc

        if confirmation.parcel_id is None:
            logger.warning("Payment %s recorded without a parcel reference", payment.id)
            return PaymentRecord(payment_id=payment.id, parcel_modified_count=0)

        try:
            modified = await self._apply(
                update(Parcel)
                .where(
                    Parcel.id == confirmation.parcel_id,
                    Parcel.payment_status == PaymentStatus.UNPAID,
                )
                .values(payment_status=PaymentStatus.PAID)
                .execution_options(synchronize_session=False)
            )
        except DependencyUnavailableError as exc:
            # The payment row is already committed; surface its id with the failure
            exc.details["paymentId"] = payment.id
            exc.message = "Payment saved but parcel update failed"
            raise

        if modified == 0:
            logger.warning(
                "Payment %s recorded but parcel %s was not updated",
                payment.id, confirmation.parcel_id,
            )
        else:
            logger.info("Parcel %s marked paid by payment %s", confirmation.parcel_id, payment.id)
        return PaymentRecord(payment_id=payment.id, parcel_modified_count=modified)

    async def assign_rider(self, parcel_id: int, request: AssignRiderRequest) -> Assignment:
        """
        Hand an unassigned parcel to a rider and move it in transit.

        Raises ResourceNotFoundError when the parcel is absent or already
        carries an assignment; the two cases are not distinguished.
        """
        assigned_at = utcnow()
        modified = await self._apply(
            update(Parcel)
            .where(Parcel.id == parcel_id, Parcel.assign_rider_id.is_(None))
            .values(
                delivery_status=DeliveryStatus.IN_TRANSIT,
                assigned_at=assigned_at,
                assign_rider_id=request.rider_id,
                assign_rider_name=request.rider_name,
                rider_contact=request.rider_contact,
            )
            .execution_options(synchronize_session=False)
        )
        if modified == 0:
            logger.warning("Assignment of parcel %s to rider %s was a no-op", parcel_id, request.rider_id)
            raise ResourceNotFoundError(
                "Parcel", parcel_id, message="Parcel not found or already assigned"
            )

        logger.info("Parcel %s assigned to rider %s", parcel_id, request.rider_id)
        return Assignment(
            parcel_id=parcel_id,
            rider_id=request.rider_id,
            rider_name=request.rider_name,
            rider_contact=request.rider_contact,
            assigned_at=assigned_at,
        )

    async def mark_delivered(self, parcel_id: int, rider_id: str) -> datetime:
        """in_transit → delivered, only for the rider the parcel is assigned to."""
        delivered_at = utcnow()
        modified = await self._apply(
            update(Parcel)
            .where(
                Parcel.id == parcel_id,
                Parcel.assign_rider_id == rider_id,
                Parcel.delivery_status == DeliveryStatus.IN_TRANSIT,
            )
            .values(delivery_status=DeliveryStatus.DELIVERED, delivered_at=delivered_at)
            .execution_options(synchronize_session=False)
        )
        if modified == 0:
            raise ResourceNotFoundError(
                "Parcel", parcel_id, message="Parcel not found, not in transit, or not assigned to you"
            )
        logger.info("Parcel %s delivered by rider %s", parcel_id, rider_id)
        return delivered_at
