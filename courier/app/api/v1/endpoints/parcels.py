"""
Parcel API Endpoints.

Creation and deletion are open; reads need a verified identity; rider
assignment is admin-only and delivery is confirmed by the assigned rider.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from courier.app.core.dependencies import Identity, get_parcel_lifecycle, get_rider_lifecycle
from courier.app.core.guards import require_admin, require_authenticated, require_rider
from courier.app.db.session import get_db
from courier.app.domain.parcels.parcel_lifecycle import ParcelLifecycle
from courier.app.domain.riders.rider_lifecycle import RiderLifecycle
from courier.app.models.parcel_enums import PaymentStatus, DeliveryStatus
from courier.app.schemas.common import ActionResponse
from courier.app.schemas.parcel import (
    ParcelCreate, ParcelCreatedResponse, ParcelResponse, ParcelDetailResponse,
    ParcelListResponse, AssignRiderRequest, AssignRiderResponse, AssignmentFields,
    DeliveryResponse,
)
from courier.app.services.audit import record_event, AuditAction

router = APIRouter(prefix="/parcels", tags=["Parcels"])


@router.post("", response_model=ParcelCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_parcel(
    parcel_data: ParcelCreate,
    parcels: ParcelLifecycle = Depends(get_parcel_lifecycle),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a parcel.

    name, type, senderRegion and receiverRegion are required. The parcel
    starts unpaid and not collected.
    """
    parcel = await parcels.create(parcel_data)
    await record_event(
        db, AuditAction.PARCEL_CREATED,
        actor_email=parcel.user_email,
        metadata={"parcel_id": parcel.id, "name": parcel.name},
    )
    return ParcelCreatedResponse(message="Parcel added successfully!", inserted_id=parcel.id)


@router.get("", response_model=ParcelListResponse)
async def list_parcels(
    email: Optional[str] = Query(None, description="Owner email"),
    payment_status: Optional[PaymentStatus] = Query(None),
    delivery_status: Optional[DeliveryStatus] = Query(None),
    identity: Identity = Depends(require_authenticated),
    parcels: ParcelLifecycle = Depends(get_parcel_lifecycle)
):
    """List parcels, newest first. All filters are optional and combined with AND."""
    found = await parcels.list_parcels(
        email=email,
        payment_status=payment_status,
        delivery_status=delivery_status,
    )
    return ParcelListResponse(
        message=f"{len(found)} parcel(s) found",
        count=len(found),
        parcels=[ParcelResponse.model_validate(parcel) for parcel in found],
    )


@router.get("/{parcel_id}", response_model=ParcelDetailResponse)
async def get_parcel(
    parcel_id: int = Path(..., description="Parcel ID"),
    identity: Identity = Depends(require_authenticated),
    parcels: ParcelLifecycle = Depends(get_parcel_lifecycle)
):
    parcel = await parcels.get(parcel_id)
    return ParcelDetailResponse(message="Parcel found", parcel=ParcelResponse.model_validate(parcel))


@router.delete("/{parcel_id}", response_model=ActionResponse)
async def delete_parcel(
    parcel_id: int = Path(..., description="Parcel ID"),
    parcels: ParcelLifecycle = Depends(get_parcel_lifecycle),
    db: AsyncSession = Depends(get_db)
):
    await parcels.delete(parcel_id)
    await record_event(db, AuditAction.PARCEL_DELETED, metadata={"parcel_id": parcel_id})
    return ActionResponse(message="Parcel deleted successfully")


@router.patch("/assign/{parcel_id}", response_model=AssignRiderResponse)
async def assign_rider(
    parcel_id: int = Path(..., description="Parcel ID"),
    assignment: AssignRiderRequest = ...,
    admin: Identity = Depends(require_admin),
    parcels: ParcelLifecycle = Depends(get_parcel_lifecycle),
    db: AsyncSession = Depends(get_db)
):
    """
    Assign a rider to an unassigned parcel (admin-only).

    Moves the parcel to in_transit. A second assignment returns 404.
    """
    result = await parcels.assign_rider(parcel_id, assignment)
    await record_event(
        db, AuditAction.RIDER_ASSIGNED,
        actor_email=admin.email,
        metadata={"parcel_id": parcel_id, "rider_id": result.rider_id},
    )
    return AssignRiderResponse(
        message="Rider assigned successfully",
        updated_parcel=AssignmentFields(
            delivery_status=DeliveryStatus.IN_TRANSIT,
            assigned_at=result.assigned_at,
            assign_rider_id=result.rider_id,
            assign_rider_name=result.rider_name,
            rider_contact=result.rider_contact,
        ),
    )


@router.patch("/deliver/{parcel_id}", response_model=DeliveryResponse)
async def mark_delivered(
    parcel_id: int = Path(..., description="Parcel ID"),
    rider_identity: Identity = Depends(require_rider),
    parcels: ParcelLifecycle = Depends(get_parcel_lifecycle),
    riders: RiderLifecycle = Depends(get_rider_lifecycle),
    db: AsyncSession = Depends(get_db)
):
    """Confirm delivery of an in-transit parcel (assigned rider only)."""
    rider = await riders.find_active_by_email(rider_identity.email)
    delivered_at = await parcels.mark_delivered(parcel_id, str(rider.id))
    await record_event(
        db, AuditAction.PARCEL_DELIVERED,
        actor_email=rider_identity.email,
        metadata={"parcel_id": parcel_id, "rider_id": rider.id},
    )
    return DeliveryResponse(
        message="Parcel marked as delivered",
        parcel_id=parcel_id,
        delivery_status=DeliveryStatus.DELIVERED,
        delivered_at=delivered_at,
    )
