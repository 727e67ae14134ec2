"""
Rider API Endpoints.

Applications are open; review and district lookups are admin-only.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from courier.app.core.dependencies import Identity, get_parcel_lifecycle, get_rider_lifecycle
from courier.app.core.guards import require_admin, require_rider
from courier.app.db.session import get_db
from courier.app.domain.parcels.parcel_lifecycle import ParcelLifecycle
from courier.app.domain.riders.rider_lifecycle import RiderLifecycle
from courier.app.schemas.parcel import ParcelListResponse, ParcelResponse
from courier.app.schemas.rider import (
    RiderApplication, RiderCreatedResponse, RiderListResponse, RiderResponse,
    RiderStatusUpdate, RiderStatusResponse,
)
from courier.app.services.audit import record_event, AuditAction

router = APIRouter(prefix="/riders", tags=["Riders"])


def _rider_list(riders, message: str) -> RiderListResponse:
    return RiderListResponse(
        message=message,
        count=len(riders),
        riders=[RiderResponse.model_validate(rider) for rider in riders],
    )


@router.post("", response_model=RiderCreatedResponse, status_code=status.HTTP_201_CREATED)
async def apply_as_rider(
    application: RiderApplication,
    riders: RiderLifecycle = Depends(get_rider_lifecycle),
    db: AsyncSession = Depends(get_db)
):
    rider = await riders.apply(application)
    await record_event(
        db, AuditAction.RIDER_APPLIED,
        actor_email=rider.email,
        metadata={"rider_id": rider.id, "district": rider.district},
    )
    return RiderCreatedResponse(
        message="Rider application submitted",
        inserted_id=rider.id,
        status=rider.status,
    )


@router.get("/pending", response_model=RiderListResponse)
async def list_pending_riders(
    admin: Identity = Depends(require_admin),
    riders: RiderLifecycle = Depends(get_rider_lifecycle)
):
    """Pending applications, newest first (admin-only)."""
    return _rider_list(await riders.list_pending(), "Pending riders")


@router.get("/active", response_model=RiderListResponse)
async def list_active_riders(
    admin: Identity = Depends(require_admin),
    riders: RiderLifecycle = Depends(get_rider_lifecycle)
):
    """Active riders, newest application first (admin-only)."""
    return _rider_list(await riders.list_active(), "Active riders")


@router.get("/by-district", response_model=RiderListResponse)
async def list_riders_by_district(
    district: Optional[str] = Query(None, description="Exact district name"),
    admin: Identity = Depends(require_admin),
    riders: RiderLifecycle = Depends(get_rider_lifecycle)
):
    found = await riders.list_by_district(district)
    return _rider_list(found, f"Active riders in {district}")


@router.get("/me/parcels", response_model=ParcelListResponse)
async def list_my_parcels(
    rider_identity: Identity = Depends(require_rider),
    riders: RiderLifecycle = Depends(get_rider_lifecycle),
    parcels: ParcelLifecycle = Depends(get_parcel_lifecycle)
):
    """Parcels assigned to the calling rider."""
    rider = await riders.find_active_by_email(rider_identity.email)
    assigned = await parcels.list_assigned(str(rider.id))
    return ParcelListResponse(
        message=f"{len(assigned)} assigned parcel(s)",
        count=len(assigned),
        parcels=[ParcelResponse.model_validate(parcel) for parcel in assigned],
    )


@router.patch("/{rider_id}", response_model=RiderStatusResponse)
async def update_rider_status(
    rider_id: int = Path(..., description="Rider ID"),
    update: RiderStatusUpdate = ...,
    admin: Identity = Depends(require_admin),
    riders: RiderLifecycle = Depends(get_rider_lifecycle),
    db: AsyncSession = Depends(get_db)
):
    """
    Approve or reject a pending application (admin-only).

    Activation promotes ``email`` to the rider role first; that promotion
    stands even if the status write then reports no change (404).
    """
    change = await riders.update_status(rider_id, update.status, update.email)
    await record_event(
        db, AuditAction.RIDER_STATUS_CHANGED,
        actor_email=admin.email,
        target_email=update.email,
        metadata={"rider_id": rider_id, "status": change.status.value, "role_promoted": change.role_promoted},
    )
    return RiderStatusResponse(
        message=f"Rider status updated to {change.status.value}",
        rider_id=change.rider_id,
        status=change.status,
        role_promoted=change.role_promoted,
    )
