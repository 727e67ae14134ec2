"""
Rider Lifecycle (Domain Logic).

    pending → active     promotes the applicant's user role to rider
    pending → rejected

Both outcomes are terminal. The role promotion is committed before the
status write and is kept even when that write turns out to be a no-op.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select, update, desc
from sqlalchemy.ext.asyncio import AsyncSession

from courier.app.core.exceptions import ResourceNotFoundError, ValidationError
from courier.app.domain.base import StorageComponent
from courier.app.models.enums import UserRole
from courier.app.models.rider import Rider
from courier.app.models.rider_enums import RiderStatus
from courier.app.models.timestamps import utcnow
from courier.app.models.user import User
from courier.app.schemas.rider import RiderApplication
from courier.app.services.role_cache import RoleCache

logger = logging.getLogger("courier.riders")


@dataclass(frozen=True)
class StatusChange:
    rider_id: int
    status: RiderStatus
    role_promoted: bool


def parse_status(value: str) -> RiderStatus:
    try:
        return RiderStatus(value)
    except ValueError:
        raise ValidationError(
            "Invalid status value",
            details={"allowed": [status.value for status in RiderStatus]},
        ) from None


class RiderLifecycle(StorageComponent):

    def __init__(self, db: AsyncSession, role_cache: RoleCache):
        super().__init__(db)
        self.role_cache = role_cache

    async def apply(self, application: RiderApplication) -> Rider:
        rider = Rider(
            **application.model_dump(),
            status=RiderStatus.PENDING,
            submitted_at=utcnow(),
        )
        await self._insert(rider)
        logger.info("Rider application %s submitted by %s", rider.id, rider.email)
        return rider

    async def _list(self, *conditions) -> List[Rider]:
        result = await self._execute(
            select(Rider)
            .where(*conditions)
            .order_by(desc(Rider.submitted_at), desc(Rider.id))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_pending(self) -> List[Rider]:
        return await self._list(Rider.status == RiderStatus.PENDING)

    async def list_active(self) -> List[Rider]:
        return await self._list(Rider.status == RiderStatus.ACTIVE)

    async def list_by_district(self, district: Optional[str]) -> List[Rider]:
        """Active riders in exactly ``district``."""
        if not district or not district.strip():
            raise ValidationError("District is required")
        return await self._list(
            Rider.status == RiderStatus.ACTIVE,
            Rider.district == district.strip(),
        )

    async def find_active_by_email(self, email: str) -> Rider:
        riders = await self._list(Rider.status == RiderStatus.ACTIVE, Rider.email == email)
        if not riders:
            raise ResourceNotFoundError("Rider", message="No active rider profile for this account")
        return riders[0]

    async def update_status(self, rider_id: int, new_status: str, email: Optional[str]) -> StatusChange:
        """
        Apply an admin decision to a pending application.

        Raises:
            ValidationError: unknown status, or activation without an email
            ResourceNotFoundError: rider absent, not pending, or already in ``new_status``
        """
        status = parse_status(new_status)

        promoted = False
        if status == RiderStatus.ACTIVE:
            if not email:
                raise ValidationError("Email is required to activate a rider")
            promoted = await self._promote_user(email)

        modified = await self._apply(
            update(Rider)
            .where(
                Rider.id == rider_id,
                Rider.status == RiderStatus.PENDING,
                Rider.status != status,
            )
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        if modified == 0:
            if promoted:
                logger.warning(
                    "Rider %s status unchanged but %s was already promoted to rider",
                    rider_id, email,
                )
            raise ResourceNotFoundError("Rider", rider_id, message="Rider not found or status unchanged")

        logger.info("Rider %s status updated to %s", rider_id, status.value)
        return StatusChange(rider_id=rider_id, status=status, role_promoted=promoted)

    async def _promote_user(self, email: str) -> bool:
        modified = await self._apply(
            update(User)
            .where(User.email == email)
            .values(role=UserRole.RIDER)
            .execution_options(synchronize_session=False)
        )
        if modified:
            await self.role_cache.set(email, UserRole.RIDER)
            logger.info("User %s promoted to rider", email)
        else:
            await self.role_cache.invalidate(email)
            logger.warning("Rider activation for %s matched no registered user", email)
        return bool(modified)
