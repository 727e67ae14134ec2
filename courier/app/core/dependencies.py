"""
Identity gate and component providers for FastAPI.

``get_current_identity`` turns a bearer token into an ``Identity`` (email
claim plus stored role). The remaining providers build each lifecycle
component around the request's database session.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from courier.app.core.exceptions import AuthenticationError
from courier.app.core.jwt import decode_access_token, extract_email_claim
from courier.app.core.redis_client import get_redis
from courier.app.db.session import get_db
from courier.app.domain.billing.payment_ledger import PaymentLedger
from courier.app.domain.directory.directory_service import DirectoryService
from courier.app.domain.parcels.parcel_lifecycle import ParcelLifecycle
from courier.app.domain.riders.rider_lifecycle import RiderLifecycle
from courier.app.models.enums import UserRole
from courier.app.services.payment_gateway import StripePaymentGateway, get_payment_gateway
from courier.app.services.role_cache import RoleCache

logger = logging.getLogger("courier.identity")

# Missing credentials are reported by get_current_identity as 401
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """A verified caller. ``role`` is None when the email is not registered."""
    email: str
    role: Optional[UserRole]
    claims: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


async def get_role_cache(redis=Depends(get_redis)) -> RoleCache:
    return RoleCache(redis)


def get_directory(
    db: AsyncSession = Depends(get_db),
    role_cache: RoleCache = Depends(get_role_cache),
) -> DirectoryService:
    return DirectoryService(db, role_cache)


def get_parcel_lifecycle(db: AsyncSession = Depends(get_db)) -> ParcelLifecycle:
    return ParcelLifecycle(db)


def get_rider_lifecycle(
    db: AsyncSession = Depends(get_db),
    role_cache: RoleCache = Depends(get_role_cache),
) -> RiderLifecycle:
    return RiderLifecycle(db, role_cache)


def get_payment_ledger(
    db: AsyncSession = Depends(get_db),
    gateway: StripePaymentGateway = Depends(get_payment_gateway),
    parcels: ParcelLifecycle = Depends(get_parcel_lifecycle),
) -> PaymentLedger:
    return PaymentLedger(db, gateway, parcels)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    directory: DirectoryService = Depends(get_directory),
) -> Identity:
    """
    FastAPI dependency for the identity gate.

    1. Requires a bearer token (checked before any storage access)
    2. Verifies signature, expiry and audience/issuer if configured
    3. Reads the email claim
    4. Resolves the stored role (cache, then users table)

    Raises:
        AuthenticationError: 401 for any missing or unusable credential
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Unauthorized access")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")

    email = extract_email_claim(payload)
    if email is None:
        raise AuthenticationError("Token carries no email claim")

    role = await directory.lookup_role(email)
    logger.debug("Resolved %s as %s", email, role.value if role else "unregistered")
    return Identity(email=email, role=role, claims=payload)
