"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from courier.app.api.v1.endpoints import users, parcels, riders, payments, admin

router = APIRouter()

# Directory: registration, role lookup, admin role management
router.include_router(users.router)

# Parcel lifecycle
router.include_router(parcels.router)

# Rider lifecycle
router.include_router(riders.router)

# Payment ledger
router.include_router(payments.router)

# Audit trail
router.include_router(admin.router)
