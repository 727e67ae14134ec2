"""
Admin API Endpoints.

Read access to the audit trail.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from courier.app.core.dependencies import Identity
from courier.app.core.guards import require_admin
from courier.app.db.session import get_db
from courier.app.schemas.admin import AuditLogResponse, AuditTrailResponse
from courier.app.services.audit import get_audit_trail

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/audit-logs", response_model=AuditTrailResponse)
async def get_audit_logs(
    email: Optional[str] = Query(None, description="Actor or target email"),
    action: Optional[str] = Query(None, description="Filter by action type"),
    limit: int = Query(100, ge=1, le=500, description="Maximum records to return"),
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Get audit trail with optional filtering (admin-only).

    Returns recent audit logs for security monitoring and compliance.
    """
    logs = await get_audit_trail(db=db, email=email, action=action, limit=limit)

    return AuditTrailResponse(
        message=f"{len(logs)} audit entries",
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )
