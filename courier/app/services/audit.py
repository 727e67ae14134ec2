"""
Audit logging service for tracking privileged state transitions.

Provides centralized logging for compliance and security monitoring.
"""

import logging
from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc, or_
from courier.app.core.config import settings
from courier.app.core.exceptions import DependencyUnavailableError
from courier.app.core.reliability import run_bounded
from courier.app.models.audit_log import AuditLog

logger = logging.getLogger("courier.audit")


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    USER_REGISTERED = "USER_REGISTERED"
    ROLE_CHANGED = "ROLE_CHANGED"

    PARCEL_CREATED = "PARCEL_CREATED"
    PARCEL_DELETED = "PARCEL_DELETED"
    RIDER_ASSIGNED = "RIDER_ASSIGNED"
    PARCEL_DELIVERED = "PARCEL_DELIVERED"

    PAYMENT_RECORDED = "PAYMENT_RECORDED"

    RIDER_APPLIED = "RIDER_APPLIED"
    RIDER_STATUS_CHANGED = "RIDER_STATUS_CHANGED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_email: Optional[str] = None,
    target_email: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """
    Log a privileged event to the audit log.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_email: Email of the caller, None for anonymous endpoints
        target_email: Email of the user whose record or role changed
        metadata: Additional context as JSON

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_email=actor_email,
        action=action,
        target_email=target_email,
        meta_data=metadata,
    )

    db.add(audit_log)
    await run_bounded(db.commit(), settings.storage_timeout_seconds)
    logger.info("audit %s actor=%s target=%s", action, actor_email, target_email)

    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    email: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering.

    Args:
        db: Database session
        email: Entries where this email was actor or target
        action: Filter by action type
        limit: Maximum number of records to return

    Returns:
        List of AuditLog instances, most recent first
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if email:
        query = query.where(or_(AuditLog.actor_email == email, AuditLog.target_email == email))

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await run_bounded(db.execute(query), settings.storage_timeout_seconds)
    return list(result.scalars().all())


async def record_event(db: AsyncSession, action: str, **kwargs) -> Optional[AuditLog]:
    """
    Best-effort audit write used after a transition has already committed.

    A storage failure here is logged and does not turn the committed
    transition into an error response.
    """
    try:
        return await log_event(db, action, **kwargs)
    except DependencyUnavailableError:
        logger.error("Audit write for %s failed", action, exc_info=True)
        return None
