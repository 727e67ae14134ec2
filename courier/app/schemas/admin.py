"""
Admin API Schema Definitions.

Pydantic schemas for the audit trail endpoint.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List
from courier.app.schemas.common import ActionResponse


class AuditLogResponse(BaseModel):
    """Schema for audit log entry."""
    id: int
    actor_email: Optional[str]
    action: str
    target_email: Optional[str]
    meta_data: Optional[dict]
    timestamp: datetime

    class Config:
        from_attributes = True


class AuditTrailResponse(ActionResponse):
    """Schema for audit trail list."""
    logs: List[AuditLogResponse]
    total: int
