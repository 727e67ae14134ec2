"""
Audit Log Database Model.

Tracks privileged state transitions for compliance and security monitoring.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from courier.app.db.session import Base
from courier.app.models.timestamps import utcnow


class AuditLog(Base):
    """
    Audit log model.

    Events logged:
    - USER_REGISTERED / ROLE_CHANGED
    - RIDER_APPLIED / RIDER_STATUS_CHANGED
    - PARCEL_CREATED / PARCEL_DELETED / RIDER_ASSIGNED / PARCEL_DELIVERED
    - PAYMENT_RECORDED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for anonymous endpoints)
    actor_email = Column(String(255), index=True, nullable=True)

    action = Column(String(100), nullable=False, index=True)

    # Whose record or role was affected
    target_email = Column(String(255), index=True, nullable=True)

    meta_data = Column(JSON, nullable=True)

    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_email}, target={self.target_email})>"
