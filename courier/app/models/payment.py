"""
Payment database model.

One immutable row per confirmed charge. ``parcel_id`` and
``transaction_id`` are unique so a parcel is paid at most once.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum
from courier.app.db.session import Base
from courier.app.models.enums import enum_values
from courier.app.models.parcel_enums import PaymentStatus
from courier.app.models.timestamps import utcnow


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), nullable=False, index=True)
    # Plain reference: deleting a parcel leaves its payment record intact
    parcel_id = Column(Integer, unique=True, nullable=True, index=True)
    amount = Column(Float, nullable=False)
    transaction_id = Column(String(255), unique=True, nullable=False)
    payment_method = Column(String(100), nullable=True)
    payment_status = Column(
        Enum(PaymentStatus, name="payment_record_status", values_callable=enum_values),
        default=PaymentStatus.PAID,
        nullable=False,
    )
    date = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Payment(id={self.id}, parcel_id={self.parcel_id}, txn='{self.transaction_id}')>"
