"""
Parcel database model.

A parcel moves along two independent one-way axes: payment
(unpaid → paid) and delivery (not_collected → in_transit → delivered).
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum
from courier.app.db.session import Base
from courier.app.models.enums import enum_values
from courier.app.models.parcel_enums import PaymentStatus, DeliveryStatus
from courier.app.models.timestamps import utcnow


class Parcel(Base):
    """
    Parcel model.

    Owned by the creating user (by email). Assignment fields are empty until
    an admin assigns a rider; they are written exactly once.
    """
    __tablename__ = "parcels"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Ownership
    user_email = Column(String(255), nullable=True, index=True)

    # Description
    name = Column(String(200), nullable=False)
    type = Column(String(50), nullable=False)
    weight = Column(Float, nullable=True)
    cost = Column(Float, nullable=True)

    # Sender / receiver
    sender_name = Column(String(200), nullable=True)
    sender_contact = Column(String(50), nullable=True)
    sender_region = Column(String(100), nullable=False)
    sender_district = Column(String(100), nullable=True)
    sender_address = Column(String(500), nullable=True)
    receiver_name = Column(String(200), nullable=True)
    receiver_contact = Column(String(50), nullable=True)
    receiver_region = Column(String(100), nullable=False)
    receiver_district = Column(String(100), nullable=True)
    receiver_address = Column(String(500), nullable=True)

    # Status
    payment_status = Column(
        Enum(PaymentStatus, name="payment_status", values_callable=enum_values),
        default=PaymentStatus.UNPAID,
        nullable=False,
        index=True,
    )
    delivery_status = Column(
        Enum(DeliveryStatus, name="delivery_status", values_callable=enum_values),
        default=DeliveryStatus.NOT_COLLECTED,
        nullable=False,
        index=True,
    )

    # Rider assignment
    assign_rider_id = Column(String(64), nullable=True, index=True)
    assign_rider_name = Column(String(200), nullable=True)
    rider_contact = Column(String(50), nullable=True)
    assigned_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    creation_date = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return (
            f"<Parcel(id={self.id}, name='{self.name}', "
            f"payment='{self.payment_status.value}', delivery='{self.delivery_status.value}')>"
        )
