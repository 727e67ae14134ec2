"""
Rider application database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from courier.app.db.session import Base
from courier.app.models.enums import enum_values
from courier.app.models.rider_enums import RiderStatus
from courier.app.models.timestamps import utcnow


class Rider(Base):
    """
    Rider application.

    Starts pending; an admin either activates it (the applicant's user role
    becomes rider) or rejects it.
    """
    __tablename__ = "riders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Applicant
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    age = Column(Integer, nullable=True)
    contact = Column(String(50), nullable=True)
    region = Column(String(100), nullable=True)
    district = Column(String(100), nullable=False, index=True)
    national_id = Column(String(100), nullable=True)
    bike_brand = Column(String(100), nullable=True)
    bike_registration = Column(String(100), nullable=True)

    status = Column(
        Enum(RiderStatus, name="rider_status", values_callable=enum_values),
        default=RiderStatus.PENDING,
        nullable=False,
        index=True,
    )
    submitted_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Rider(id={self.id}, email='{self.email}', district='{self.district}', status='{self.status.value}')>"
