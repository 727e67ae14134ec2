"""
Rider Pydantic schemas.
"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, List
from courier.app.models.rider_enums import RiderStatus
from courier.app.schemas.common import ActionResponse


class RiderApplication(BaseModel):
    """Schema for a rider application."""
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    district: str = Field(..., min_length=1, max_length=100)
    age: Optional[int] = Field(None, ge=16, le=100)
    contact: Optional[str] = Field(None, max_length=50)
    region: Optional[str] = Field(None, max_length=100)
    national_id: Optional[str] = Field(None, alias="nationalId", max_length=100)
    bike_brand: Optional[str] = Field(None, alias="bikeBrand", max_length=100)
    bike_registration: Optional[str] = Field(None, alias="bikeRegistration", max_length=100)

    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class RiderStatusUpdate(BaseModel):
    """
    Schema for an admin status decision.

    ``status`` is checked by the rider lifecycle so an unknown value is
    reported with its own message.
    """
    status: str = Field(..., min_length=1)
    email: Optional[str] = Field(None, description="Applicant email; required when activating")

    class Config:
        str_strip_whitespace = True


class RiderResponse(BaseModel):
    """Schema for rider response."""
    id: int
    name: str
    email: str
    district: str
    age: Optional[int] = None
    contact: Optional[str] = None
    region: Optional[str] = None
    national_id: Optional[str] = Field(None, alias="nationalId")
    bike_brand: Optional[str] = Field(None, alias="bikeBrand")
    bike_registration: Optional[str] = Field(None, alias="bikeRegistration")
    status: RiderStatus
    submitted_at: datetime = Field(..., alias="submittedAt")

    class Config:
        from_attributes = True
        populate_by_name = True


class RiderCreatedResponse(ActionResponse):
    inserted_id: int = Field(..., alias="insertedId")
    status: RiderStatus

    class Config:
        populate_by_name = True


class RiderListResponse(ActionResponse):
    count: int
    riders: List[RiderResponse]


class RiderStatusResponse(ActionResponse):
    rider_id: int = Field(..., alias="riderId")
    status: RiderStatus
    role_promoted: bool = Field(..., alias="rolePromoted")

    class Config:
        populate_by_name = True
