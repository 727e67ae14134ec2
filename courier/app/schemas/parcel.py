"""
Parcel Pydantic schemas.

Defines request and response models for parcel management. Wire names
follow the web client (camelCase where it uses camelCase).
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional, List
from courier.app.models.parcel_enums import PaymentStatus, DeliveryStatus
from courier.app.schemas.common import ActionResponse


class ParcelCreate(BaseModel):
    """Schema for creating a new parcel."""
    name: str = Field(..., min_length=1, max_length=200, description="Parcel title")
    type: str = Field(..., min_length=1, max_length=50, description="Parcel type, e.g. document")
    sender_region: str = Field(..., alias="senderRegion", min_length=1, max_length=100)
    receiver_region: str = Field(..., alias="receiverRegion", min_length=1, max_length=100)
    user_email: Optional[EmailStr] = Field(None, description="Owner email")
    weight: Optional[float] = Field(None, ge=0, description="Weight in kilograms")
    cost: Optional[float] = Field(None, ge=0, description="Quoted delivery cost")
    sender_name: Optional[str] = Field(None, alias="senderName", max_length=200)
    sender_contact: Optional[str] = Field(None, alias="senderContact", max_length=50)
    sender_district: Optional[str] = Field(None, alias="senderDistrict", max_length=100)
    sender_address: Optional[str] = Field(None, alias="senderAddress", max_length=500)
    receiver_name: Optional[str] = Field(None, alias="receiverName", max_length=200)
    receiver_contact: Optional[str] = Field(None, alias="receiverContact", max_length=50)
    receiver_district: Optional[str] = Field(None, alias="receiverDistrict", max_length=100)
    receiver_address: Optional[str] = Field(None, alias="receiverAddress", max_length=500)
    creation_date: Optional[datetime] = Field(None, description="Client timestamp; defaults to now")

    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class AssignRiderRequest(BaseModel):
    """Schema for assigning a rider to a parcel."""
    rider_id: str = Field(..., alias="riderId", min_length=1, max_length=64)
    rider_name: Optional[str] = Field(None, alias="riderName", max_length=200)
    rider_contact: Optional[str] = Field(None, alias="riderContact", max_length=50)

    class Config:
        populate_by_name = True
        str_strip_whitespace = True

    @field_validator("rider_id", mode="before")
    @classmethod
    def _rider_id_as_text(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class ParcelResponse(BaseModel):
    """Schema for parcel response."""
    id: int
    user_email: Optional[str] = None
    name: str
    type: str
    weight: Optional[float] = None
    cost: Optional[float] = None
    sender_name: Optional[str] = Field(None, alias="senderName")
    sender_contact: Optional[str] = Field(None, alias="senderContact")
    sender_region: str = Field(..., alias="senderRegion")
    sender_district: Optional[str] = Field(None, alias="senderDistrict")
    sender_address: Optional[str] = Field(None, alias="senderAddress")
    receiver_name: Optional[str] = Field(None, alias="receiverName")
    receiver_contact: Optional[str] = Field(None, alias="receiverContact")
    receiver_region: str = Field(..., alias="receiverRegion")
    receiver_district: Optional[str] = Field(None, alias="receiverDistrict")
    receiver_address: Optional[str] = Field(None, alias="receiverAddress")
    payment_status: PaymentStatus
    delivery_status: DeliveryStatus
    assign_rider_id: Optional[str] = Field(None, alias="assignRider_id")
    assign_rider_name: Optional[str] = Field(None, alias="assignRider_name")
    rider_contact: Optional[str] = Field(None, alias="riderContact")
    assigned_at: Optional[datetime] = Field(None, alias="assignedAt")
    delivered_at: Optional[datetime] = Field(None, alias="deliveredAt")
    creation_date: datetime

    class Config:
        from_attributes = True
        populate_by_name = True


class ParcelCreatedResponse(ActionResponse):
    """Response after a parcel is created."""
    inserted_id: int = Field(..., alias="insertedId")

    class Config:
        populate_by_name = True


class ParcelDetailResponse(ActionResponse):
    """Single parcel wrapped in the response envelope."""
    parcel: ParcelResponse


class ParcelListResponse(ActionResponse):
    """Schema for a filtered parcel list."""
    count: int
    parcels: List[ParcelResponse]


class AssignmentFields(BaseModel):
    """Fields written by a rider assignment."""
    delivery_status: DeliveryStatus
    assigned_at: datetime = Field(..., alias="assignedAt")
    assign_rider_id: str = Field(..., alias="assignRider_id")
    assign_rider_name: Optional[str] = Field(None, alias="assignRider_name")
    rider_contact: Optional[str] = Field(None, alias="riderContact")

    class Config:
        populate_by_name = True


class AssignRiderResponse(ActionResponse):
    """Response after a rider assignment."""
    updated_parcel: AssignmentFields = Field(..., alias="updatedParcel")

    class Config:
        populate_by_name = True


class DeliveryResponse(ActionResponse):
    """Response after a parcel is marked delivered."""
    parcel_id: int = Field(..., alias="parcelId")
    delivery_status: DeliveryStatus
    delivered_at: datetime = Field(..., alias="deliveredAt")

    class Config:
        populate_by_name = True
