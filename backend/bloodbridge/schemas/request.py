"""Blood request schemas."""
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from bloodbridge.constants import BloodType, RequestStatus, RequestType, UrgencyLevel


class BloodRequestCreate(BaseModel):
    """Request to open a new blood request."""

    request_type: RequestType
    hospital_id: str | None = None
    patient_name: str | None = Field(None, max_length=100)
    blood_type: BloodType
    units_needed: int = Field(..., ge=1)
    urgency: UrgencyLevel
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zipcode: str = Field(..., min_length=1)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    contact_name: str = Field(..., min_length=1)
    contact_number: str = Field(..., min_length=1)
    additional_info: str | None = None

    @model_validator(mode="after")
    def check_request_type(self):
        if self.request_type == RequestType.HOSPITAL and not self.hospital_id:
            raise ValueError("hospital_id is required for hospital requests")
        if self.request_type == RequestType.PATIENT and not self.patient_name:
            raise ValueError("patient_name is required for patient requests")
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self


class RequestStatusUpdate(BaseModel):
    status: RequestStatus


class RequestUnitsUpdate(BaseModel):
    units_received: int = Field(..., ge=0)


class RequestRespond(BaseModel):
    """Donor's answer to a request."""

    response: Literal["accepted", "declined"]


class RequestClose(BaseModel):
    status: Literal["fulfilled", "cancelled"]
    notes: str | None = None


class DonorResponseItem(BaseModel):
    """A donor's response recorded on a request."""

    id: str
    donor_id: str
    status: str
    notified_at: str | None
    responded_at: str | None

    class Config:
        from_attributes = True


class BloodRequestResponse(BaseModel):
    """Blood request as returned by the API."""

    id: str
    requester_id: str
    request_type: str
    hospital_id: str | None
    patient_name: str | None
    blood_type: str
    units_needed: int
    units_received: int
    urgency: str
    address: str
    city: str
    state: str
    zipcode: str
    latitude: float | None
    longitude: float | None
    formatted_address: str | None
    contact_name: str
    contact_number: str
    additional_info: str | None
    notes: str | None
    status: str
    expires_at: str
    is_expired: bool
    closed_at: str | None
    created_at: str
    responses: list[DonorResponseItem] = []
    donors_notified: int | None = None
