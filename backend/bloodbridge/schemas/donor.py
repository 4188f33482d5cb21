"""Donor schemas."""
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from bloodbridge.constants import BloodType


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Stored timestamps are naive UTC."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class DonorProfileUpdate(BaseModel):
    """Create or replace the current user's donor profile."""

    blood_type: BloodType
    age: int = Field(..., ge=18, le=65)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zipcode: str = Field(..., min_length=1)
    last_donation: datetime | None = None
    emergency_available: bool = False
    is_available: bool = True
    medical_conditions: list[str] = []

    normalize_last_donation = field_validator("last_donation")(to_naive_utc)


class AvailabilityUpdate(BaseModel):
    is_available: bool | None = None
    emergency_available: bool | None = None


class LastDonationUpdate(BaseModel):
    last_donation: datetime | None

    normalize_last_donation = field_validator("last_donation")(to_naive_utc)


class DonationCreate(BaseModel):
    """Entry to append to the donation history."""

    date: datetime
    hospital: str = Field(..., min_length=1)
    recipient: str | None = None
    units: int = Field(1, ge=1)

    normalize_date = field_validator("date")(to_naive_utc)


class DonationResponse(BaseModel):
    id: str
    date: str
    hospital: str
    recipient: str | None
    units: int

    class Config:
        from_attributes = True


class DonorProfileResponse(BaseModel):
    """Donor profile with availability derived at read time."""

    id: str
    user_id: str
    name: str
    blood_type: str
    age: int
    address: str
    city: str
    state: str
    zipcode: str
    latitude: float | None
    longitude: float | None
    formatted_address: str | None
    last_donation: str | None
    emergency_available: bool
    is_available: bool
    availability_status: str
    next_eligible_date: str | None
    medical_conditions: list[str]
    is_active: bool
    donations: list[DonationResponse] = []
    distance_km: float | None = None
