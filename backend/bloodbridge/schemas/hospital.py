"""Hospital and map schemas."""
from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator


class HospitalCreate(BaseModel):
    """Admin request to add a hospital; the address is geocoded."""

    name: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zipcode: str = Field(..., min_length=1)
    phone: str = Field(..., pattern=r"^(\+\d{1,3}[- ]?)?\d{10}$")
    email: EmailStr
    website: str | None = Field(None, pattern=r"^https?://")


class HospitalResponse(BaseModel):
    id: str
    slug: str
    name: str
    address: str
    city: str
    state: str
    zipcode: str
    latitude: float | None
    longitude: float | None
    formatted_address: str | None
    phone: str
    email: str
    website: str | None
    emergency_available: bool
    verified: bool

    @field_validator("emergency_available", "verified", mode="before")
    @classmethod
    def int_to_bool(cls, v: Any) -> bool:
        if isinstance(v, int):
            return bool(v)
        return v

    class Config:
        from_attributes = True


class GeocodeResponse(BaseModel):
    latitude: float
    longitude: float
    formatted_address: str | None = None
