"""Donor profile and donation history models."""
import uuid
from datetime import datetime

from sqlalchemy import Column, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from bloodbridge.database import Base


class Donor(Base):
    """A user's donor profile."""

    __tablename__ = "donors"
    __table_args__ = (
        Index("ix_donors_blood_type_active", "blood_type", "is_active"),
        Index("ix_donors_location", "latitude", "longitude"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    blood_type = Column(String(3), nullable=False)
    age = Column(Integer, nullable=False)

    # Address as entered
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    zipcode = Column(String(20), nullable=False)

    # Geocoded point
    latitude = Column(Float)
    longitude = Column(Float)
    formatted_address = Column(String(255))

    # Availability
    last_donation = Column(String(26))  # ISO datetime
    emergency_available = Column(Integer, default=0)  # SQLite boolean
    is_available = Column(Integer, default=1)  # SQLite boolean: donor opt-in
    availability_status = Column(String(20), default="available")  # Refreshed on write, re-derived on read

    medical_conditions = Column(Text, default="[]")  # JSON array
    is_active = Column(Integer, default=1)  # SQLite boolean

    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat(), onupdate=lambda: datetime.utcnow().isoformat())

    # Relationships
    user = relationship("User", back_populates="donor_profile")
    donations = relationship(
        "Donation",
        back_populates="donor",
        cascade="all, delete-orphan",
        order_by="Donation.date",
    )
    responses = relationship("DonorResponse", back_populates="donor", cascade="all, delete-orphan")


class Donation(Base):
    """One entry in a donor's donation history."""

    __tablename__ = "donations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    donor_id = Column(String(36), ForeignKey("donors.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(String(26), nullable=False)  # ISO datetime
    hospital = Column(String(100), nullable=False)
    recipient = Column(String(100))
    units = Column(Integer, default=1)

    donor = relationship("Donor", back_populates="donations")
