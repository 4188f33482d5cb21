"""Blood request models."""
import uuid
from datetime import datetime

from sqlalchemy import Column, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from bloodbridge.database import Base


class BloodRequest(Base):
    """A request for blood raised by a hospital or on behalf of a patient."""

    __tablename__ = "blood_requests"
    __table_args__ = (
        Index("ix_blood_requests_status", "status", "blood_type"),
        Index("ix_blood_requests_created", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    requester_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Request type: hospital (needs hospital_id) or patient (needs patient_name)
    request_type = Column(String(20), nullable=False)
    hospital_id = Column(String(36), ForeignKey("hospitals.id", ondelete="SET NULL"))
    patient_name = Column(String(100))

    blood_type = Column(String(3), nullable=False)
    units_needed = Column(Integer, nullable=False)
    units_received = Column(Integer, default=0)
    urgency = Column(String(20), nullable=False)  # critical, urgent, scheduled

    # Location
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    zipcode = Column(String(20), nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)
    formatted_address = Column(String(255))

    # Contact
    contact_name = Column(String(100), nullable=False)
    contact_number = Column(String(20), nullable=False)
    additional_info = Column(Text)
    notes = Column(Text, default="")

    # Lifecycle
    status = Column(String(20), nullable=False, default="active")
    expires_at = Column(String(26), nullable=False)
    closed_at = Column(String(26))

    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat(), onupdate=lambda: datetime.utcnow().isoformat())

    # Relationships
    requester = relationship("User", back_populates="blood_requests")
    hospital = relationship("Hospital", back_populates="blood_requests")
    responses = relationship(
        "DonorResponse",
        back_populates="blood_request",
        cascade="all, delete-orphan",
        order_by="DonorResponse.notified_at",
    )


class DonorResponse(Base):
    """A donor's answer to a blood request."""

    __tablename__ = "donor_responses"
    __table_args__ = (
        UniqueConstraint("request_id", "donor_id", name="uq_donor_response"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    request_id = Column(String(36), ForeignKey("blood_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    donor_id = Column(String(36), ForeignKey("donors.id", ondelete="CASCADE"), nullable=False)

    # notified, accepted, declined, donated
    status = Column(String(20), nullable=False, default="notified")
    notified_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    responded_at = Column(String(26))

    blood_request = relationship("BloodRequest", back_populates="responses")
    donor = relationship("Donor", back_populates="responses")
