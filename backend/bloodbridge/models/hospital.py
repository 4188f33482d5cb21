"""Hospital model."""
import uuid
from datetime import datetime

from sqlalchemy import Column, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from bloodbridge.database import Base


class Hospital(Base):
    """Hospital directory entry (seeded from YAML files or added by admins)."""

    __tablename__ = "hospitals"
    __table_args__ = (
        Index("ix_hospitals_location", "latitude", "longitude"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    slug = Column(String(100), unique=True, nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))  # Hospital staff account
    name = Column(String(100), nullable=False)

    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    zipcode = Column(String(20), nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)
    formatted_address = Column(String(255))

    phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=False)
    website = Column(String(255))

    emergency_available = Column(Integer, default=1)  # SQLite boolean
    verified = Column(Integer, default=0)  # SQLite boolean

    created_at = Column(String(26), default=lambda: datetime.utcnow().isoformat())
    updated_at = Column(String(26), default=lambda: datetime.utcnow().isoformat(), onupdate=lambda: datetime.utcnow().isoformat())

    blood_requests = relationship("BloodRequest", back_populates="hospital")
