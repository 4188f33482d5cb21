"""SQLAlchemy models package."""
from bloodbridge.models.user import User
from bloodbridge.models.donor import Donation, Donor
from bloodbridge.models.hospital import Hospital
from bloodbridge.models.blood_request import BloodRequest, DonorResponse
from bloodbridge.models.notification import Notification

__all__ = [
    "User",
    "Donor",
    "Donation",
    "Hospital",
    "BloodRequest",
    "DonorResponse",
    "Notification",
]
