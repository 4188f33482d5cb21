"""Shared enumerations for donors, requests and notifications."""
from enum import Enum


class BloodType(str, Enum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


class UserRole(str, Enum):
    USER = "user"
    DONOR = "donor"
    HOSPITAL = "hospital"
    ADMIN = "admin"


class UrgencyLevel(str, Enum):
    CRITICAL = "critical"
    URGENT = "urgent"
    SCHEDULED = "scheduled"


class RequestType(str, Enum):
    HOSPITAL = "hospital"
    PATIENT = "patient"


class RequestStatus(str, Enum):
    ACTIVE = "active"
    PARTIAL = "partial"
    FULFILLED = "fulfilled"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class ResponseStatus(str, Enum):
    NOTIFIED = "notified"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    DONATED = "donated"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    COOLDOWN = "cooldown"


class NotificationType(str, Enum):
    BLOOD_REQUEST = "blood_request"
    DONOR_RESPONSE = "donor_response"
    REQUEST_UPDATE = "request_update"
    REQUEST_CLOSED = "request_closed"
    DONOR_MATCH = "donor_match"
    DONATION_REMINDER = "donation_reminder"
    REQUEST_FULFILLED = "request_fulfilled"
    NEARBY_REQUEST = "nearby_request"
    THANK_YOU = "thank_you"
    SYSTEM = "system"


class NotificationPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
