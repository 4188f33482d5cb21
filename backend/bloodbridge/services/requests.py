"""Blood request lifecycle: creation, matching, responses and closing."""
import logging
from datetime import datetime

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from bloodbridge.constants import (
    NotificationPriority,
    NotificationType,
    RequestStatus,
    ResponseStatus,
    UrgencyLevel,
)
from bloodbridge.models.blood_request import BloodRequest, DonorResponse
from bloodbridge.models.donor import Donor
from bloodbridge.models.user import User
from bloodbridge.services.availability import parse_timestamp
from bloodbridge.services.geocoding import Geocoder, apply_location, full_address, locate
from bloodbridge.services.matching import find_matching_donors
from bloodbridge.services.notifications import create_notification, fan_out_notifications

logger = logging.getLogger(__name__)

# How long a request stays open, by urgency tier
URGENCY_EXPIRY = {
    UrgencyLevel.CRITICAL.value: relativedelta(hours=4),
    UrgencyLevel.URGENT.value: relativedelta(hours=24),
    UrgencyLevel.SCHEDULED.value: relativedelta(days=7),
}
DEFAULT_EXPIRY = relativedelta(hours=24)


def compute_expiry(urgency: str, created_at: datetime | None = None) -> datetime:
    """Expiry time for a request created at ``created_at``."""
    if created_at is None:
        created_at = datetime.utcnow()
    return created_at + URGENCY_EXPIRY.get(urgency, DEFAULT_EXPIRY)


def is_expired(blood_request: BloodRequest, now: datetime | None = None) -> bool:
    """Whether the request is past its expiry time (informational only)."""
    if now is None:
        now = datetime.utcnow()
    expires_at = parse_timestamp(blood_request.expires_at)
    return expires_at is not None and expires_at <= now


def derive_status_from_units(status: str, units_received: int, units_needed: int) -> str:
    """Status implied by units received.

    Zero units reopens a partial or fulfilled request; other statuses are kept.
    """
    if units_received >= units_needed:
        return RequestStatus.FULFILLED.value
    if units_received > 0:
        return RequestStatus.PARTIAL.value
    if status in (RequestStatus.PARTIAL.value, RequestStatus.FULFILLED.value):
        return RequestStatus.ACTIVE.value
    return status


def _request_location_label(blood_request: BloodRequest) -> str:
    if blood_request.hospital is not None:
        return blood_request.hospital.name
    return blood_request.formatted_address or f"{blood_request.city}, {blood_request.state}"


def create_request(
    db: Session,
    requester: User,
    fields: dict,
    geocoder: Geocoder,
) -> tuple[BloodRequest, int]:
    """Persist a new request, then notify compatible donors nearby.

    ``fields`` holds the column values from the create payload; when it has
    no coordinates the address is geocoded first. The request commit and the
    notification batch are separate writes.

    Returns the request and the number of donors notified.
    """
    now = datetime.utcnow()
    blood_request = BloodRequest(
        requester_id=requester.id,
        status=RequestStatus.ACTIVE.value,
        units_received=0,
        expires_at=compute_expiry(fields["urgency"], now).isoformat(),
        created_at=now.isoformat(),
        **fields,
    )
    if blood_request.latitude is None or blood_request.longitude is None:
        result = locate(
            geocoder,
            full_address(blood_request.address, blood_request.city, blood_request.state, blood_request.zipcode),
        )
        apply_location(blood_request, result)

    db.add(blood_request)
    db.commit()
    db.refresh(blood_request)

    if blood_request.latitude is None or blood_request.longitude is None:
        logger.warning(f"Request {blood_request.id} has no location; skipping donor matching")
        return blood_request, 0

    donors = find_matching_donors(
        db,
        blood_request.blood_type,
        blood_request.latitude,
        blood_request.longitude,
    )
    notifications = fan_out_notifications(
        db,
        [donor.user_id for donor in donors],
        NotificationType.BLOOD_REQUEST.value,
        title=f"Urgent Blood Request: {blood_request.blood_type}",
        message=(
            f"A patient needs {blood_request.units_needed} units of {blood_request.blood_type} "
            f"blood at {_request_location_label(blood_request)}. Can you help?"
        ),
        related_id=blood_request.id,
        related_model="BloodRequest",
        priority=(
            NotificationPriority.HIGH.value
            if blood_request.urgency == UrgencyLevel.CRITICAL.value
            else NotificationPriority.MEDIUM.value
        ),
    )
    return blood_request, len(notifications)


def update_status(db: Session, blood_request: BloodRequest, status: str) -> BloodRequest:
    """Set a request's status directly; any transition is accepted."""
    blood_request.status = status
    db.commit()
    db.refresh(blood_request)
    return blood_request


def record_units(db: Session, blood_request: BloodRequest, units_received: int) -> BloodRequest:
    """Record units received and derive partial/fulfilled from them."""
    blood_request.units_received = units_received
    blood_request.status = derive_status_from_units(
        blood_request.status,
        units_received,
        blood_request.units_needed,
    )
    db.commit()
    db.refresh(blood_request)
    return blood_request


def respond_to_request(
    db: Session,
    blood_request: BloodRequest,
    donor: Donor,
    response: str,
) -> BloodRequest:
    """Record a donor's answer, updating their earlier answer if present.

    The parent request status is left alone; the requester is notified.
    """
    now = datetime.utcnow().isoformat()
    existing = db.query(DonorResponse).filter(
        DonorResponse.request_id == blood_request.id,
        DonorResponse.donor_id == donor.id,
    ).first()

    if existing:
        existing.status = response
        existing.responded_at = now
    else:
        db.add(DonorResponse(
            request_id=blood_request.id,
            donor_id=donor.id,
            status=response,
            notified_at=now,
            responded_at=now,
        ))

    db.commit()

    accepted = response == ResponseStatus.ACCEPTED.value
    create_notification(
        db,
        blood_request.requester_id,
        NotificationType.DONOR_RESPONSE.value,
        title=f"Donor {'Accepted' if accepted else 'Declined'} Request",
        message=(
            f"A donor has {'accepted' if accepted else 'declined'} your blood request "
            f"for {blood_request.blood_type}."
        ),
        related_id=blood_request.id,
        related_model="BloodRequest",
    )
    db.refresh(blood_request)
    return blood_request


def close_request(
    db: Session,
    blood_request: BloodRequest,
    status: str,
    notes: str | None = None,
) -> tuple[BloodRequest, int]:
    """Close a request as fulfilled or cancelled and tell accepted donors.

    Returns the request and the number of donors notified.
    """
    blood_request.status = status
    blood_request.closed_at = datetime.utcnow().isoformat()
    if notes:
        blood_request.notes = f"{blood_request.notes}\n{notes}" if blood_request.notes else notes
    db.commit()

    accepted_user_ids = [
        response.donor.user_id
        for response in blood_request.responses
        if response.status == ResponseStatus.ACCEPTED.value
    ]
    fulfilled = status == RequestStatus.FULFILLED.value
    notifications = fan_out_notifications(
        db,
        accepted_user_ids,
        NotificationType.REQUEST_CLOSED.value,
        title=f"Blood Request {'Fulfilled' if fulfilled else 'Cancelled'}",
        message=(
            f"The blood request you responded to has been "
            f"{'fulfilled' if fulfilled else 'cancelled'}."
        ),
        related_id=blood_request.id,
        related_model="BloodRequest",
    )
    db.refresh(blood_request)
    return blood_request, len(notifications)
