"""Donor profile service."""
import json
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from bloodbridge.constants import UserRole
from bloodbridge.models.donor import Donation, Donor
from bloodbridge.models.user import User
from bloodbridge.services.availability import parse_timestamp, refresh_availability
from bloodbridge.services.geocoding import Geocoder, apply_location, full_address, locate

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("address", "city", "state", "zipcode")


def get_donor_for_user(db: Session, user_id: str) -> Donor | None:
    return db.query(Donor).filter(Donor.user_id == user_id).first()


def upsert_donor_profile(
    db: Session,
    user: User,
    fields: dict,
    geocoder: Geocoder,
) -> tuple[Donor, bool]:
    """Create the user's donor profile or update the existing one.

    The address is geocoded only when it changed or no point is stored yet.
    Availability is recomputed after every write.

    Returns the donor and whether it was newly created.
    """
    fields = dict(fields)
    medical_conditions = fields.pop("medical_conditions", None)

    donor = get_donor_for_user(db, user.id)
    created = donor is None
    if created:
        donor = Donor(user_id=user.id, is_available=1, emergency_available=0, is_active=1)
        db.add(donor)
        address_changed = True
    else:
        address_changed = any(
            key in fields and fields[key] != getattr(donor, key) for key in ADDRESS_FIELDS
        )

    for key, value in fields.items():
        setattr(donor, key, value)
    if medical_conditions is not None:
        donor.medical_conditions = json.dumps(medical_conditions)

    if address_changed or donor.latitude is None:
        result = locate(geocoder, full_address(donor.address, donor.city, donor.state, donor.zipcode))
        apply_location(donor, result)

    refresh_availability(donor)

    # Registering a profile makes a plain user a donor
    if user.role == UserRole.USER.value:
        user.role = UserRole.DONOR.value

    db.commit()
    db.refresh(donor)
    logger.info(f"{'Created' if created else 'Updated'} donor profile {donor.id}")
    return donor, created


def delete_donor_profile(db: Session, user: User) -> bool:
    """Remove the user's donor profile and demote them back to a plain user."""
    donor = get_donor_for_user(db, user.id)
    if donor is None:
        return False

    db.delete(donor)
    if user.role == UserRole.DONOR.value:
        user.role = UserRole.USER.value
    db.commit()
    return True


def set_availability(
    db: Session,
    donor: Donor,
    is_available: bool | None = None,
    emergency_available: bool | None = None,
) -> Donor:
    if is_available is not None:
        donor.is_available = 1 if is_available else 0
    if emergency_available is not None:
        donor.emergency_available = 1 if emergency_available else 0
    refresh_availability(donor)
    db.commit()
    db.refresh(donor)
    return donor


def set_last_donation(db: Session, donor: Donor, last_donation: datetime | None) -> Donor:
    donor.last_donation = last_donation.isoformat() if last_donation else None
    refresh_availability(donor)
    db.commit()
    db.refresh(donor)
    return donor


def record_donation(
    db: Session,
    donor: Donor,
    date: datetime,
    hospital: str,
    recipient: str | None = None,
    units: int = 1,
) -> Donation:
    """Append to donation history; a newer date also becomes the last donation."""
    donation = Donation(
        donor_id=donor.id,
        date=date.isoformat(),
        hospital=hospital,
        recipient=recipient,
        units=units,
    )
    db.add(donation)

    last = parse_timestamp(donor.last_donation)
    if last is None or date > last:
        donor.last_donation = date.isoformat()
        refresh_availability(donor)

    db.commit()
    db.refresh(donation)
    return donation
