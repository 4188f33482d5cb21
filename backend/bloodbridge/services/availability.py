"""Donor availability derivation."""
from datetime import datetime, timedelta

from bloodbridge.config import get_settings
from bloodbridge.constants import AvailabilityStatus
from bloodbridge.models.donor import Donor


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a stored ISO timestamp (date-only strings are accepted)."""
    if not value:
        return None
    return datetime.fromisoformat(value)


def derive_availability(
    last_donation: datetime | None,
    emergency_available: bool,
    now: datetime | None = None,
    is_available: bool = True,
    cooldown_days: int | None = None,
) -> str:
    """Compute a donor's availability from their last donation.

    Args:
        last_donation: When the donor last gave blood, if ever
        emergency_available: Donor agreed to be contacted for emergencies
        now: Reference time (defaults to utcnow)
        is_available: Donor's own opt-in toggle
        cooldown_days: Minimum days between donations (defaults to settings)

    Returns:
        "cooldown", "available" or "unavailable"
    """
    if now is None:
        now = datetime.utcnow()
    if cooldown_days is None:
        cooldown_days = get_settings().donation_cooldown_days

    if last_donation is not None and now - last_donation < timedelta(days=cooldown_days):
        return AvailabilityStatus.COOLDOWN.value

    if is_available or emergency_available:
        return AvailabilityStatus.AVAILABLE.value
    return AvailabilityStatus.UNAVAILABLE.value


def availability_for(donor: Donor, now: datetime | None = None) -> str:
    """Re-derive a donor's availability rather than trusting the stored value."""
    return derive_availability(
        parse_timestamp(donor.last_donation),
        bool(donor.emergency_available),
        now=now,
        is_available=bool(donor.is_available),
    )


def refresh_availability(donor: Donor, now: datetime | None = None) -> str:
    """Recompute and store availability; call after changing donation date or flags."""
    donor.availability_status = availability_for(donor, now)
    return donor.availability_status


def next_eligible_date(donor: Donor) -> datetime | None:
    """When a donor in cooldown can give again."""
    last = parse_timestamp(donor.last_donation)
    if last is None:
        return None
    return last + timedelta(days=get_settings().donation_cooldown_days)
