from datetime import datetime, timedelta

from bloodbridge.models.donor import Donor
from bloodbridge.services.availability import (
    availability_for,
    derive_availability,
    next_eligible_date,
    refresh_availability,
)

NOW = datetime(2026, 6, 1, 12, 0, 0)


def test_recent_donation_forces_cooldown():
    status = derive_availability(NOW - timedelta(days=10), False, now=NOW)
    assert status == "cooldown"


def test_cooldown_overrides_emergency_flag():
    status = derive_availability(NOW - timedelta(days=10), True, now=NOW, is_available=True)
    assert status == "cooldown"


def test_available_after_cooldown_window():
    status = derive_availability(NOW - timedelta(days=60), False, now=NOW)
    assert status == "available"


def test_never_donated_is_available():
    assert derive_availability(None, False, now=NOW) == "available"


def test_opted_out_donor_without_emergency_flag_is_unavailable():
    status = derive_availability(NOW - timedelta(days=60), False, now=NOW, is_available=False)
    assert status == "unavailable"


def test_opted_out_donor_with_emergency_flag_is_available():
    status = derive_availability(NOW - timedelta(days=60), True, now=NOW, is_available=False)
    assert status == "available"


def test_cooldown_window_is_configurable():
    last = NOW - timedelta(days=60)
    assert derive_availability(last, False, now=NOW, cooldown_days=90) == "cooldown"
    assert derive_availability(last, False, now=NOW, cooldown_days=56) == "available"


def test_cooldown_boundary_is_exclusive():
    last = NOW - timedelta(days=56)
    assert derive_availability(last, False, now=NOW, cooldown_days=56) == "available"


def test_stored_status_is_rederived_on_read():
    donor = Donor(
        last_donation=(NOW - timedelta(days=10)).isoformat(),
        emergency_available=0,
        is_available=1,
        availability_status="cooldown",
    )
    # Time passes without any write
    later = NOW + timedelta(days=50)
    assert donor.availability_status == "cooldown"
    assert availability_for(donor, now=later) == "available"

    refresh_availability(donor, now=later)
    assert donor.availability_status == "available"


def test_next_eligible_date_follows_last_donation():
    donor = Donor(last_donation=NOW.isoformat())
    assert next_eligible_date(donor) == NOW + timedelta(days=56)
    assert next_eligible_date(Donor(last_donation=None)) is None
