"""Blood type compatibility lookups.

The chart is keyed by recipient blood type and lists every donor blood type
that recipient can safely receive red cells from. The inverse chart (who a
donor can give to) is derived from it so the two can never disagree.
"""
from bloodbridge.constants import BloodType

# Key = recipient blood type, value = compatible donor blood types
COMPATIBLE_DONORS: dict[str, frozenset[str]] = {
    "A+": frozenset({"A+", "A-", "O+", "O-"}),
    "A-": frozenset({"A-", "O-"}),
    "B+": frozenset({"B+", "B-", "O+", "O-"}),
    "B-": frozenset({"B-", "O-"}),
    "AB+": frozenset(t.value for t in BloodType),  # Universal recipient
    "AB-": frozenset({"AB-", "A-", "B-", "O-"}),
    "O+": frozenset({"O+", "O-"}),
    "O-": frozenset({"O-"}),  # Universal donor
}

# Key = donor blood type, value = compatible recipient blood types
COMPATIBLE_RECIPIENTS: dict[str, frozenset[str]] = {
    donor_type: frozenset(
        recipient for recipient, donors in COMPATIBLE_DONORS.items() if donor_type in donors
    )
    for donor_type in COMPATIBLE_DONORS
}


def _key(blood_type: str | BloodType | None) -> str | None:
    if isinstance(blood_type, BloodType):
        return blood_type.value
    return blood_type


def compatible_donors(recipient_type: str | BloodType | None) -> frozenset[str]:
    """Blood types that can donate to ``recipient_type`` (empty if unknown)."""
    return COMPATIBLE_DONORS.get(_key(recipient_type), frozenset())


def compatible_recipients(donor_type: str | BloodType | None) -> frozenset[str]:
    """Blood types that can receive from ``donor_type`` (empty if unknown)."""
    return COMPATIBLE_RECIPIENTS.get(_key(donor_type), frozenset())


def is_compatible(donor_type: str | BloodType | None, recipient_type: str | BloodType | None) -> bool:
    """Check if a donor blood type can give to a recipient blood type."""
    return _key(donor_type) in compatible_donors(recipient_type)
