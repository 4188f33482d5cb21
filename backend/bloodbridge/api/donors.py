"""Donor API endpoints."""
import json

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from bloodbridge.api.deps import get_current_user, get_db, get_geocoder
from bloodbridge.config import get_settings
from bloodbridge.constants import BloodType
from bloodbridge.models.donor import Donor
from bloodbridge.models.user import User
from bloodbridge.schemas.donor import (
    AvailabilityUpdate,
    DonationCreate,
    DonationResponse,
    DonorProfileResponse,
    DonorProfileUpdate,
    LastDonationUpdate,
)
from bloodbridge.schemas.notification import MessageResponse
from bloodbridge.services.availability import availability_for, next_eligible_date
from bloodbridge.services.donors import (
    delete_donor_profile,
    get_donor_for_user,
    record_donation,
    set_availability,
    set_last_donation,
    upsert_donor_profile,
)
from bloodbridge.services.geocoding import Geocoder
from bloodbridge.services.matching import distance_km, find_donors_near

router = APIRouter(prefix="/donors", tags=["donors"])
settings = get_settings()


def _to_response(donor: Donor, distance: float | None = None) -> DonorProfileResponse:
    eligible = next_eligible_date(donor)
    return DonorProfileResponse(
        id=donor.id,
        user_id=donor.user_id,
        name=donor.user.name,
        blood_type=donor.blood_type,
        age=donor.age,
        address=donor.address,
        city=donor.city,
        state=donor.state,
        zipcode=donor.zipcode,
        latitude=donor.latitude,
        longitude=donor.longitude,
        formatted_address=donor.formatted_address,
        last_donation=donor.last_donation,
        emergency_available=bool(donor.emergency_available),
        is_available=bool(donor.is_available),
        availability_status=availability_for(donor),
        next_eligible_date=eligible.isoformat() if eligible else None,
        medical_conditions=json.loads(donor.medical_conditions or "[]"),
        is_active=bool(donor.is_active),
        donations=[DonationResponse.model_validate(d) for d in donor.donations],
        distance_km=round(distance, 2) if distance is not None else None,
    )


def _require_own_donor(db: Session, user: User) -> Donor:
    donor = get_donor_for_user(db, user.id)
    if not donor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Donor profile not found",
        )
    return donor


@router.get("", response_model=list[DonorProfileResponse])
def list_donors(
    blood_type: BloodType | None = Query(None, description="Filter by blood type"),
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    distance: float | None = Query(None, gt=0, le=settings.max_search_radius_km, description="Radius in km"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List donors, least recently donated first, optionally near a point."""
    if (lat is None) != (lng is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="lat and lng must be provided together",
        )

    if lat is not None:
        radius = distance or settings.nearby_donor_radius_km
        donors = find_donors_near(db, lat, lng, radius, blood_type=blood_type.value if blood_type else None)
        donors.sort(key=lambda d: d.last_donation or "")
        return [_to_response(d, distance_km(lat, lng, d.latitude, d.longitude)) for d in donors]

    query = db.query(Donor)
    if blood_type:
        query = query.filter(Donor.blood_type == blood_type.value)
    donors = query.order_by(Donor.last_donation.asc()).all()
    return [_to_response(d) for d in donors]


@router.get("/me", response_model=DonorProfileResponse)
def get_my_donor_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the current user's donor profile."""
    return _to_response(_require_own_donor(db, current_user))


@router.get("/{donor_id}", response_model=DonorProfileResponse)
def get_donor(
    donor_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a donor by ID."""
    donor = db.query(Donor).filter(Donor.id == donor_id).first()
    if not donor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Donor not found",
        )
    return _to_response(donor)


@router.post("", response_model=DonorProfileResponse)
def save_donor_profile(
    profile_data: DonorProfileUpdate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    geocoder: Geocoder = Depends(get_geocoder),
):
    """Create or replace the current user's donor profile.

    Every profile field is overwritten except ``last_donation``, which only
    changes when the client sends it.
    """
    fields = profile_data.model_dump(mode="json")
    if "last_donation" in profile_data.model_fields_set:
        fields["last_donation"] = profile_data.last_donation.isoformat() if profile_data.last_donation else None
    else:
        fields.pop("last_donation")
    fields["emergency_available"] = 1 if profile_data.emergency_available else 0
    fields["is_available"] = 1 if profile_data.is_available else 0

    donor, created = upsert_donor_profile(db, current_user, fields, geocoder)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return _to_response(donor)


@router.delete("", response_model=MessageResponse)
def remove_donor_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete the current user's donor profile."""
    if not delete_donor_profile(db, current_user):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Donor profile not found",
        )
    return MessageResponse(message="Donor profile removed")


@router.patch("/availability", response_model=DonorProfileResponse)
def update_availability(
    availability_data: AvailabilityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Toggle the donor's availability flags."""
    donor = _require_own_donor(db, current_user)
    donor = set_availability(
        db,
        donor,
        is_available=availability_data.is_available,
        emergency_available=availability_data.emergency_available,
    )
    return _to_response(donor)


@router.patch("/last-donation", response_model=DonorProfileResponse)
def update_last_donation(
    donation_data: LastDonationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Set the last donation date; availability is recomputed."""
    donor = _require_own_donor(db, current_user)
    return _to_response(set_last_donation(db, donor, donation_data.last_donation))


@router.post("/donations", response_model=DonationResponse, status_code=status.HTTP_201_CREATED)
def add_donation(
    donation_data: DonationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Append a donation to the current donor's history."""
    donor = _require_own_donor(db, current_user)
    return record_donation(
        db,
        donor,
        date=donation_data.date,
        hospital=donation_data.hospital,
        recipient=donation_data.recipient,
        units=donation_data.units,
    )
