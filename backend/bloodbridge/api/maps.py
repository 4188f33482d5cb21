"""Map API endpoints: geocoding and hospital search."""
import re
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from bloodbridge.api.deps import ensure_authorized, get_current_user, get_db, get_geocoder
from bloodbridge.config import get_settings
from bloodbridge.models.hospital import Hospital
from bloodbridge.models.user import User
from bloodbridge.schemas.hospital import GeocodeResponse, HospitalCreate, HospitalResponse
from bloodbridge.services import policy
from bloodbridge.services.geocoding import Geocoder, apply_location, full_address
from bloodbridge.services.matching import find_hospitals_near

router = APIRouter(prefix="/maps", tags=["maps"])
settings = get_settings()


def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


@router.get("/geocode", response_model=GeocodeResponse)
def geocode(
    address: str | None = None,
    current_user: User = Depends(get_current_user),
    geocoder: Geocoder = Depends(get_geocoder),
):
    """Geocode an address."""
    if not address:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Address is required",
        )

    result = geocoder.geocode(address)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Address not found",
        )
    return GeocodeResponse(
        latitude=result.latitude,
        longitude=result.longitude,
        formatted_address=result.formatted_address,
    )


@router.get("/hospitals", response_model=list[HospitalResponse])
def hospitals_near(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: float = Query(10, gt=0, le=settings.max_search_radius_km, description="Radius in km"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get hospitals near a location."""
    return find_hospitals_near(db, lat, lng, radius)


@router.post("/hospitals", response_model=HospitalResponse, status_code=status.HTTP_201_CREATED)
def add_hospital(
    hospital_data: HospitalCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    geocoder: Geocoder = Depends(get_geocoder),
):
    """Add a new hospital (admin only)."""
    ensure_authorized(current_user, policy.CREATE_HOSPITAL, None)

    result = geocoder.geocode(
        full_address(hospital_data.address, hospital_data.city, hospital_data.state, hospital_data.zipcode)
    )
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid address",
        )

    slug = _slugify(hospital_data.name)
    if db.query(Hospital).filter(Hospital.slug == slug).first():
        slug = f"{slug}-{uuid.uuid4().hex[:8]}"

    hospital = Hospital(slug=slug, **hospital_data.model_dump())
    apply_location(hospital, result)
    db.add(hospital)
    db.commit()
    db.refresh(hospital)
    return hospital
