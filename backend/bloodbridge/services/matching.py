"""Geo-radius donor matching."""
import logging
import math
from datetime import datetime

from geopy.distance import EARTH_RADIUS, great_circle
from sqlalchemy.orm import Session

from bloodbridge.config import get_settings
from bloodbridge.constants import AvailabilityStatus
from bloodbridge.models.donor import Donor
from bloodbridge.models.hospital import Hospital
from bloodbridge.services.availability import availability_for
from bloodbridge.services.compatibility import compatible_donors

logger = logging.getLogger(__name__)

# Same sphere as the exact distance check, padded for float rounding
EARTH_RADIUS_KM = EARTH_RADIUS
BOX_MARGIN = 1.001


def bounding_box(latitude: float, longitude: float, radius_km: float) -> tuple[float, float, float, float]:
    """Lat/lng box containing the whole search circle, for index prefiltering.

    Returns (min_lat, max_lat, min_lng, max_lng).
    """
    angular = radius_km * BOX_MARGIN / EARTH_RADIUS_KM
    lat_delta = math.degrees(angular)
    cos_lat = math.cos(math.radians(latitude))
    if abs(latitude) + lat_delta >= 90.0:
        # Circle reaches a pole: every longitude is close
        lng_delta = 180.0
    else:
        lng_delta = math.degrees(math.asin(math.sin(angular) / cos_lat))
    return latitude - lat_delta, latitude + lat_delta, longitude - lng_delta, longitude + lng_delta


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometers."""
    return great_circle((lat1, lng1), (lat2, lng2)).km


def _within_radius(query, model, latitude: float, longitude: float, radius_km: float) -> list:
    """Apply the bounding box in SQL, then the exact radius in Python."""
    min_lat, max_lat, min_lng, max_lng = bounding_box(latitude, longitude, radius_km)
    query = query.filter(
        model.latitude.isnot(None),
        model.longitude.isnot(None),
        model.latitude.between(min_lat, max_lat),
    )
    # Skip the longitude prefilter when the box wraps the antimeridian
    if min_lng >= -180.0 and max_lng <= 180.0:
        query = query.filter(model.longitude.between(min_lng, max_lng))

    return [
        row for row in query.all()
        if distance_km(latitude, longitude, row.latitude, row.longitude) <= radius_km
    ]


def find_donors_near(
    db: Session,
    latitude: float,
    longitude: float,
    radius_km: float,
    blood_type: str | None = None,
) -> list[Donor]:
    """Active donors within ``radius_km`` of a point, optionally of one blood type."""
    query = db.query(Donor).filter(Donor.is_active == 1)
    if blood_type:
        query = query.filter(Donor.blood_type == blood_type)
    return _within_radius(query, Donor, latitude, longitude, radius_km)


def find_matching_donors(
    db: Session,
    blood_type: str,
    latitude: float,
    longitude: float,
    radius_km: float | None = None,
    now: datetime | None = None,
) -> list[Donor]:
    """Find compatible, available donors near a request.

    Donors are matched when their blood type can give to ``blood_type``,
    their availability (re-derived at ``now``) is "available", and they lie
    within ``radius_km`` (defaults to the nearby-donor radius). No ordering
    is applied.
    """
    if radius_km is None:
        radius_km = get_settings().nearby_donor_radius_km

    donor_types = compatible_donors(blood_type)
    if not donor_types:
        return []

    query = db.query(Donor).filter(
        Donor.is_active == 1,
        Donor.blood_type.in_(sorted(donor_types)),
    )
    nearby = _within_radius(query, Donor, latitude, longitude, radius_km)
    matched = [
        donor for donor in nearby
        if availability_for(donor, now) == AvailabilityStatus.AVAILABLE.value
    ]
    logger.debug(
        f"Matched {len(matched)} of {len(nearby)} nearby donors for {blood_type} "
        f"within {radius_km}km"
    )
    return matched


def find_hospitals_near(db: Session, latitude: float, longitude: float, radius_km: float) -> list[Hospital]:
    """Hospitals within ``radius_km`` of a point."""
    return _within_radius(db.query(Hospital), Hospital, latitude, longitude, radius_km)
