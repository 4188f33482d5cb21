"""Address geocoding via geopy."""
import logging
from dataclasses import dataclass

from geopy.exc import GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import get_geocoder_for_service

from bloodbridge.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    """Container describing an address lookup outcome."""

    latitude: float
    longitude: float
    formatted_address: str | None = None


class GeocodingError(RuntimeError):
    """Raised when the geocoding provider cannot be reached or errors."""


class Geocoder:
    """Thin wrapper around a rate-limited geopy geocoder."""

    def __init__(self, geocode_fn):
        self._geocode = geocode_fn

    def geocode(self, address: str) -> GeocodeResult | None:
        """Resolve an address; ``None`` when the provider has no match."""
        try:
            location = self._geocode(address)
        except GeopyError as exc:
            raise GeocodingError(str(exc)) from exc

        if not location:
            return None

        return GeocodeResult(
            latitude=float(location.latitude),
            longitude=float(location.longitude),
            formatted_address=location.address,
        )


def build_geocoder(settings: Settings) -> Geocoder:
    """Create the geocoder client configured for this process."""
    geocoder_cls = get_geocoder_for_service(settings.geocoder_provider)
    options = {"user_agent": settings.geocoder_user_agent, "timeout": settings.geocoder_timeout}
    if settings.geocoder_api_key:
        options["api_key"] = settings.geocoder_api_key

    geolocator = geocoder_cls(**options)
    rate_limited = RateLimiter(
        geolocator.geocode,
        min_delay_seconds=settings.geocoder_min_delay_seconds,
        swallow_exceptions=False,
    )
    logger.info(f"Geocoder ready: {settings.geocoder_provider}")
    return Geocoder(rate_limited)


def full_address(address: str, city: str, state: str, zipcode: str) -> str:
    return f"{address}, {city}, {state} {zipcode}"


def locate(geocoder: Geocoder, address: str) -> GeocodeResult | None:
    """Geocode an address, logging and swallowing provider failures.

    Callers persist the entity either way; a failed lookup just leaves the
    location empty.
    """
    try:
        result = geocoder.geocode(address)
    except GeocodingError as e:
        logger.error(f"Geocoding error for '{address}': {e}")
        return None

    if result is None:
        logger.info(f"No geocoding result for '{address}'")
    return result


def apply_location(entity, result: GeocodeResult | None) -> None:
    """Copy a geocode result onto a model with latitude/longitude columns."""
    if result is None:
        return
    entity.latitude = result.latitude
    entity.longitude = result.longitude
    entity.formatted_address = result.formatted_address
