from types import SimpleNamespace

import pytest
from geopy.exc import GeocoderServiceError

from bloodbridge.models.donor import Donor
from bloodbridge.services.geocoding import (
    GeocodeResult,
    Geocoder,
    GeocodingError,
    apply_location,
    full_address,
    locate,
)


def test_geocode_maps_provider_location():
    location = SimpleNamespace(latitude="37.8044", longitude="-122.2712", address="Oakland, CA")
    geocoder = Geocoder(lambda address: location)

    assert geocoder.geocode("Oakland") == GeocodeResult(37.8044, -122.2712, "Oakland, CA")


def test_geocode_returns_none_without_match():
    assert Geocoder(lambda address: None).geocode("Atlantis") is None


def test_provider_errors_become_geocoding_errors():
    def failing(address):
        raise GeocoderServiceError("quota exceeded")

    with pytest.raises(GeocodingError, match="quota exceeded"):
        Geocoder(failing).geocode("Oakland")


def test_locate_swallows_provider_errors(caplog):
    def failing(address):
        raise GeocoderServiceError("down")

    assert locate(Geocoder(failing), "1 Main St") is None
    assert "Geocoding error" in caplog.text


def test_apply_location_copies_point_and_ignores_none():
    donor = Donor()
    apply_location(donor, None)
    assert donor.latitude is None

    apply_location(donor, GeocodeResult(1.5, 2.5, "Somewhere"))
    assert (donor.latitude, donor.longitude, donor.formatted_address) == (1.5, 2.5, "Somewhere")


def test_full_address_format():
    assert full_address("1 Main St", "Oakland", "CA", "94612") == "1 Main St, Oakland, CA 94612"
