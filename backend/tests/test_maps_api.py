from conftest import GeocodeResult, auth_headers

from bloodbridge.config import get_settings
from bloodbridge.models.hospital import Hospital
from bloodbridge.services.hospital_loader import load_hospital_configs

OAKLAND = (37.8044, -122.2712)


def _hospital_payload(**overrides):
    payload = {
        "name": "Bay Regional",
        "address": "99 Lakeshore Ave",
        "city": "Oakland",
        "state": "CA",
        "zipcode": "94610",
        "phone": "5105550199",
        "email": "bank@bayregional.example.org",
        "website": "https://bayregional.example.org",
    }
    payload.update(overrides)
    return payload


def test_geocode_endpoint(client, geocoder, make_user):
    user = make_user("Mapper")
    geocoder.results["1200 Harbor Blvd, Oakland"] = GeocodeResult(37.8044, -122.2712, "1200 Harbor Blvd, Oakland, CA")

    found = client.get("/api/maps/geocode?address=1200 Harbor Blvd, Oakland", headers=auth_headers(user))
    assert found.status_code == 200
    assert found.json() == {
        "latitude": 37.8044,
        "longitude": -122.2712,
        "formatted_address": "1200 Harbor Blvd, Oakland, CA",
    }

    assert client.get("/api/maps/geocode", headers=auth_headers(user)).status_code == 400
    assert client.get("/api/maps/geocode?address=Nowhere", headers=auth_headers(user)).status_code == 404


def test_hospitals_near_uses_radius(client, db, make_user):
    user = make_user("Mapper")
    load_hospital_configs(db, get_settings().hospitals_dir)

    default_radius = client.get(
        f"/api/maps/hospitals?lat={OAKLAND[0]}&lng={OAKLAND[1]}",
        headers=auth_headers(user),
    ).json()
    assert [h["slug"] for h in default_radius] == ["city-general"]
    assert default_radius[0]["verified"] is True

    wider = client.get(
        f"/api/maps/hospitals?lat={OAKLAND[0]}&lng={OAKLAND[1]}&radius=25",
        headers=auth_headers(user),
    ).json()
    assert sorted(h["slug"] for h in wider) == ["city-general", "st-marys-medical"]


def test_hospitals_near_requires_coordinates(client, make_user):
    user = make_user("Mapper")
    response = client.get("/api/maps/hospitals?lat=37.8", headers=auth_headers(user))
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "lng"


def test_add_hospital_is_admin_only(client, geocoder, make_user):
    user = make_user("Regular")
    response = client.post("/api/maps/hospitals", json=_hospital_payload(), headers=auth_headers(user))
    assert response.status_code == 401
    assert geocoder.calls == []


def test_admin_adds_geocoded_hospital(client, db, geocoder, make_user):
    admin = make_user("Admin", role="admin")
    geocoder.results["99 Lakeshore Ave, Oakland, CA 94610"] = GeocodeResult(37.8098, -122.2474, "99 Lakeshore Ave")

    response = client.post("/api/maps/hospitals", json=_hospital_payload(), headers=auth_headers(admin))
    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "bay-regional"
    assert data["latitude"] == 37.8098

    again = client.post("/api/maps/hospitals", json=_hospital_payload(), headers=auth_headers(admin))
    assert again.status_code == 201
    assert again.json()["slug"].startswith("bay-regional-")

    db.expire_all()
    assert db.query(Hospital).count() == 2


def test_add_hospital_with_unresolvable_address_is_400(client, make_user):
    admin = make_user("Admin", role="admin")
    response = client.post("/api/maps/hospitals", json=_hospital_payload(), headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid address"


def test_add_hospital_validates_contact_fields(client, make_user):
    admin = make_user("Admin", role="admin")
    response = client.post(
        "/api/maps/hospitals",
        json=_hospital_payload(phone="12", email="not-an-email"),
        headers=auth_headers(admin),
    )
    assert response.status_code == 400
    assert {e["field"] for e in response.json()["errors"]} == {"phone", "email"}
