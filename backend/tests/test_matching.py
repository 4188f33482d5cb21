from datetime import datetime, timedelta

from geopy.distance import great_circle

from bloodbridge.models.donor import Donor
from bloodbridge.models.hospital import Hospital
from bloodbridge.models.user import User
from bloodbridge.services.matching import (
    bounding_box,
    distance_km,
    find_donors_near,
    find_hospitals_near,
    find_matching_donors,
)

OAKLAND = (37.8044, -122.2712)
SAN_FRANCISCO = (37.7749, -122.4194)  # ~13 km from Oakland
SAN_JOSE = (37.3382, -121.8863)  # ~60 km from Oakland


def _point_at(origin, km, bearing):
    destination = great_circle(kilometers=km).destination(origin, bearing)
    return destination.latitude, destination.longitude


def _add_donor(db, name, blood_type, point, **overrides):
    user = User(name=name, email=f"{name}@example.com", role="donor")
    db.add(user)
    db.flush()
    values = dict(
        user_id=user.id,
        blood_type=blood_type,
        age=30,
        address="1 Main St",
        city="Somewhere",
        state="CA",
        zipcode="94000",
        latitude=point[0] if point else None,
        longitude=point[1] if point else None,
        is_available=1,
        emergency_available=0,
        is_active=1,
    )
    values.update(overrides)
    donor = Donor(**values)
    db.add(donor)
    db.commit()
    return donor


def test_matches_compatible_nearby_available_donors(db):
    nearby = _add_donor(db, "near", "O-", SAN_FRANCISCO)
    far = _add_donor(db, "far", "O-", SAN_JOSE)

    matched = find_matching_donors(db, "A+", *OAKLAND)

    assert [d.id for d in matched] == [nearby.id]
    assert far.id not in {d.id for d in matched}


def test_incompatible_donors_excluded_regardless_of_proximity(db):
    _add_donor(db, "incompatible", "AB+", OAKLAND)
    compatible = _add_donor(db, "compatible", "O+", OAKLAND)

    matched = find_matching_donors(db, "O+", *OAKLAND)

    assert [d.id for d in matched] == [compatible.id]


def test_donors_in_cooldown_or_opted_out_are_excluded(db):
    recent = (datetime.utcnow() - timedelta(days=5)).isoformat()
    _add_donor(db, "cooling", "A+", OAKLAND, last_donation=recent)
    _add_donor(db, "optedout", "A+", OAKLAND, is_available=0)
    _add_donor(db, "inactive", "A+", OAKLAND, is_active=0)
    ready = _add_donor(db, "ready", "A+", OAKLAND)

    matched = find_matching_donors(db, "A+", *OAKLAND)

    assert [d.id for d in matched] == [ready.id]


def test_persisted_cooldown_is_ignored_once_window_passed(db):
    old = (datetime.utcnow() - timedelta(days=120)).isoformat()
    donor = _add_donor(db, "stale", "B-", OAKLAND, last_donation=old, availability_status="cooldown")

    matched = find_matching_donors(db, "B+", *OAKLAND)

    assert [d.id for d in matched] == [donor.id]


def test_donors_without_location_never_match(db):
    _add_donor(db, "nowhere", "O-", None)
    assert find_matching_donors(db, "AB+", *OAKLAND) == []


def test_unknown_blood_type_matches_nobody(db):
    _add_donor(db, "someone", "O-", OAKLAND)
    assert find_matching_donors(db, "Z+", *OAKLAND) == []


def test_custom_radius(db):
    far = _add_donor(db, "far", "O-", SAN_JOSE)
    assert find_matching_donors(db, "O-", *OAKLAND, radius_km=30) == []
    assert [d.id for d in find_matching_donors(db, "O-", *OAKLAND, radius_km=80)] == [far.id]


def test_find_donors_near_filters_blood_type(db):
    a_pos = _add_donor(db, "apos", "A+", SAN_FRANCISCO)
    _add_donor(db, "bpos", "B+", SAN_FRANCISCO)

    assert [d.id for d in find_donors_near(db, *OAKLAND, 30, blood_type="A+")] == [a_pos.id]
    assert len(find_donors_near(db, *OAKLAND, 30)) == 2


def test_find_hospitals_near(db):
    hospital = Hospital(
        slug="sf-general",
        name="SF General",
        address="1001 Potrero Ave",
        city="San Francisco",
        state="CA",
        zipcode="94110",
        phone="4155550000",
        email="info@sfgeneral.example.org",
        latitude=SAN_FRANCISCO[0],
        longitude=SAN_FRANCISCO[1],
    )
    db.add(hospital)
    db.commit()

    assert [h.slug for h in find_hospitals_near(db, *OAKLAND, 20)] == ["sf-general"]
    assert find_hospitals_near(db, *OAKLAND, 5) == []


def test_distance_and_bounding_box():
    assert 10 < distance_km(*OAKLAND, *SAN_FRANCISCO) < 16
    min_lat, max_lat, min_lng, max_lng = bounding_box(*OAKLAND, 30)
    assert min_lat < SAN_FRANCISCO[0] < max_lat
    assert min_lng < SAN_FRANCISCO[1] < max_lng
    assert not (min_lat < SAN_JOSE[0] < max_lat)


def test_donors_near_the_radius_edge_still_match(db):
    edge_north = _add_donor(db, "edgenorth", "O-", _point_at(OAKLAND, 29.98, 0))
    edge_east = _add_donor(db, "edgeeast", "O-", _point_at(OAKLAND, 29.98, 90))
    _add_donor(db, "justoutside", "O-", _point_at(OAKLAND, 30.05, 180))

    matched = find_matching_donors(db, "A+", *OAKLAND)

    assert sorted(d.id for d in matched) == sorted([edge_north.id, edge_east.id])


def test_bounding_box_contains_the_whole_circle():
    for bearing in range(0, 360, 15):
        point = _point_at(OAKLAND, 30, bearing)
        min_lat, max_lat, min_lng, max_lng = bounding_box(*OAKLAND, 30)
        assert min_lat <= point[0] <= max_lat
        assert min_lng <= point[1] <= max_lng


def test_bounding_box_near_pole_spans_all_longitudes():
    _, _, min_lng, max_lng = bounding_box(89.9, 10.0, 30)
    assert max_lng - min_lng == 360.0
