import os
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite:///./data/bloodbridge.db")
os.environ.setdefault("SECRET_KEY", "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef")

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from bloodbridge.api import deps  # noqa: E402
from bloodbridge.api.donors import router as donors_router  # noqa: E402
from bloodbridge.api.maps import router as maps_router  # noqa: E402
from bloodbridge.api.notifications import router as notifications_router  # noqa: E402
from bloodbridge.api.requests import router as requests_router  # noqa: E402
from bloodbridge.database import Base  # noqa: E402
from bloodbridge.errors import register_exception_handlers  # noqa: E402
from bloodbridge.models.user import User  # noqa: E402
from bloodbridge.security import create_access_token  # noqa: E402
from bloodbridge.services.geocoding import GeocodeResult, GeocodingError  # noqa: E402


class FakeGeocoder:
    """Geocoder stand-in answering from a fixed address table."""

    def __init__(self, results: dict | None = None, fail: bool = False):
        self.results = results or {}
        self.fail = fail
        self.calls: list[str] = []

    def geocode(self, address: str):
        self.calls.append(address)
        if self.fail:
            raise GeocodingError("provider unavailable")
        return self.results.get(address)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def client(session_factory, geocoder):
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(requests_router, prefix="/api")
    app.include_router(donors_router, prefix="/api")
    app.include_router(notifications_router, prefix="/api")
    app.include_router(maps_router, prefix="/api")
    app.state.geocoder = geocoder

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[deps.get_db] = override_get_db
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def make_user(db):
    def _make_user(name: str, role: str = "user") -> User:
        user = User(name=name, email=f"{name.lower()}@example.com", role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}


__all__ = ["FakeGeocoder", "GeocodeResult", "auth_headers"]
