from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from bloodbridge.errors import register_exception_handlers


class Payload(BaseModel):
    name: str = Field(..., min_length=1)
    units: int = Field(..., ge=1)


def _app():
    app = FastAPI()
    register_exception_handlers(app)

    @app.post("/items")
    def create_item(payload: Payload):
        return {"ok": True}

    @app.get("/boom")
    def boom():
        raise RuntimeError("database exploded")

    return TestClient(app, raise_server_exceptions=False)


def test_validation_errors_become_field_list():
    response = _app().post("/items", json={"name": "", "units": 0})

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert {e["field"] for e in errors} == {"name", "units"}
    assert all(e["msg"] for e in errors)


def test_unexpected_errors_are_opaque_500(caplog):
    response = _app().get("/boom")

    assert response.status_code == 500
    assert response.json() == {"detail": "Server error"}
    assert "database exploded" not in response.text
    assert "Unhandled error on GET /boom" in caplog.text
