import pytest
from flask import Flask
from pydantic import BaseModel, Field

from app.domain.exceptions import ConflictError, ExternalServiceError, NotFoundError
from app.utils.http import error_response, parse_body, safe_route, success_response


class _Body(BaseModel):
    name: str
    area: float = Field(gt=0)


@pytest.fixture()
def flask_app():
    return Flask(__name__)


def test_success_envelope(flask_app):
    with flask_app.app_context():
        response = success_response({"id": "zone_1"}, 201, message="created")

    assert response.status_code == 201
    assert response.get_json() == {"ok": True, "data": {"id": "zone_1"}, "error": None, "message": "created"}


def test_error_envelope(flask_app):
    with flask_app.app_context():
        response = error_response("Zone not found", 404, details={"zone_id": "zone_9"})

    body = response.get_json()
    assert response.status_code == 404
    assert body["ok"] is False
    assert body["data"] is None
    assert body["error"]["message"] == "Zone not found"
    assert body["error"]["details"] == {"zone_id": "zone_9"}
    assert "timestamp" in body["error"]


def test_parse_body_validates():
    assert parse_body(_Body, {"name": "North", "area": 4}).area == 4.0
    with pytest.raises(Exception) as excinfo:
        parse_body(_Body, None)
    assert excinfo.typename == "ValidationError"


@pytest.mark.parametrize(
    "exc, status, message",
    [
        (NotFoundError("Zone zone_9 not found"), 404, "Zone zone_9 not found"),
        (ConflictError("Zone is already irrigating"), 409, "Zone is already irrigating"),
        (ExternalServiceError("weather down"), 502, "Upstream service unavailable"),
        (KeyError("boom"), 500, "An internal error occurred"),
    ],
)
def test_safe_route_maps_errors(flask_app, exc, status, message):
    @safe_route("Failed")
    def handler():
        raise exc

    with flask_app.app_context():
        response = handler()

    assert response.status_code == status
    assert response.get_json()["error"]["message"] == message


def test_safe_route_reports_validation_details(flask_app):
    @safe_route("Failed to create zone")
    def handler():
        return success_response(parse_body(_Body, {"area": -1}).model_dump())

    with flask_app.app_context():
        response = handler()

    error = response.get_json()["error"]
    assert response.status_code == 400
    assert error["message"] == "Invalid request"
    assert {tuple(d["loc"]) for d in error["details"]} == {("name",), ("area",)}


def test_safe_route_uses_configured_status_for_unexpected_errors(flask_app):
    @safe_route("Forecast failed", error_status=502)
    def handler():
        raise RuntimeError("socket reset")

    with flask_app.app_context():
        assert handler().status_code == 502
