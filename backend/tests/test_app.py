"""Tests for application wiring: health, error mapping and lifespan."""
from fastapi.testclient import TestClient

from ytmp3.main import app, validation_error_message


def test_health(api_client):
    response = api_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_malformed_json_is_400(api_client):
    response = api_client.post(
        "/api/info",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid YouTube URL"}


def test_missing_body_on_info_reads_as_missing_url(api_client):
    response = api_client.post("/api/info")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid YouTube URL"}


def test_missing_body_on_convert_reads_as_missing_url(api_client):
    response = api_client.post("/api/convert")
    assert response.status_code == 400
    assert response.json() == {"error": "URL required"}


def test_wrong_url_type_is_400(api_client):
    response = api_client.post("/api/info", json={"url": ["https://youtu.be/x"]})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid YouTube URL"}


def test_wrong_quality_type_is_generic_400(api_client):
    response = api_client.post(
        "/api/convert", json={"url": "https://youtu.be/x", "quality": {"kbps": 128}}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request"}


class TestValidationErrorMessage:
    """Tests for validation_error_message."""

    def test_whole_body_errors_map_to_route_message(self):
        errors = [{"loc": ("body",), "type": "missing"}]
        assert validation_error_message("/api/convert", errors) == "URL required"

    def test_json_decode_errors_map_to_route_message(self):
        errors = [{"loc": ("body", 1), "type": "json_invalid"}]
        assert validation_error_message("/api/info", errors) == "Invalid YouTube URL"

    def test_other_fields_are_generic(self):
        errors = [{"loc": ("body", "quality"), "type": "string_type"}]
        assert validation_error_message("/api/convert", errors) == "Invalid request"

    def test_unknown_route_is_generic(self):
        errors = [{"loc": ("body",), "type": "missing"}]
        assert validation_error_message("/elsewhere", errors) == "Invalid request"


def test_cors_headers(api_client):
    response = api_client.get("/health", headers={"Origin": "http://example.com"})
    assert response.headers["access-control-allow-origin"] == "*"


def test_lifespan_starts_and_stops_reaper(settings):
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        reaper = app.state.reaper
        assert reaper.running
    assert not reaper.running
