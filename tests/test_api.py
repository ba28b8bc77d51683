"""Tests for the navigation API: route endpoint, health/metrics, auth middleware, provider round trip."""
import asyncio

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import main
from city_navigation.geo.geometry import Coordinate, distance
from city_navigation.middleware import OptionalAPIKeyMiddleware, get_valid_api_keys
from city_navigation.middleware.auth import extract_api_key
from city_navigation.monitoring.metrics import UNMATCHED_PATH, get_metrics, record_request
from city_navigation.planning.controller import RoutePlanningController
from city_navigation.planning.state import Ready
from city_navigation.routing.models import TransportMode
from city_navigation.routing.provider import HTTPRouteProvider

ROUTE_URL = "/api/v1/navigation/route"


@pytest.fixture
def client():
    return TestClient(main.app)


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_post_route_returns_straight_line_estimate(client):
    r = client.post(
        ROUTE_URL,
        json={
            "origin": {"lat": -22.9035, "lng": -43.1180},
            "destination": {"lat": -22.9023, "lng": -43.1098},
            "mode": "walking",
        },
    )
    assert r.status_code == 200
    data = r.json()
    expected = distance(Coordinate.of(-22.9035, -43.1180), Coordinate.of(-22.9023, -43.1098))
    assert data["distance"] == pytest.approx(expected)
    assert data["duration"] == pytest.approx(expected / 1.4)
    assert data["mode"] == "walking"
    # [lon, lat] order
    assert data["coordinates"] == [[-43.1180, -22.9035], [-43.1098, -22.9023]]
    assert data["origin"]["latitude"] == -22.9035
    assert data["destination"]["longitude"] == -43.1098
    assert data["route_id"]
    assert data["created_at"].endswith("Z")


def test_post_route_defaults_to_walking(client):
    r = client.post(ROUTE_URL, json={"origin": {"lat": 0, "lng": 0}, "destination": {"lat": 0, "lng": 0.01}})
    assert r.status_code == 200
    assert r.json()["mode"] == "walking"


def test_post_route_rejects_out_of_range_coordinates(client):
    r = client.post(
        ROUTE_URL,
        json={"origin": {"lat": 95, "lng": 0}, "destination": {"lat": 0, "lng": 0}, "mode": "driving"},
    )
    assert r.status_code == 422


def test_post_route_rejects_unknown_mode(client):
    r = client.post(
        ROUTE_URL,
        json={"origin": {"lat": 0, "lng": 0}, "destination": {"lat": 0, "lng": 1}, "mode": "teleport"},
    )
    assert r.status_code == 422


def test_metrics_count_route_estimates(client):
    before = get_metrics()["route_estimates_by_mode"].get("transit", 0)
    client.post(
        ROUTE_URL,
        json={"origin": {"lat": 0, "lng": 0}, "destination": {"lat": 0, "lng": 1}, "mode": "transit"},
    )
    data = client.get("/metrics").json()
    assert data["route_estimates_by_mode"]["transit"] == before + 1
    assert data["requests_by_path"][ROUTE_URL] >= 1
    assert data["requests_total"] >= 1


def test_unrouted_paths_share_one_metrics_bucket(client):
    before = get_metrics()
    for i in range(50):
        assert client.get(f"/scan/{i}").status_code == 404
    after = get_metrics()
    assert not any(path.startswith("/scan/") for path in after["requests_by_path"])
    assert len(after["requests_by_path"]) <= len(before["requests_by_path"]) + 1
    assert after["requests_by_path"][UNMATCHED_PATH] == before["requests_by_path"].get(UNMATCHED_PATH, 0) + 50


def test_record_request_buckets():
    before = get_metrics()
    record_request("/x", 503)
    record_request("/x", 404)
    after = get_metrics()
    assert after["requests_5xx"] == before["requests_5xx"] + 1
    assert after["requests_4xx"] == before["requests_4xx"] + 1
    assert after["requests_by_path"]["/x"] == before["requests_by_path"].get("/x", 0) + 2


# --- API key middleware ---


def _protected_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(OptionalAPIKeyMiddleware, api_key_required=True, api_keys=get_valid_api_keys("k1, k2 ,"))

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/private")
    def private():
        return {"ok": True}

    return app


def test_get_valid_api_keys():
    assert get_valid_api_keys("k1, k2 ,") == {"k1", "k2"}
    assert get_valid_api_keys("") == set()


def test_extract_api_key():
    assert extract_api_key({"X-API-Key": " abc "}) == "abc"
    assert extract_api_key({"Authorization": "Bearer xyz"}) == "xyz"
    assert extract_api_key({"Authorization": "Basic xyz"}) is None


def test_auth_middleware():
    c = TestClient(_protected_app())
    assert c.get("/health").status_code == 200
    assert c.get("/private").status_code == 401
    assert c.get("/private", headers={"X-API-Key": "wrong"}).status_code == 401
    assert c.get("/private", headers={"X-API-Key": "k2"}).status_code == 200
    assert c.get("/private", headers={"Authorization": "Bearer k1"}).status_code == 200


# --- HTTP provider against the app ---


def _asgi_provider() -> HTTPRouteProvider:
    return HTTPRouteProvider("http://testserver", transport=httpx.ASGITransport(app=main.app), retry_base_delay=0.0)


def test_http_provider_round_trip_against_app():
    origin = Coordinate.of(-22.9035, -43.1180)
    destination = Coordinate.of(-22.9023, -43.1098)
    result = asyncio.run(_asgi_provider().request(origin, destination, TransportMode.DRIVING))
    assert result.is_estimated is False
    assert result.mode == TransportMode.DRIVING
    assert result.path == (origin, destination)
    assert result.duration_seconds == pytest.approx(result.distance_meters / 8.3)


def test_controller_with_http_provider():
    async def scenario():
        controller = RoutePlanningController(_asgi_provider())
        controller.set_origin(Coordinate.of(-22.9035, -43.1180))
        controller.set_destination_coordinate(Coordinate.of(-22.9023, -43.1098))
        await controller.wait_until_settled()
        assert isinstance(controller.state, Ready)
        assert controller.state.result.path is not None
        assert controller.state.result.is_estimated is False

    asyncio.run(scenario())
