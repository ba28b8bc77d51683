"""
Directions provider contract and the HTTP implementation against the navigation API.
Includes timeouts, retry with exponential backoff, and failure classification.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from city_navigation.geo.geometry import Coordinate
from city_navigation.routing.models import RouteResult, TransportMode
from city_navigation.routing.schemas import RouteResponseBody

logger = logging.getLogger(__name__)

ROUTE_PATH = "/api/v1/navigation/route"
ROUTE_REQUEST_TIMEOUT_SECONDS = 10.0
ROUTE_RETRY_ATTEMPTS = 3
ROUTE_RETRY_BASE_DELAY_SECONDS = 0.5
ROUTE_RETRY_MAX_DELAY_SECONDS = 4.0

# Profile names the navigation API expects for each mode
MODE_PROFILES: dict[TransportMode, str] = {
    TransportMode.DRIVING: "driving",
    TransportMode.WALKING: "walking",
    TransportMode.TRANSIT: "transit",
}


class FailureReason(str, Enum):
    NETWORK = "network"
    NO_ROUTE = "no_route"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class RouteProviderError(Exception):
    """A directions request that did not produce a route."""

    def __init__(self, reason: FailureReason, message: str = ""):
        super().__init__(message or reason.value)
        self.reason = reason


class RouteProvider(Protocol):
    async def request(
        self,
        origin: Coordinate,
        destination: Coordinate,
        mode: TransportMode,
    ) -> RouteResult: ...


def _parse_path(raw: list[list[float]]) -> tuple[Coordinate, ...] | None:
    """Convert [[lon, lat], ...] to coordinates; malformed pairs are skipped."""
    path: list[Coordinate] = []
    for pair in raw:
        if len(pair) != 2:
            continue
        lon, lat = pair
        path.append(Coordinate(latitude=lat, longitude=lon))
    return tuple(path) or None


def _normalize_route_response(
    raw: Any,
    origin: Coordinate,
    destination: Coordinate,
    mode: TransportMode,
) -> RouteResult:
    """Normalize a navigation API response body to a RouteResult for the requested endpoints."""
    if isinstance(raw, dict) and raw.get("code") == "NoRoute":
        raise RouteProviderError(FailureReason.NO_ROUTE, raw.get("message") or "No route found.")
    try:
        body = RouteResponseBody.model_validate(raw)
        path = _parse_path(body.coordinates)
    except ValidationError as e:
        raise RouteProviderError(FailureReason.UNKNOWN, "Malformed route response.") from e
    return RouteResult(
        origin=origin,
        destination=destination,
        mode=mode,
        distance_meters=body.distance,
        duration_seconds=body.duration,
        path=path,
        is_estimated=False,
    )


class HTTPRouteProvider:
    """RouteProvider backed by the navigation API's POST /api/v1/navigation/route."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = ROUTE_REQUEST_TIMEOUT_SECONDS,
        retry_attempts: int = ROUTE_RETRY_ATTEMPTS,
        retry_base_delay: float = ROUTE_RETRY_BASE_DELAY_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not base_url:
            raise ValueError("Route API base URL not set. Set ROUTE_API_BASE_URL in the environment.")
        self._base = base_url.rstrip("/")
        self._timeout = timeout
        self._retry_attempts = max(1, retry_attempts)
        self._retry_base_delay = retry_base_delay
        self._transport = transport
        self._headers = {"Accept": "application/json"}
        if api_key:
            self._headers["X-API-Key"] = api_key

    @classmethod
    def from_settings(cls, settings: Any, transport: httpx.AsyncBaseTransport | None = None) -> "HTTPRouteProvider":
        return cls(
            settings.route_api_base_url,
            api_key=settings.route_api_key or None,
            timeout=settings.route_api_timeout_seconds,
            retry_attempts=settings.route_api_retry_attempts,
            transport=transport,
        )

    def _request_body(self, origin: Coordinate, destination: Coordinate, mode: TransportMode) -> dict[str, Any]:
        return {
            "origin": {"lat": origin.latitude, "lng": origin.longitude},
            "destination": {"lat": destination.latitude, "lng": destination.longitude},
            "mode": MODE_PROFILES[mode],
        }

    async def request(
        self,
        origin: Coordinate,
        destination: Coordinate,
        mode: TransportMode,
    ) -> RouteResult:
        """
        Request a route. Timeouts, transport errors and 5xx responses are retried;
        raises RouteProviderError once retries are exhausted or on a definitive failure.
        """
        url = f"{self._base}{ROUTE_PATH}"
        body = self._request_body(origin, destination, mode)
        last_error: Exception | None = None
        reason = FailureReason.UNKNOWN
        for attempt in range(self._retry_attempts):
            try:
                async with httpx.AsyncClient(
                    timeout=self._timeout,
                    headers=self._headers,
                    transport=self._transport,
                ) as client:
                    resp = await client.post(url, json=body)
                if resp.status_code == 404:
                    raise RouteProviderError(FailureReason.NO_ROUTE, "No route found.")
                resp.raise_for_status()
                data = resp.json()
                result = _normalize_route_response(data, origin, destination, mode)
                logger.info(
                    "telemetry route_fetched mode=%s distance_m=%.0f",
                    mode.value,
                    result.distance_meters,
                    extra={"mode": mode.value, "distance_m": result.distance_meters},
                )
                return result
            except httpx.TimeoutException as e:
                last_error = e
                reason = FailureReason.TIMEOUT
                logger.warning(
                    "telemetry route_timeout attempt=%s mode=%s",
                    attempt + 1,
                    mode.value,
                    extra={"attempt": attempt + 1, "mode": mode.value},
                )
            except httpx.HTTPStatusError as e:
                if e.response.status_code < 500:
                    raise RouteProviderError(
                        FailureReason.UNKNOWN,
                        f"Route API rejected the request ({e.response.status_code}).",
                    ) from e
                last_error = e
                reason = FailureReason.NETWORK
                logger.warning(
                    "telemetry route_api_error attempt=%s status=%s",
                    attempt + 1,
                    e.response.status_code,
                    extra={"attempt": attempt + 1, "status": e.response.status_code},
                )
            except httpx.HTTPError as e:
                last_error = e
                reason = FailureReason.NETWORK
                logger.warning(
                    "telemetry route_api_error attempt=%s error=%s",
                    attempt + 1,
                    str(e),
                    extra={"attempt": attempt + 1, "error": str(e)},
                )
            except ValueError as e:
                # Body was not JSON
                raise RouteProviderError(FailureReason.UNKNOWN, "Route API returned a non-JSON body.") from e
            if attempt < self._retry_attempts - 1:
                delay = min(
                    self._retry_base_delay * (2**attempt),
                    ROUTE_RETRY_MAX_DELAY_SECONDS,
                )
                await asyncio.sleep(delay)
        msg = "Route API unavailable (timeout or error after retries)."
        if last_error:
            raise RouteProviderError(reason, msg) from last_error
        raise RouteProviderError(reason, msg)
