import logging
import uuid
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from city_navigation.geo.geometry import Coordinate
from city_navigation.middleware import OptionalAPIKeyMiddleware, RequestLoggingMiddleware, get_valid_api_keys
from city_navigation.monitoring import get_metrics, record_route_estimate
from city_navigation.routing.estimator import estimate
from city_navigation.routing.models import TransportMode
from city_navigation.routing.schemas import RoutePointBody, RouteRequestBody, RouteResponseBody
from settings import get_settings

settings = get_settings()

# Structured logging: include module and level; handlers can add JSON later
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=["100/minute"])

ORIGIN_NAME = "Current location"
DESTINATION_NAME = "Destination"


def _speed_overrides() -> dict[TransportMode, float]:
    return {
        TransportMode.DRIVING: settings.driving_speed_mps,
        TransportMode.WALKING: settings.walking_speed_mps,
        TransportMode.TRANSIT: settings.transit_speed_mps,
    }


app = FastAPI(title=settings.app_name, debug=settings.debug)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    """Return consistent JSON error for unhandled exceptions (500). Skip validation/HTTP errors."""
    from fastapi.exceptions import RequestValidationError
    if isinstance(exc, (HTTPException, RequestValidationError)):
        raise exc
    logger.exception("telemetry unhandled_exception path=%s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again later."},
    )


# Order: last added = outermost. CORS runs first, then Auth, then RequestLogging next to the router.
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    OptionalAPIKeyMiddleware,
    api_key_required=settings.api_key_required,
    api_keys=get_valid_api_keys(settings.api_keys),
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/favicon.ico", include_in_schema=False)
@limiter.exempt
def favicon(request: Request):
    return Response(status_code=204)


@app.get("/health")
@limiter.exempt
def health(request: Request):
    logger.info("telemetry route=health")
    return {"status": "ok"}


@app.get("/metrics")
@limiter.exempt
def metrics(request: Request):
    """Request counts, route estimates by mode, uptime."""
    return get_metrics()


# --- Navigation route (straight-line estimate) ---


@app.post("/api/v1/navigation/route", response_model=RouteResponseBody)
@limiter.limit("60/minute")
def post_navigation_route(request: Request, body: RouteRequestBody):
    """
    Route between two points. This service has no road graph: distance is
    great-circle and duration assumes the mode's configured average speed.
    Coordinates are returned as [[lon, lat], ...].
    """
    origin = Coordinate(latitude=body.origin.lat, longitude=body.origin.lng)
    destination = Coordinate(latitude=body.destination.lat, longitude=body.destination.lng)
    result = estimate(origin, destination, body.mode, speeds=_speed_overrides())
    record_route_estimate(body.mode.value)
    logger.info(
        "telemetry route=navigation_route mode=%s distance_m=%.0f",
        body.mode.value,
        result.distance_meters,
    )
    return RouteResponseBody(
        route_id=str(uuid.uuid4()),
        origin=RoutePointBody(name=ORIGIN_NAME, latitude=origin.latitude, longitude=origin.longitude),
        destination=RoutePointBody(name=DESTINATION_NAME, latitude=destination.latitude, longitude=destination.longitude),
        mode=body.mode,
        distance=result.distance_meters,
        duration=result.duration_seconds,
        coordinates=[
            [origin.longitude, origin.latitude],
            [destination.longitude, destination.latitude],
        ],
        instructions=None,
        created_at=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    )
