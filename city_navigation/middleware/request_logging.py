"""Request logging middleware: one telemetry line per request plus per-route metrics."""
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from city_navigation.monitoring.metrics import UNMATCHED_PATH, record_request

logger = logging.getLogger(__name__)


def _route_template(request: Request) -> str:
    """Path template of the route that handled the request; anything unrouted shares one bucket."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_PATH


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        record_request(_route_template(request), response.status_code)
        logger.info(
            "telemetry request method=%s path=%s status=%s duration_ms=%.1f",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
