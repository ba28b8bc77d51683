"""Optional API key auth for the navigation API: when API_KEY_REQUIRED=true, require X-API-Key or Authorization: Bearer <key>."""
import logging
import secrets
from collections.abc import Mapping

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

AUTH_EXEMPT_PATHS = {"/health", "/metrics"}


def get_valid_api_keys(api_keys_str: str) -> set[str]:
    return {k.strip() for k in api_keys_str.split(",") if k.strip()}


def extract_api_key(headers: Mapping[str, str]) -> str | None:
    key = headers.get("X-API-Key") or headers.get("x-api-key")
    if key:
        return key.strip()
    auth = headers.get("Authorization") or headers.get("authorization")
    if auth and auth.startswith("Bearer "):
        return auth[7:].strip()
    return None


def is_valid_key(key: str | None, valid_keys: set[str]) -> bool:
    if not key:
        return False
    return any(secrets.compare_digest(key, valid) for valid in valid_keys)


class OptionalAPIKeyMiddleware(BaseHTTPMiddleware):
    """When api_key_required is True, reject route requests without a valid key (health/metrics stay open)."""

    def __init__(self, app, api_key_required: bool, api_keys: set[str]):
        super().__init__(app)
        self.api_key_required = api_key_required
        self.valid_keys = api_keys

    async def dispatch(self, request: Request, call_next):
        if not self.api_key_required or request.url.path in AUTH_EXEMPT_PATHS:
            return await call_next(request)
        if not is_valid_key(extract_api_key(request.headers), self.valid_keys):
            logger.warning("telemetry auth_failed method=%s path=%s", request.method, request.url.path)
            return JSONResponse(
                status_code=401,
                content={"detail": "Invalid or missing API key. Provide X-API-Key or Authorization: Bearer <key>."},
            )
        return await call_next(request)
