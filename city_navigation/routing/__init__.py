from city_navigation.routing.estimator import estimate
from city_navigation.routing.models import Destination, RouteResult, TransportMode
from city_navigation.routing.provider import (
    FailureReason,
    HTTPRouteProvider,
    RouteProvider,
    RouteProviderError,
)

__all__ = [
    "Destination",
    "FailureReason",
    "HTTPRouteProvider",
    "RouteProvider",
    "RouteProviderError",
    "RouteResult",
    "TransportMode",
    "estimate",
]
