"""
Straight-line route estimate used when the directions provider is unavailable.
Distance is great-circle; duration assumes the mode's city-average speed.
"""
from collections.abc import Mapping

from city_navigation.geo.geometry import Coordinate, distance
from city_navigation.routing.models import RouteResult, TransportMode


def estimate(
    origin: Coordinate,
    destination: Coordinate,
    mode: TransportMode,
    speeds: Mapping[TransportMode, float] | None = None,
) -> RouteResult:
    """
    Return an estimated RouteResult (is_estimated=True, no path).
    speeds overrides the per-mode average speed (m/s) where given; a non-positive
    override is a configuration error and raises ValueError.
    """
    speed = mode.average_speed_mps
    if speeds and mode in speeds:
        speed = speeds[mode]
    if speed <= 0:
        raise ValueError(f"speed for {mode.value} must be > 0 m/s (got {speed})")
    distance_m = distance(origin, destination)
    return RouteResult(
        origin=origin,
        destination=destination,
        mode=mode,
        distance_meters=distance_m,
        duration_seconds=distance_m / speed,
        path=None,
        is_estimated=True,
    )
