"""
Map viewport fitting: frame a set of coordinates with padding, zoom in/out.

Spans are in degrees. Every result is clamped into [min_span, max_span] so the
map never zooms in past street level or out past the configured maximum.
"""
from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from city_navigation.geo.geometry import Coordinate, EmptyInputError, bounding_box, midpoint


class ZoomDirection(str, Enum):
    IN = "in"
    OUT = "out"


class Viewport(BaseModel):
    model_config = ConfigDict(frozen=True)

    center: Coordinate
    latitude_span: float = Field(gt=0)
    longitude_span: float = Field(gt=0)

    def bounds(self) -> tuple[float, float, float, float]:
        """(min_lat, max_lat, min_lon, max_lon) covered by this viewport."""
        half_lat = self.latitude_span / 2
        half_lon = self.longitude_span / 2
        return (
            self.center.latitude - half_lat,
            self.center.latitude + half_lat,
            self.center.longitude - half_lon,
            self.center.longitude + half_lon,
        )

    def contains(self, point: Coordinate, tolerance: float = 1e-9) -> bool:
        min_lat, max_lat, min_lon, max_lon = self.bounds()
        return (
            min_lat - tolerance <= point.latitude <= max_lat + tolerance
            and min_lon - tolerance <= point.longitude <= max_lon + tolerance
        )


def _check_span_limits(min_span: float, max_span: float) -> None:
    if not (0 < min_span <= max_span):
        raise ValueError(f"span limits must satisfy 0 < min_span <= max_span (got {min_span}, {max_span})")


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def fit(
    points: Iterable[Coordinate],
    padding_factor: float,
    min_span: float,
    max_span: float,
) -> Viewport:
    """
    Viewport centred on the bounding box of points, each axis spanning
    extent * padding_factor, clamped to [min_span, max_span].

    A single point (or coincident points) gives min_span on both axes.
    When the padded extent exceeds max_span the frame is cut down to max_span
    and some points may fall outside it.
    """
    pts = list(points)
    if not pts:
        raise EmptyInputError("fit requires at least one coordinate")
    if padding_factor < 1.0:
        raise ValueError(f"padding_factor must be >= 1.0 (got {padding_factor})")
    _check_span_limits(min_span, max_span)

    box = bounding_box(pts)
    return Viewport(
        center=midpoint(box),
        latitude_span=_clamp(box.lat_extent * padding_factor, min_span, max_span),
        longitude_span=_clamp(box.lon_extent * padding_factor, min_span, max_span),
    )


def zoom(
    viewport: Viewport,
    direction: ZoomDirection,
    factor: float,
    min_span: float,
    max_span: float,
) -> Viewport:
    """Divide (IN) or multiply (OUT) both spans by factor, clamped. Centre is kept."""
    if factor <= 1.0:
        raise ValueError(f"zoom factor must be > 1.0 (got {factor})")
    _check_span_limits(min_span, max_span)

    scale = factor if direction == ZoomDirection.OUT else 1.0 / factor
    return Viewport(
        center=viewport.center,
        latitude_span=_clamp(viewport.latitude_span * scale, min_span, max_span),
        longitude_span=_clamp(viewport.longitude_span * scale, min_span, max_span),
    )


def center_on(point: Coordinate, span: float) -> Viewport:
    return Viewport(center=point, latitude_span=span, longitude_span=span)
