"""
Coordinates, haversine distance and bounding boxes.
"""
import math
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

# Earth radius in meters (WGS84 mean radius)
EARTH_RADIUS_M = 6_371_000.0


class EmptyInputError(ValueError):
    """Raised when a geometry function is given no points."""


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

    @field_validator("longitude")
    @classmethod
    def canonical_longitude(cls, v: float, info: ValidationInfo) -> float:
        # Any longitude names the same point at a pole; -180 and 180 are one meridian
        lat = info.data.get("latitude")
        if lat is not None and abs(lat) == 90.0:
            return 0.0
        if v == -180.0:
            return 180.0
        return v

    @classmethod
    def of(cls, latitude: float, longitude: float) -> "Coordinate":
        return cls(latitude=latitude, longitude=longitude)


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @property
    def lat_extent(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def lon_extent(self) -> float:
        return self.max_lon - self.min_lon


def distance(a: Coordinate, b: Coordinate) -> float:
    """
    Return great-circle distance between two coordinates in meters.
    Symmetric, and exactly 0.0 for equal coordinates (poles and the 180th
    meridian have one canonical longitude, so equal points compare equal).
    """
    if a == b:
        return 0.0
    lat1_rad = math.radians(a.latitude)
    lat2_rad = math.radians(b.latitude)
    dlat = math.radians(b.latitude - a.latitude)
    dlng = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlng / 2) ** 2
    # Clamp: rounding can push h a hair past 1.0 for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(h))


def bounding_box(points: Iterable[Coordinate]) -> BoundingBox:
    """Smallest lat/lon box containing every point. Raises EmptyInputError on empty input."""
    pts = list(points)
    if not pts:
        raise EmptyInputError("bounding_box requires at least one coordinate")
    lats = [p.latitude for p in pts]
    lons = [p.longitude for p in pts]
    return BoundingBox(min_lat=min(lats), max_lat=max(lats), min_lon=min(lons), max_lon=max(lons))


def midpoint(box: BoundingBox) -> Coordinate:
    return Coordinate(
        latitude=(box.min_lat + box.max_lat) / 2,
        longitude=(box.min_lon + box.max_lon) / 2,
    )
