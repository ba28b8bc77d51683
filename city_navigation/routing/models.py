"""Domain models for route planning: transport modes, destinations, route results."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from city_navigation.geo.geometry import Coordinate

# City-average speeds (m/s) used by the fallback estimator
DRIVING_SPEED_MPS = 8.3
WALKING_SPEED_MPS = 1.4
TRANSIT_SPEED_MPS = 5.6


class TransportMode(str, Enum):
    DRIVING = "driving"
    WALKING = "walking"
    TRANSIT = "transit"

    @property
    def average_speed_mps(self) -> float:
        return _AVERAGE_SPEED_MPS[self]


_AVERAGE_SPEED_MPS: dict[TransportMode, float] = {
    TransportMode.DRIVING: DRIVING_SPEED_MPS,
    TransportMode.WALKING: WALKING_SPEED_MPS,
    TransportMode.TRANSIT: TRANSIT_SPEED_MPS,
}


class Destination(BaseModel):
    """A selectable place from the POI catalog. Owned by the caller."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str
    coordinate: Coordinate
    address: str | None = None


class RouteResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    origin: Coordinate
    destination: Coordinate
    mode: TransportMode
    distance_meters: float = Field(ge=0)
    duration_seconds: float = Field(ge=0)
    path: tuple[Coordinate, ...] | None = None
    is_estimated: bool = False

    @property
    def distance_formatted(self) -> str:
        if self.distance_meters < 1000:
            return f"{int(self.distance_meters)} m"
        return f"{self.distance_meters / 1000:.1f} km"

    @property
    def duration_formatted(self) -> str:
        minutes = int(self.duration_seconds / 60)
        if minutes < 60:
            return f"{minutes} min"
        hours, remaining = divmod(minutes, 60)
        if remaining == 0:
            return f"{hours}h"
        return f"{hours}h {remaining}min"

    @property
    def summary(self) -> str:
        return f"{self.distance_formatted} • {self.duration_formatted}"
