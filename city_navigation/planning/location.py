"""Location sources: anything that can produce the user's current coordinate once."""
from typing import Protocol

from city_navigation.geo.geometry import Coordinate


class LocationSource(Protocol):
    def current_location(self) -> Coordinate | None: ...


class StaticLocationSource:
    """Fixed location (or none), e.g. a cached last-known fix."""

    def __init__(self, coordinate: Coordinate | None = None):
        self._coordinate = coordinate

    def current_location(self) -> Coordinate | None:
        return self._coordinate
