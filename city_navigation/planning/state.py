"""Selection and planning state published by the route planning controller."""
from typing import Literal

from pydantic import BaseModel, ConfigDict

from city_navigation.geo.geometry import Coordinate
from city_navigation.geo.region import Viewport
from city_navigation.routing.models import Destination, RouteResult, TransportMode
from city_navigation.routing.provider import FailureReason


class SelectionState(BaseModel):
    """
    What the user has picked. destination is the catalog entry the destination
    slot is tied to (None for a bare coordinate); destination_coordinate is
    what gets routed to.
    """

    model_config = ConfigDict(frozen=True)

    origin: Coordinate | None = None
    destination: Destination | None = None
    destination_coordinate: Coordinate | None = None
    mode: TransportMode = TransportMode.WALKING
    request_version: int = 0
    candidates: tuple[Destination, ...] = ()

    @property
    def has_endpoints(self) -> bool:
        return self.origin is not None and self.destination_coordinate is not None


# Planning states (discriminated by `kind`)
class Idle(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["idle"] = "idle"


class Calculating(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["calculating"] = "calculating"
    version: int


class Ready(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["ready"] = "ready"
    result: RouteResult


class Failed(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failed"] = "failed"
    reason: FailureReason


PlanningState = Idle | Calculating | Ready | Failed


class PlanningSnapshot(BaseModel):
    """Read-only view handed to observers."""

    model_config = ConfigDict(frozen=True)

    selection: SelectionState
    state: PlanningState
    viewport: Viewport
