from city_navigation.planning.controller import RoutePlanningController, UnknownDestinationError
from city_navigation.planning.location import LocationSource, StaticLocationSource
from city_navigation.planning.state import (
    Calculating,
    Failed,
    Idle,
    PlanningSnapshot,
    PlanningState,
    Ready,
    SelectionState,
)

__all__ = [
    "Calculating",
    "Failed",
    "Idle",
    "LocationSource",
    "PlanningSnapshot",
    "PlanningState",
    "Ready",
    "RoutePlanningController",
    "SelectionState",
    "StaticLocationSource",
    "UnknownDestinationError",
]
