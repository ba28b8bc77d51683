from city_navigation.geo.geometry import (
    BoundingBox,
    Coordinate,
    EmptyInputError,
    bounding_box,
    distance,
    midpoint,
)
from city_navigation.geo.region import Viewport, ZoomDirection, center_on, fit, zoom

__all__ = [
    "BoundingBox",
    "Coordinate",
    "EmptyInputError",
    "Viewport",
    "ZoomDirection",
    "bounding_box",
    "center_on",
    "distance",
    "fit",
    "midpoint",
    "zoom",
]
