"""Pydantic models for the navigation route wire format (POST /api/v1/navigation/route)."""
from pydantic import BaseModel, Field, model_validator

from city_navigation.routing.models import TransportMode


class LatLng(BaseModel):
    lat: float
    lng: float

    @model_validator(mode="after")
    def check_coordinates(self):
        if not (-90 <= self.lat <= 90):
            raise ValueError("lat must be between -90 and 90")
        if not (-180 <= self.lng <= 180):
            raise ValueError("lng must be between -180 and 180")
        return self


class RouteRequestBody(BaseModel):
    origin: LatLng
    destination: LatLng
    mode: TransportMode = TransportMode.WALKING


class RoutePointBody(BaseModel):
    name: str
    address: str | None = None
    latitude: float
    longitude: float


class RouteResponseBody(BaseModel):
    route_id: str
    origin: RoutePointBody
    destination: RoutePointBody
    mode: TransportMode
    distance: float = Field(ge=0)  # meters
    duration: float = Field(ge=0)  # seconds
    # [[lon, lat], ...] as returned by OpenRouteService-style backends
    coordinates: list[list[float]] = []
    # Turn-by-turn instructions pass through untouched; not interpreted here
    instructions: list[dict] | None = None
    created_at: str
