"""
Route planning controller: owns the user's selection, requests routes, fits the map.

Confined to one asyncio event loop. Mutations are plain methods; each directions
request runs as a task and only applies its result if the selection has not
changed since it was issued (request_version still matches). Superseded tasks
are left to finish and their results are dropped.
"""
import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from city_navigation.geo.geometry import Coordinate
from city_navigation.geo.region import Viewport, ZoomDirection, center_on, fit, zoom
from city_navigation.planning.location import LocationSource
from city_navigation.planning.state import (
    Calculating,
    Failed,
    Idle,
    PlanningSnapshot,
    PlanningState,
    Ready,
    SelectionState,
)
from city_navigation.routing.estimator import estimate
from city_navigation.routing.models import Destination, RouteResult, TransportMode
from city_navigation.routing.provider import FailureReason, RouteProvider, RouteProviderError

logger = logging.getLogger(__name__)

ROUTE_PADDING = 1.3
MIN_SPAN_DEG = 0.01
MAX_SPAN_DEG = 60.0
ZOOM_FACTOR = 2.0
FOCUS_SPAN_DEG = 0.01
# Map opens on São Paulo until a location or selection arrives
DEFAULT_VIEWPORT = Viewport(
    center=Coordinate(latitude=-23.5505, longitude=-46.6333),
    latitude_span=0.1,
    longitude_span=0.1,
)

Observer = Callable[[PlanningSnapshot], None]


class UnknownDestinationError(LookupError):
    """select_candidate was given an id that is not in the candidate list."""


class RoutePlanningController:
    def __init__(
        self,
        provider: RouteProvider,
        *,
        padding: float = ROUTE_PADDING,
        min_span: float = MIN_SPAN_DEG,
        max_span: float = MAX_SPAN_DEG,
        zoom_factor: float = ZOOM_FACTOR,
        focus_span: float = FOCUS_SPAN_DEG,
        fallback_enabled: bool = True,
        speeds: Mapping[TransportMode, float] | None = None,
        initial_viewport: Viewport = DEFAULT_VIEWPORT,
        mode: TransportMode = TransportMode.WALKING,
    ):
        if not (0 < min_span <= max_span):
            raise ValueError(f"span limits must satisfy 0 < min_span <= max_span (got {min_span}, {max_span})")
        if padding < 1.0:
            raise ValueError(f"padding must be >= 1.0 (got {padding})")
        if zoom_factor <= 1.0:
            raise ValueError(f"zoom_factor must be > 1.0 (got {zoom_factor})")
        if not (min_span <= focus_span <= max_span):
            raise ValueError(f"focus_span must lie within [min_span, max_span] (got {focus_span})")
        for m, speed in (speeds or {}).items():
            if speed <= 0:
                raise ValueError(f"speed for {m.value} must be > 0 m/s (got {speed})")
        self._provider = provider
        self._padding = padding
        self._min_span = min_span
        self._max_span = max_span
        self._zoom_factor = zoom_factor
        self._focus_span = focus_span
        self._fallback_enabled = fallback_enabled
        self._speeds = dict(speeds) if speeds else None
        self._selection = SelectionState(mode=mode)
        self._state: PlanningState = Idle()
        self._viewport = initial_viewport
        self._observers: list[Observer] = []
        self._tasks: set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, provider: RouteProvider, settings: Any) -> "RoutePlanningController":
        return cls(
            provider,
            padding=settings.route_padding,
            min_span=settings.min_span,
            max_span=settings.max_span,
            zoom_factor=settings.zoom_factor,
            focus_span=settings.focus_span,
            fallback_enabled=settings.fallback_enabled,
            speeds={
                TransportMode.DRIVING: settings.driving_speed_mps,
                TransportMode.WALKING: settings.walking_speed_mps,
                TransportMode.TRANSIT: settings.transit_speed_mps,
            },
        )

    # --- Read-only views ---

    @property
    def selection(self) -> SelectionState:
        return self._selection

    @property
    def state(self) -> PlanningState:
        return self._state

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    def snapshot(self) -> PlanningSnapshot:
        return PlanningSnapshot(selection=self._selection, state=self._state, viewport=self._viewport)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Call observer with a snapshot after every change. Returns an unsubscribe function."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # --- Selection mutations ---

    def set_origin(self, coordinate: Coordinate) -> None:
        self._mutate(origin=coordinate)

    def set_destination(self, destination: Destination) -> None:
        self._mutate(destination=destination, destination_coordinate=destination.coordinate)

    def set_destination_coordinate(self, coordinate: Coordinate) -> None:
        """Destination picked on the map rather than from the catalog."""
        self._mutate(destination=None, destination_coordinate=coordinate)

    def set_mode(self, mode: TransportMode) -> None:
        self._mutate(mode=mode)

    def set_candidates(self, destinations: Iterable[Destination]) -> None:
        self._selection = self._selection.model_copy(update={"candidates": tuple(destinations)})
        self._publish()

    def select_candidate(self, destination_id: str) -> None:
        for candidate in self._selection.candidates:
            if candidate.id == destination_id:
                self.set_destination(candidate)
                return
        raise UnknownDestinationError(f"Destination not found: {destination_id}")

    def use_current_location(self, source: LocationSource) -> bool:
        """Read the source once and use it as origin. Returns False when no fix is available."""
        coordinate = source.current_location()
        if coordinate is None:
            logger.info("telemetry current_location_unavailable")
            return False
        self.set_origin(coordinate)
        return True

    def swap_origin_and_destination(self) -> None:
        """Exchange endpoints. The destination slot becomes a bare coordinate."""
        sel = self._selection
        self._mutate(
            origin=sel.destination_coordinate,
            destination=None,
            destination_coordinate=sel.origin,
        )

    def clear(self) -> None:
        """Drop both endpoints and go Idle. In-flight requests are left running; their results are discarded."""
        sel = self._selection
        self._selection = sel.model_copy(
            update={
                "origin": None,
                "destination": None,
                "destination_coordinate": None,
                "request_version": sel.request_version + 1,
            }
        )
        self._state = Idle()
        logger.info("telemetry route_cleared version=%s", self._selection.request_version)
        self._publish()

    # --- Viewport navigation ---

    def zoom_in(self) -> None:
        self._set_viewport(zoom(self._viewport, ZoomDirection.IN, self._zoom_factor, self._min_span, self._max_span))

    def zoom_out(self) -> None:
        self._set_viewport(zoom(self._viewport, ZoomDirection.OUT, self._zoom_factor, self._min_span, self._max_span))

    def center_on(self, coordinate: Coordinate) -> None:
        self._set_viewport(center_on(coordinate, self._focus_span))

    async def wait_until_settled(self) -> None:
        """Wait for every outstanding directions request, including superseded ones."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # --- Internals ---

    def _mutate(self, **changes: Any) -> None:
        sel = self._selection
        changes["request_version"] = sel.request_version + 1
        self._selection = sel.model_copy(update=changes)
        self._fit_to_endpoints()
        self._compute()
        self._publish()

    def _fit_to_endpoints(self) -> None:
        sel = self._selection
        endpoints = [p for p in (sel.origin, sel.destination_coordinate) if p is not None]
        if endpoints:
            self._viewport = fit(endpoints, self._padding, self._min_span, self._max_span)

    def _compute(self) -> None:
        sel = self._selection
        if not sel.has_endpoints:
            return
        version = sel.request_version
        self._state = Calculating(version=version)
        logger.info(
            "telemetry route_requested version=%s mode=%s",
            version,
            sel.mode.value,
            extra={"version": version, "mode": sel.mode.value},
        )
        task = asyncio.get_running_loop().create_task(
            self._request_route(version, sel.origin, sel.destination_coordinate, sel.mode)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _request_route(
        self,
        version: int,
        origin: Coordinate,
        destination: Coordinate,
        mode: TransportMode,
    ) -> None:
        result: RouteResult | None = None
        reason: FailureReason | None = None
        try:
            result = await self._provider.request(origin, destination, mode)
        except RouteProviderError as e:
            reason = e.reason
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            # Cancellation leaked from the provider's own timeout handling
            logger.warning("telemetry route_provider_cancelled version=%s", version)
            reason = FailureReason.TIMEOUT
        except Exception:
            logger.warning("telemetry route_provider_crashed version=%s", version, exc_info=True)
            reason = FailureReason.UNKNOWN

        if version != self._selection.request_version:
            logger.debug(
                "telemetry route_response_discarded version=%s current=%s",
                version,
                self._selection.request_version,
            )
            return

        if result is not None:
            result = result.model_copy(update={"is_estimated": False})
            points = list(result.path) if result.path else [origin, destination]
            self._apply(Ready(result=result), points)
            return

        logger.warning(
            "telemetry route_provider_failed reason=%s version=%s fallback=%s",
            reason.value,
            version,
            self._fallback_enabled,
            extra={"reason": reason.value, "version": version},
        )
        if not self._fallback_enabled:
            self._state = Failed(reason=reason)
            self._publish()
            return
        fallback = estimate(origin, destination, mode, speeds=self._speeds)
        self._apply(Ready(result=fallback), [origin, destination])

    def _apply(self, state: Ready, points: list[Coordinate]) -> None:
        self._state = state
        self._viewport = fit(points, self._padding, self._min_span, self._max_span)
        logger.info(
            "telemetry route_ready distance_m=%.0f estimated=%s",
            state.result.distance_meters,
            state.result.is_estimated,
            extra={"distance_m": state.result.distance_meters, "estimated": state.result.is_estimated},
        )
        self._publish()

    def _set_viewport(self, viewport: Viewport) -> None:
        self._viewport = viewport
        self._publish()

    def _publish(self) -> None:
        if not self._observers:
            return
        snapshot = self.snapshot()
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.exception("telemetry observer_error")
