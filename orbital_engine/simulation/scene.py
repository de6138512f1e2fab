"""Scene context: one mounted scene and its per-frame pipeline.

A ``SceneContext`` owns the clock, ephemeris adapter, path sampler,
focus state and camera controller for a single scene mount. ``frame()``
samples the clock once and threads that instant through ephemeris,
path sampling and the camera, in that order, then returns a
``FrameSnapshot`` for the renderer.
"""

from __future__ import annotations

import enum
import logging
import time as _time
from datetime import datetime
from typing import Callable, Iterable, Optional

from orbital_engine.config import EngineConfig
from orbital_engine.core.bodies import Body, BodyClass, Position
from orbital_engine.core.catalog import (
    BodyCatalog,
    UnknownBodyError,
    comet_bodies,
    moon_body,
    planet_bodies,
    probe_bodies,
    station_bodies,
)
from orbital_engine.core.ephemeris import EphemerisAdapter, tail_length
from orbital_engine.core.trajectory import light_travel_time_hours
from orbital_engine.models.schemas import BodyStateSchema, CameraPoseSchema, FrameSnapshot, PathSchema
from orbital_engine.services.element_store import ElementSetStore
from orbital_engine.simulation.camera import CameraController, CameraPose
from orbital_engine.simulation.clock import TimeController
from orbital_engine.simulation.focus import FocusSelection
from orbital_engine.simulation.path_sampler import PathCache, PathSample, PathSampler
from orbital_engine.utils.constants import AU, OVERVIEW_FOCUS_DISTANCE
from orbital_engine.utils.scale import EARTH_RADIUS_UNITS, display_radius, to_au
from orbital_engine.utils.time_utils import format_distance, format_light_time

logger = logging.getLogger(__name__)


class SceneKind(str, enum.Enum):
    ORRERY = "orrery"
    VOYAGER = "voyager"
    COMETS = "comets"
    STATIONS = "stations"
    SATELLITES = "satellites"


EARTH_CENTRED_SCENES = frozenset({SceneKind.STATIONS, SceneKind.SATELLITES})

OVERVIEW_DISTANCES: dict[SceneKind, float] = {
    SceneKind.ORRERY: OVERVIEW_FOCUS_DISTANCE,
    SceneKind.VOYAGER: 200.0 * AU,
    SceneKind.COMETS: 2.0 * OVERVIEW_FOCUS_DISTANCE,
    SceneKind.STATIONS: 4.0 * EARTH_RADIUS_UNITS,
    SceneKind.SATELLITES: 4.0 * EARTH_RADIUS_UNITS,
}


def build_catalog(kind: SceneKind, satellites: Iterable[Body] = ()) -> BodyCatalog:
    """Default bodies for a scene; the tracker shows ``satellites`` if given."""
    if kind is SceneKind.ORRERY:
        return BodyCatalog(planet_bodies() + [moon_body()])
    if kind is SceneKind.VOYAGER:
        return BodyCatalog(probe_bodies() + planet_bodies())
    if kind is SceneKind.COMETS:
        return BodyCatalog(comet_bodies() + planet_bodies())
    if kind is SceneKind.STATIONS:
        return BodyCatalog(station_bodies())
    satellites = list(satellites)
    return BodyCatalog(satellites or station_bodies())


class SceneContext:
    """Everything one scene mount needs, torn down by ``close()``."""

    def __init__(
        self,
        kind: SceneKind,
        catalog: Optional[BodyCatalog] = None,
        config: Optional[EngineConfig] = None,
        clock: Optional[TimeController] = None,
        start_time: Optional[datetime] = None,
        wall_clock: Callable[[], float] = _time.monotonic,
        element_store: Optional[ElementSetStore] = None,
    ):
        self.kind = SceneKind(kind)
        self.config = config or EngineConfig()
        self.catalog = catalog if catalog is not None else build_catalog(self.kind)
        self._wall_clock = wall_clock
        self._element_store = element_store

        self.clock = clock or TimeController(start=start_time, wall_clock=wall_clock)
        self.ephemeris = EphemerisAdapter(self.catalog, stale_days=self.config.tle_stale_days)
        self.cache = PathCache()
        self.sampler = PathSampler(
            self.ephemeris,
            self.cache,
            wall_clock=wall_clock,
            sample_count=self.config.sample_count,
            comet_sample_count=self.config.comet_sample_count,
        )
        self.focus = FocusSelection()
        self.camera = CameraController(
            duration_ms=self.config.camera_transition_ms,
            overview_distance=OVERVIEW_DISTANCES[self.kind],
        )
        self.focus.add_listener(self._on_focus_changed)

        self.show_orbits = True
        self.show_labels = True
        self._closed = False
        logger.info("Mounted %s scene with %d bodies", self.kind.value, len(self.catalog))

    def __enter__(self) -> SceneContext:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    # =========================================================================
    # Controls
    # =========================================================================

    def select(self, body_id: Optional[str]) -> bool:
        """Focus a body (``None`` for overview); unknown ids raise."""
        self._check_open()
        if body_id is not None and body_id not in self.catalog:
            raise UnknownBodyError(body_id)
        return self.focus.select(body_id)

    def toggle_orbits(self) -> bool:
        self.show_orbits = not self.show_orbits
        return self.show_orbits

    def toggle_labels(self) -> bool:
        self.show_labels = not self.show_labels
        return self.show_labels

    def refresh_elements(self, fetch: bool = False) -> int:
        """Swap in newer element sets from the store; returns bodies updated.

        With ``fetch`` the store is asked to refresh first (it rate-limits
        itself and keeps stale sets on failure).
        """
        self._check_open()
        if self._element_store is None:
            return 0
        satellites = [b for b in self.catalog if b.body_class is BodyClass.SATELLITE and b.tle is not None]
        if fetch:
            self._element_store.refresh_norad_ids(b.tle.catalog_number for b in satellites)

        updated = 0
        for body in satellites:
            tle = self._element_store.get(body.tle.catalog_number)
            if tle is None or tle.epoch_datetime <= body.tle.epoch_datetime:
                continue
            self.catalog.replace(body.with_tle(tle))
            self.cache.invalidate(body.body_id)
            updated += 1
        if updated:
            logger.info("Updated element sets for %d bodies", updated)
        return updated

    # =========================================================================
    # Frame
    # =========================================================================

    def frame(self) -> FrameSnapshot:
        """Advance one frame: clock, then ephemeris, then paths, then camera."""
        self._check_open()
        time = self.clock.tick()

        bodies = list(self.catalog)
        positions = {body.body_id: self.position(body, time) for body in bodies}

        paths: dict[str, PathSample] = {}
        if self.show_orbits:
            paths = {body.body_id: self.path(body, time) for body in bodies}

        camera_pose = self.camera.tick(self._now_ms())

        return FrameSnapshot(
            scene=self.kind.value,
            sim_time=time,
            sim_time_label=self.clock.time_label,
            rate=self.clock.rate,
            rate_label=self.clock.rate_label,
            running=self.clock.running,
            selected_id=self.focus.current,
            bodies={body.body_id: self._body_state(body, positions[body.body_id]) for body in bodies},
            paths={body_id: _path_schema(sample) for body_id, sample in paths.items()},
            camera=_camera_schema(camera_pose),
            show_orbits=self.show_orbits,
            show_labels=self.show_labels,
        )

    def position(self, body: Body, time: datetime) -> Position:
        """Position in this scene's frame (the tracker uses the Earth-fixed globe)."""
        if self.kind is SceneKind.SATELLITES:
            return self.ephemeris.globe_position(body, time)
        return self.ephemeris.position(body, time)

    def path(self, body: Body, time: datetime) -> PathSample:
        if self.kind is SceneKind.STATIONS:
            return self.sampler.orbit_track(body, time)
        return self.sampler.sample_path(body, time)

    def close(self) -> None:
        """Discard caches, SGP4 records and listeners."""
        if self._closed:
            return
        self.focus.remove_listener(self._on_focus_changed)
        self.cache.clear()
        self.ephemeris.clear()
        self._closed = True
        logger.info("Closed %s scene", self.kind.value)

    # =========================================================================
    # Internals
    # =========================================================================

    def _on_focus_changed(self, previous: Optional[str], current: Optional[str]) -> None:
        if current is None:
            self.camera.on_focus_changed(None, None, self._now_ms())
            return
        body = self.catalog.get(current)
        target = self.position(body, self.clock.time).vector
        self.camera.on_focus_changed(target, body.body_class, self._now_ms())

    def _body_state(self, body: Body, position: Position) -> BodyStateSchema:
        tail = None
        distance_label = light_time_label = None
        if body.body_class is BodyClass.COMET:
            tail = tail_length(to_au(position.distance_from_origin)) * AU
        elif body.body_class is BodyClass.PROBE:
            distance_au = to_au(position.distance_from_origin)
            distance_label = format_distance(distance_au)
            light_time_label = format_light_time(light_travel_time_hours(distance_au))
        return BodyStateSchema(
            body_id=body.body_id,
            name=body.name,
            body_class=body.body_class.value,
            color=body.color,
            position=(position.x, position.y, position.z),
            distance_from_origin=position.distance_from_origin,
            display_radius=display_radius(body),
            is_selected=body.body_id == self.focus.current,
            extrapolated=position.extrapolated,
            degraded=position.degraded,
            tail_direction=position.tail_direction,
            tail_length=tail,
            latitude=position.latitude,
            longitude=position.longitude,
            altitude_km=position.altitude_km,
            speed_km_s=position.speed_km_s,
            in_shadow=position.in_shadow,
            region=position.region,
            distance_label=distance_label,
            light_time_label=light_time_label,
        )

    def _now_ms(self) -> float:
        return self._wall_clock() * 1000.0

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError(f"{self.kind.value} scene is closed")


def _path_schema(sample: PathSample) -> PathSchema:
    return PathSchema(
        body_id=sample.body_id,
        kind=sample.kind.value,
        closed=sample.closed,
        points=[(float(x), float(y), float(z)) for x, y, z in sample.points],
    )


def _camera_schema(pose: Optional[CameraPose]) -> Optional[CameraPoseSchema]:
    if pose is None:
        return None
    return CameraPoseSchema(position=pose.position, target=pose.target)
