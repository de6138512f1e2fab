"""Camera framing and focus transitions.

The controller is idle until focus changes. A transition runs one
``CameraAnimation`` for ``CAMERA_TRANSITION_MS`` with an ease-out cubic
curve; a new transition mid-flight starts from wherever the camera is at
that moment and replaces the running one. While idle the controller
never touches the camera, so user orbit/zoom input is left alone.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from orbital_engine.core.bodies import BodyClass
from orbital_engine.utils.constants import (
    CAMERA_TRANSITION_MS,
    FOCUS_DISTANCES,
    FOCUS_OFFSET_DIRECTION,
    OVERVIEW_FOCUS_DISTANCE,
)

logger = logging.getLogger(__name__)

Vector = tuple[float, float, float]
_ORIGIN: Vector = (0.0, 0.0, 0.0)


def _vector(values: Sequence[float]) -> Vector:
    x, y, z = (float(v) for v in values)
    return (x, y, z)


def ease_out_cubic(t: float) -> float:
    """1 - (1 - t)^3 with t clamped to [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    return 1.0 - (1.0 - t) ** 3


@dataclass(frozen=True, slots=True)
class CameraPose:
    """Camera eye position and look-at target, scene units."""

    position: Vector
    target: Vector

    def interpolate(self, other: CameraPose, fraction: float) -> CameraPose:
        a_pos, b_pos = np.array(self.position), np.array(other.position)
        a_tgt, b_tgt = np.array(self.target), np.array(other.target)
        return CameraPose(
            position=_vector(a_pos + (b_pos - a_pos) * fraction),
            target=_vector(a_tgt + (b_tgt - a_tgt) * fraction),
        )


@dataclass(frozen=True, slots=True)
class CameraAnimation:
    start: CameraPose
    end: CameraPose
    start_ms: float
    duration_ms: float = CAMERA_TRANSITION_MS

    def progress(self, now_ms: float) -> float:
        if self.duration_ms <= 0:
            return 1.0
        return min(max((now_ms - self.start_ms) / self.duration_ms, 0.0), 1.0)

    def pose_at(self, now_ms: float) -> CameraPose:
        return self.start.interpolate(self.end, ease_out_cubic(self.progress(now_ms)))

    def is_complete(self, now_ms: float) -> bool:
        return self.progress(now_ms) >= 1.0


class CameraState(str, enum.Enum):
    IDLE = "idle"
    ANIMATING = "animating"


def focus_distance(body_class: Optional[BodyClass], overview_distance: float = OVERVIEW_FOCUS_DISTANCE) -> float:
    """Viewing distance that frames a body of this class nicely."""
    if body_class is None:
        return overview_distance
    return FOCUS_DISTANCES[body_class.value]


def framing_for(
    target: Sequence[float],
    body_class: Optional[BodyClass],
    overview_distance: float = OVERVIEW_FOCUS_DISTANCE,
) -> CameraPose:
    """Static pose looking at ``target`` from the class focus distance."""
    distance = focus_distance(body_class, overview_distance)
    direction = np.array(FOCUS_OFFSET_DIRECTION, dtype=np.float64)
    direction /= np.linalg.norm(direction)
    target_arr = np.asarray(target, dtype=np.float64)
    return CameraPose(position=_vector(target_arr + direction * distance), target=_vector(target_arr))


class CameraController:
    """Explicit idle/animating state machine driven by ``tick(now_ms)``."""

    def __init__(
        self,
        initial_pose: Optional[CameraPose] = None,
        duration_ms: float = CAMERA_TRANSITION_MS,
        overview_distance: float = OVERVIEW_FOCUS_DISTANCE,
    ):
        self._overview_distance = overview_distance
        self._duration_ms = duration_ms
        self._pose = initial_pose or framing_for(_ORIGIN, None, overview_distance)
        self._animation: Optional[CameraAnimation] = None

    @property
    def state(self) -> CameraState:
        return CameraState.IDLE if self._animation is None else CameraState.ANIMATING

    @property
    def pose(self) -> CameraPose:
        """Last pose the controller produced (or was told about)."""
        return self._pose

    @property
    def animation(self) -> Optional[CameraAnimation]:
        return self._animation

    def framing_for(self, target: Sequence[float], body_class: Optional[BodyClass]) -> CameraPose:
        return framing_for(target, body_class, self._overview_distance)

    def sync_pose(self, pose: CameraPose) -> None:
        """Record where user input left the camera; only valid while idle."""
        if self._animation is None:
            self._pose = pose

    def on_focus_changed(
        self,
        target: Optional[Sequence[float]],
        body_class: Optional[BodyClass],
        now_ms: float,
    ) -> CameraAnimation:
        """Start the transition to a new focus (``None`` means overview)."""
        end = self.framing_for(target if target is not None else _ORIGIN, body_class)
        return self.animate_to(end, now_ms)

    def animate_to(self, end: CameraPose, now_ms: float) -> CameraAnimation:
        start = self._animation.pose_at(now_ms) if self._animation is not None else self._pose
        if self._animation is not None:
            logger.debug("Replacing camera animation mid-flight")
        self._pose = start
        self._animation = CameraAnimation(start=start, end=end, start_ms=now_ms, duration_ms=self._duration_ms)
        return self._animation

    def tick(self, now_ms: float) -> Optional[CameraPose]:
        """Pose to apply this frame, or ``None`` when idle."""
        if self._animation is None:
            return None
        self._pose = self._animation.pose_at(now_ms)
        if self._animation.is_complete(now_ms):
            self._pose = self._animation.end
            self._animation = None
        return self._pose
