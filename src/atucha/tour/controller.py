from __future__ import annotations

import logging
import math
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

import numpy as np

from atucha.config import (
    DEFAULT_CAMERA_POSITION,
    DEFAULT_CAMERA_TARGET,
    MIN_ORBIT_VIEWPORT_WIDTH_PX,
)
from atucha.errors import InvalidWaypointListError

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]


def _vec3(value: Iterable[float], name: str) -> Vec3:
    items = tuple(float(item) for item in value)
    if len(items) != 3:
        msg = f"{name} must have three components"
        raise ValueError(msg)
    if not all(math.isfinite(item) for item in items):
        msg = f"{name} must be finite"
        raise ValueError(msg)
    return (items[0], items[1], items[2])


class TourPhase(str, Enum):
    IDLE = "idle"
    TRANSITIONING = "transitioning"
    HOLDING = "holding"
    FINISHED = "finished"


@dataclass(frozen=True)
class CameraPose:
    position: Vec3
    target: Vec3

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _vec3(self.position, "position"))
        object.__setattr__(self, "target", _vec3(self.target, "target"))

    def to_dict(self) -> dict[str, list[float]]:
        return {"position": list(self.position), "target": list(self.target)}


DEFAULT_CAMERA_POSE = CameraPose(position=DEFAULT_CAMERA_POSITION, target=DEFAULT_CAMERA_TARGET)


@dataclass(frozen=True)
class TourWaypoint:
    name: str
    camera_position: Vec3
    camera_target: Vec3
    hold_duration_s: float = 4.0
    transition_duration_s: float = 3.0

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "camera_position", _vec3(self.camera_position, "camera_position")
        )
        object.__setattr__(self, "camera_target", _vec3(self.camera_target, "camera_target"))
        if not math.isfinite(self.hold_duration_s) or self.hold_duration_s < 0:
            msg = "hold_duration_s must be a non-negative number"
            raise ValueError(msg)
        if not math.isfinite(self.transition_duration_s) or self.transition_duration_s < 0:
            msg = "transition_duration_s must be a non-negative number"
            raise ValueError(msg)

    @property
    def pose(self) -> CameraPose:
        return CameraPose(position=self.camera_position, target=self.camera_target)


@dataclass(frozen=True)
class TourState:
    current_index: int
    phase: TourPhase
    elapsed_in_phase: float
    active: bool


def ease_in_out(t: float) -> float:
    """Smoothstep easing: zero velocity at both ends of a transition."""
    t = min(1.0, max(0.0, t))
    return t * t * (3.0 - (2.0 * t))


def interpolate_pose(start: CameraPose, end: CameraPose, progress: float) -> CameraPose:
    weight = ease_in_out(progress)
    position = (1.0 - weight) * np.asarray(start.position) + weight * np.asarray(end.position)
    target = (1.0 - weight) * np.asarray(start.target) + weight * np.asarray(end.target)
    return CameraPose(
        position=tuple(float(value) for value in position),
        target=tuple(float(value) for value in target),
    )


class TourController:
    """Guided camera tour over an ordered list of waypoints.

    Driven by ``tick`` once per frame. While a tour is active the free-orbit
    input is reported as disabled; it comes back when the tour finishes or is
    stopped. Time left over when a phase ends is carried into the next phase.
    """

    def __init__(
        self,
        *,
        initial_pose: CameraPose = DEFAULT_CAMERA_POSE,
        min_orbit_viewport_width_px: int = MIN_ORBIT_VIEWPORT_WIDTH_PX,
    ) -> None:
        self._home_pose = initial_pose
        self._min_orbit_viewport_width_px = min_orbit_viewport_width_px
        self._waypoints: tuple[TourWaypoint, ...] = ()
        self._index = 0
        self._phase = TourPhase.IDLE
        self._elapsed = 0.0
        self._active = False
        self._pose = initial_pose
        self._segment_start = initial_pose
        self._lock = threading.Lock()

    @property
    def waypoints(self) -> tuple[TourWaypoint, ...]:
        with self._lock:
            return self._waypoints

    @property
    def state(self) -> TourState:
        with self._lock:
            return TourState(
                current_index=self._index,
                phase=self._phase,
                elapsed_in_phase=self._elapsed,
                active=self._active,
            )

    @property
    def pose(self) -> CameraPose:
        with self._lock:
            return self._pose

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active

    @property
    def current_waypoint(self) -> TourWaypoint | None:
        with self._lock:
            if not self._waypoints:
                return None
            return self._waypoints[self._index]

    def is_free_orbit_enabled(self, viewport_width: float | None = None) -> bool:
        with self._lock:
            if self._active:
                return False
        if viewport_width is None:
            return True
        return viewport_width >= self._min_orbit_viewport_width_px

    def start(
        self,
        waypoints: Iterable[TourWaypoint],
        *,
        from_pose: CameraPose | None = None,
    ) -> None:
        candidate = tuple(waypoints)
        if not candidate:
            msg = "A tour needs at least one waypoint"
            raise InvalidWaypointListError(msg)
        if not all(isinstance(item, TourWaypoint) for item in candidate):
            msg = "Tour waypoints must be TourWaypoint instances"
            raise InvalidWaypointListError(msg)

        with self._lock:
            self._waypoints = candidate
            self._index = 0
            self._elapsed = 0.0
            self._active = True
            if from_pose is not None:
                self._pose = from_pose
            self._segment_start = self._pose
            if len(candidate) == 1:
                self._enter_holding()
            else:
                self._phase = TourPhase.TRANSITIONING
            logger.info("Tour started with %d waypoints", len(candidate))

    def tick(self, delta_s: float) -> CameraPose:
        with self._lock:
            if not self._active or not math.isfinite(delta_s) or delta_s <= 0:
                return self._pose
            self._elapsed += delta_s
            self._advance()
            return self._pose

    def stop(self) -> None:
        with self._lock:
            was_active = self._active
            self._phase = TourPhase.IDLE
            self._active = False
            self._elapsed = 0.0
        if was_active:
            logger.info("Tour stopped")

    def skip(self) -> CameraPose:
        with self._lock:
            if self._active and self._phase in (TourPhase.TRANSITIONING, TourPhase.HOLDING):
                self._elapsed = 0.0
                self._complete_hold()
            return self._pose

    def reset_camera(self) -> CameraPose:
        """Stop any tour and return the camera to its home pose."""
        self.stop()
        with self._lock:
            self._pose = self._home_pose
            self._segment_start = self._home_pose
            return self._pose

    def _advance(self) -> None:
        while self._active:
            waypoint = self._waypoints[self._index]
            if self._phase is TourPhase.TRANSITIONING:
                duration = waypoint.transition_duration_s
                if self._elapsed < duration:
                    self._pose = interpolate_pose(
                        self._segment_start, waypoint.pose, self._elapsed / duration
                    )
                    return
                self._elapsed -= duration
                self._enter_holding()
            elif self._phase is TourPhase.HOLDING:
                if self._elapsed < waypoint.hold_duration_s:
                    return
                self._elapsed -= waypoint.hold_duration_s
                self._complete_hold()
            else:
                return

    def _enter_holding(self) -> None:
        waypoint = self._waypoints[self._index]
        self._phase = TourPhase.HOLDING
        self._pose = waypoint.pose
        logger.debug("Tour holding at %s", waypoint.name)

    def _complete_hold(self) -> None:
        if self._index >= len(self._waypoints) - 1:
            self._phase = TourPhase.FINISHED
            self._active = False
            self._elapsed = 0.0
            self._pose = self._waypoints[-1].pose
            logger.info("Tour finished")
            return
        self._index += 1
        self._phase = TourPhase.TRANSITIONING
        self._segment_start = self._pose
        logger.debug("Tour moving to %s", self._waypoints[self._index].name)


__all__ = [
    "Vec3",
    "TourPhase",
    "CameraPose",
    "DEFAULT_CAMERA_POSE",
    "TourWaypoint",
    "TourState",
    "ease_in_out",
    "interpolate_pose",
    "TourController",
]
