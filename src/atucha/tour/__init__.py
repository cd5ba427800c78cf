from atucha.tour.controller import (
    DEFAULT_CAMERA_POSE,
    CameraPose,
    TourController,
    TourPhase,
    TourState,
    TourWaypoint,
    ease_in_out,
    interpolate_pose,
)
from atucha.tour.waypoints import DEFAULT_TOUR, tour_duration_s, tour_timeline

__all__ = [
    "DEFAULT_CAMERA_POSE",
    "CameraPose",
    "TourController",
    "TourPhase",
    "TourState",
    "TourWaypoint",
    "ease_in_out",
    "interpolate_pose",
    "DEFAULT_TOUR",
    "tour_duration_s",
    "tour_timeline",
]
