from __future__ import annotations

import pandas as pd

from atucha.tour.controller import (
    DEFAULT_CAMERA_POSE,
    CameraPose,
    TourController,
    TourPhase,
    TourWaypoint,
)

# Camera stops around the plant layout: containment at the origin, turbine
# hall to the east, cooling towers to the west.
DEFAULT_TOUR: tuple[TourWaypoint, ...] = (
    TourWaypoint(
        name="Plant overview",
        camera_position=(50.0, 30.0, 50.0),
        camera_target=(0.0, 12.0, 0.0),
        hold_duration_s=4.0,
        transition_duration_s=3.0,
    ),
    TourWaypoint(
        name="Containment building",
        camera_position=(0.0, 42.0, 58.0),
        camera_target=(0.0, 22.0, 0.0),
        hold_duration_s=4.0,
        transition_duration_s=3.0,
    ),
    TourWaypoint(
        name="Reactor core",
        camera_position=(14.0, 12.0, 14.0),
        camera_target=(0.0, 5.0, 0.0),
        hold_duration_s=6.0,
        transition_duration_s=3.5,
    ),
    TourWaypoint(
        name="Turbine hall",
        camera_position=(72.0, 20.0, 28.0),
        camera_target=(40.0, 10.0, 0.0),
        hold_duration_s=4.0,
        transition_duration_s=3.0,
    ),
    TourWaypoint(
        name="Cooling towers",
        camera_position=(-75.0, 45.0, 0.0),
        camera_target=(-30.0, 25.0, 0.0),
        hold_duration_s=4.0,
        transition_duration_s=3.5,
    ),
)


def tour_duration_s(waypoints: tuple[TourWaypoint, ...] | list[TourWaypoint]) -> float:
    """Playback length; a single-stop tour has no transition."""
    if len(waypoints) == 1:
        return waypoints[0].hold_duration_s
    return sum(item.transition_duration_s + item.hold_duration_s for item in waypoints)


def tour_timeline(
    waypoints: tuple[TourWaypoint, ...] | list[TourWaypoint] = DEFAULT_TOUR,
    *,
    step_s: float = 0.1,
    from_pose: CameraPose = DEFAULT_CAMERA_POSE,
) -> pd.DataFrame:
    """Play a tour on a private controller and record the camera at fixed steps."""
    if step_s <= 0:
        msg = "step_s must be positive"
        raise ValueError(msg)

    controller = TourController(initial_pose=from_pose)
    controller.start(waypoints, from_pose=from_pose)
    max_steps = int(tour_duration_s(waypoints) / step_s) + 2

    rows: list[dict[str, float | int | str | bool]] = []
    time_s = 0.0
    pose = controller.pose
    for step in range(max_steps + 1):
        state = controller.state
        rows.append(
            {
                "time_s": time_s,
                "phase": state.phase.value,
                "current_index": state.current_index,
                "waypoint": waypoints[state.current_index].name,
                "active": state.active,
                "position_x": pose.position[0],
                "position_y": pose.position[1],
                "position_z": pose.position[2],
                "target_x": pose.target[0],
                "target_y": pose.target[1],
                "target_z": pose.target[2],
            }
        )
        if state.phase is TourPhase.FINISHED or step == max_steps:
            break
        pose = controller.tick(step_s)
        time_s += step_s

    return pd.DataFrame(rows)


__all__ = ["DEFAULT_TOUR", "tour_duration_s", "tour_timeline"]
