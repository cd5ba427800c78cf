from __future__ import annotations

import json

import pytest

from atucha.lattice.generator import generate
from atucha.quality.controller import QualityController
from atucha.scene.frame import build_scene_frame
from atucha.tour.controller import DEFAULT_CAMERA_POSE, TourController
from atucha.tour.waypoints import DEFAULT_TOUR


def test_frame_collects_rendering_camera_and_lattice() -> None:
    tubes, rods = generate(451, 12, 37)
    parameters = QualityController().current_parameters()

    frame = build_scene_frame(parameters, tubes, rods, DEFAULT_CAMERA_POSE)

    assert frame["rendering"]["quality_name"] == "HIGH"
    assert frame["camera"] == {"position": [50.0, 30.0, 50.0], "target": [0.0, 12.0, 0.0]}
    assert frame["tube_count"] == 451
    assert frame["control_rod_count"] == 37
    assert len(frame["tubes"]) == 451
    assert frame["control_rods"][1]["id"] == 12
    assert frame["tour"] == {"active": False, "phase": "idle", "current_index": 0, "waypoint": None}
    assert frame["free_orbit_enabled"] is True
    assert frame["core_scale"] == pytest.approx(1.0)
    assert frame["plant_rotation"] == 0.0

    json.dumps(frame)


def test_frame_reflects_active_tour_and_paused_animation() -> None:
    tubes, rods = generate(20, 5, 4)
    tour = TourController()
    tour.start(DEFAULT_TOUR)
    tour.tick(1.0)

    frame = build_scene_frame(
        QualityController().current_parameters(),
        tubes,
        rods,
        tour.pose,
        tour_state=tour.state,
        tour_waypoint=tour.current_waypoint.name,
        free_orbit_enabled=tour.is_free_orbit_enabled(1440),
        elapsed_s=12.0,
        playing=False,
    )

    assert frame["tour"]["active"] is True
    assert frame["tour"]["phase"] == "transitioning"
    assert frame["tour"]["waypoint"] == "Plant overview"
    assert frame["free_orbit_enabled"] is False
    assert frame["playing"] is False
    assert frame["core_scale"] == 1.0
    assert frame["plant_rotation"] == 0.0
    for tube in frame["tubes"]:
        assert tube["fuel_emissive"] == pytest.approx(tube["flux"] * 0.4, abs=1e-3)
