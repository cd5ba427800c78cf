from __future__ import annotations

from typing import Any

from atucha.lattice.generator import LatticeNode
from atucha.lattice.visuals import (
    core_pulse_scale,
    fuel_emissive_intensity,
    plant_rotation,
    tube_emissive_intensity,
)
from atucha.quality.controller import RenderingParameters
from atucha.tour.controller import CameraPose, TourState


def _node_payload(node: LatticeNode, *, elapsed_s: float, playing: bool) -> dict[str, float]:
    return {
        "id": node.id,
        "x": round(node.x, 4),
        "z": round(node.z, 4),
        "temperature_c": round(node.temperature_c, 2),
        "flux": round(node.flux_fraction, 4),
        "tube_emissive": round(tube_emissive_intensity(node.flux_fraction), 4),
        "fuel_emissive": round(
            fuel_emissive_intensity(node.flux_fraction, elapsed_s, node.id, playing=playing), 4
        ),
    }


def build_scene_frame(
    parameters: RenderingParameters,
    tubes: list[LatticeNode],
    rods: list[LatticeNode],
    pose: CameraPose,
    *,
    tour_state: TourState | None = None,
    tour_waypoint: str | None = None,
    free_orbit_enabled: bool = True,
    elapsed_s: float = 0.0,
    playing: bool = True,
) -> dict[str, Any]:
    """Collect everything the scene layer needs to draw one frame."""
    return {
        "rendering": parameters.to_dict(),
        "camera": pose.to_dict(),
        "free_orbit_enabled": bool(free_orbit_enabled),
        "tour": {
            "active": bool(tour_state.active) if tour_state else False,
            "phase": tour_state.phase.value if tour_state else "idle",
            "current_index": tour_state.current_index if tour_state else 0,
            "waypoint": tour_waypoint,
        },
        "playing": bool(playing),
        "elapsed_s": float(elapsed_s),
        "core_scale": core_pulse_scale(elapsed_s, playing=playing),
        "plant_rotation": plant_rotation(elapsed_s, playing=playing),
        "tubes": [_node_payload(node, elapsed_s=elapsed_s, playing=playing) for node in tubes],
        "control_rods": [
            {"id": rod.id, "x": round(rod.x, 4), "z": round(rod.z, 4)} for rod in rods
        ],
        "tube_count": len(tubes),
        "control_rod_count": len(rods),
    }


__all__ = ["build_scene_frame"]
