from __future__ import annotations

import math

import numpy as np
import pandas as pd

from atucha.lattice.generator import LatticeNode

FUEL_EMISSIVE_SCALE = 0.4
FUEL_PULSE_AMPLITUDE = 0.05
FUEL_PULSE_RATE = 2.0
FUEL_PULSE_PHASE_STEP = 0.1
TUBE_EMISSIVE_SCALE = 0.15
CORE_PULSE_AMPLITUDE = 0.005
CORE_PULSE_RATE = 0.5
PLANT_ROTATION_RATE = 0.05

FRAME_COLUMNS = (
    "id",
    "row_index",
    "column_index_in_row",
    "x",
    "z",
    "distance_from_center",
    "temperature_c",
    "flux_fraction",
    "is_control_rod",
)


def fuel_emissive_intensity(
    flux_fraction: float,
    elapsed_s: float = 0.0,
    node_id: int = 0,
    *,
    playing: bool = True,
) -> float:
    """Emissive glow for a fuel bundle, derived from its flux and the clock.

    Each tube gets a small phase offset from its id so the core shimmers
    rather than blinking in unison. With playback paused the glow is static.
    """
    flux = min(1.0, max(0.0, flux_fraction))
    if not playing:
        return flux * FUEL_EMISSIVE_SCALE
    pulse = FUEL_PULSE_AMPLITUDE * math.sin(
        (elapsed_s * FUEL_PULSE_RATE) + (node_id * FUEL_PULSE_PHASE_STEP)
    )
    return max(0.0, flux * (FUEL_EMISSIVE_SCALE + pulse))


def tube_emissive_intensity(flux_fraction: float) -> float:
    return min(1.0, max(0.0, flux_fraction)) * TUBE_EMISSIVE_SCALE


def core_pulse_scale(elapsed_s: float, *, playing: bool = True) -> float:
    if not playing:
        return 1.0
    return 1.0 + (CORE_PULSE_AMPLITUDE * math.sin(elapsed_s * CORE_PULSE_RATE))


def plant_rotation(elapsed_s: float, *, playing: bool = True) -> float:
    """Yaw of the plant model in radians, wrapped to one turn."""
    if not playing:
        return 0.0
    return (elapsed_s * PLANT_ROTATION_RATE) % (2.0 * math.pi)


def lattice_to_frame(tubes: list[LatticeNode], rods: list[LatticeNode]) -> pd.DataFrame:
    rod_ids = {rod.id for rod in rods}
    rows = []
    for node in tubes:
        row = node.to_dict()
        row["is_control_rod"] = node.id in rod_ids
        rows.append(row)
    return pd.DataFrame(rows, columns=list(FRAME_COLUMNS))


def summarize_lattice(tubes: list[LatticeNode], rods: list[LatticeNode]) -> dict[str, float]:
    if not tubes:
        return {
            "tube_count": 0.0,
            "control_rod_count": float(len(rods)),
            "row_count": 0.0,
            "max_distance": 0.0,
            "mean_temperature_c": 0.0,
            "max_temperature_c": 0.0,
            "min_temperature_c": 0.0,
            "mean_flux_fraction": 0.0,
        }
    temperatures = np.array([node.temperature_c for node in tubes], dtype=float)
    flux = np.array([node.flux_fraction for node in tubes], dtype=float)
    distances = np.array([node.distance_from_center for node in tubes], dtype=float)
    return {
        "tube_count": float(len(tubes)),
        "control_rod_count": float(len(rods)),
        "row_count": float(len({node.row_index for node in tubes})),
        "max_distance": float(distances.max()),
        "mean_temperature_c": float(temperatures.mean()),
        "max_temperature_c": float(temperatures.max()),
        "min_temperature_c": float(temperatures.min()),
        "mean_flux_fraction": float(flux.mean()),
    }


__all__ = [
    "fuel_emissive_intensity",
    "tube_emissive_intensity",
    "core_pulse_scale",
    "plant_rotation",
    "lattice_to_frame",
    "summarize_lattice",
]
