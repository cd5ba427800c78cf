from atucha.lattice.generator import (
    DEFAULT_GEOMETRY,
    ROW_PROFILE,
    LatticeCache,
    LatticeGeometry,
    LatticeNode,
    generate,
    select_control_rods,
)
from atucha.lattice.visuals import (
    core_pulse_scale,
    fuel_emissive_intensity,
    lattice_to_frame,
    plant_rotation,
    summarize_lattice,
    tube_emissive_intensity,
)

__all__ = [
    "DEFAULT_GEOMETRY",
    "ROW_PROFILE",
    "LatticeCache",
    "LatticeGeometry",
    "LatticeNode",
    "generate",
    "select_control_rods",
    "core_pulse_scale",
    "fuel_emissive_intensity",
    "lattice_to_frame",
    "plant_rotation",
    "summarize_lattice",
    "tube_emissive_intensity",
]
