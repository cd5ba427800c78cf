from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass

from atucha.config import (
    BASE_TEMPERATURE_C,
    CONTROL_ROD_STRIDE,
    DESIGN_CONTROL_ROD_COUNT,
    DESIGN_TUBE_COUNT,
    LATTICE_PLANE_Y,
    MAX_LATTICE_RADIUS,
    ROW_SPACING,
    TEMPERATURE_GRADIENT_C,
    PlantConfig,
)

logger = logging.getLogger(__name__)

# Tubes per lattice row. The footprint is irregular near the boundary, so this
# is kept as data rather than derived from a formula.
ROW_PROFILE: tuple[int, ...] = (
    1, 3, 5, 7, 9, 11, 13, 15, 17, 19, 21, 23, 25, 27, 29,
    29, 29,
    27, 25, 23, 21, 19, 17, 15, 13, 11, 9, 7, 5, 3, 1,
)  # fmt: skip


def _finite_or(value: float, default: float) -> float:
    return value if math.isfinite(value) else default


@dataclass(frozen=True)
class LatticeGeometry:
    row_profile: tuple[int, ...] = ROW_PROFILE
    row_spacing: float = ROW_SPACING
    base_temperature_c: float = BASE_TEMPERATURE_C
    temperature_gradient_c: float = TEMPERATURE_GRADIENT_C
    max_radius: float = MAX_LATTICE_RADIUS

    def __post_init__(self) -> None:
        if not self.row_profile:
            msg = "row_profile must contain at least one row"
            raise ValueError(msg)
        if any(count < 0 for count in self.row_profile):
            msg = "row_profile counts must be non-negative"
            raise ValueError(msg)
        if self.row_spacing <= 0:
            msg = "row_spacing must be positive"
            raise ValueError(msg)
        if self.max_radius <= 0:
            msg = "max_radius must be positive"
            raise ValueError(msg)

    @property
    def capacity(self) -> int:
        return sum(self.row_profile)

    @staticmethod
    def from_config(config: PlantConfig) -> LatticeGeometry:
        return LatticeGeometry(
            row_spacing=config.row_spacing,
            base_temperature_c=config.base_temperature_c,
            temperature_gradient_c=config.temperature_gradient_c,
            max_radius=config.max_radius,
        )


DEFAULT_GEOMETRY = LatticeGeometry()


@dataclass(frozen=True)
class LatticeNode:
    id: int
    row_index: int
    column_index_in_row: int
    x: float
    z: float
    distance_from_center: float
    temperature_c: float
    flux_fraction: float

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.z)

    @property
    def position_3d(self) -> tuple[float, float, float]:
        return (self.x, LATTICE_PLANE_Y, self.z)

    def to_dict(self) -> dict[str, float | int]:
        return {
            "id": self.id,
            "row_index": self.row_index,
            "column_index_in_row": self.column_index_in_row,
            "x": self.x,
            "z": self.z,
            "distance_from_center": self.distance_from_center,
            "temperature_c": self.temperature_c,
            "flux_fraction": self.flux_fraction,
        }


def node_temperature_c(distance: float, geometry: LatticeGeometry = DEFAULT_GEOMETRY) -> float:
    raw = geometry.base_temperature_c + (
        (geometry.max_radius - distance) * geometry.temperature_gradient_c
    )
    return max(0.0, _finite_or(raw, geometry.base_temperature_c))


def node_flux_fraction(distance: float, geometry: LatticeGeometry = DEFAULT_GEOMETRY) -> float:
    raw = 1.0 - (distance / geometry.max_radius)
    return min(1.0, max(0.0, _finite_or(raw, 0.0)))


def _iter_lattice(geometry: LatticeGeometry, limit: int):
    rows = len(geometry.row_profile)
    spacing = geometry.row_spacing
    node_id = 0
    for row, count in enumerate(geometry.row_profile):
        row_offset = _finite_or((row - (rows - 1) / 2.0) * spacing, 0.0)
        for col in range(count):
            if node_id >= limit:
                return
            col_offset = _finite_or((col - (count - 1) / 2.0) * spacing, 0.0)
            distance = _finite_or(math.hypot(col_offset, row_offset), 0.0)
            yield LatticeNode(
                id=node_id,
                row_index=row,
                column_index_in_row=col,
                x=col_offset,
                z=row_offset,
                distance_from_center=distance,
                temperature_c=node_temperature_c(distance, geometry),
                flux_fraction=node_flux_fraction(distance, geometry),
            )
            node_id += 1


def select_control_rods(
    tubes: list[LatticeNode],
    rod_stride: int,
    max_rod_count: int,
) -> list[LatticeNode]:
    """Every ``rod_stride``-th tube in generation order, capped at ``max_rod_count``."""
    stride = max(1, int(rod_stride))
    cap = max(0, int(max_rod_count))
    return tubes[::stride][:cap]


def generate(
    target_tube_count: int = DESIGN_TUBE_COUNT,
    rod_stride: int = CONTROL_ROD_STRIDE,
    max_rod_count: int = DESIGN_CONTROL_ROD_COUNT,
    *,
    geometry: LatticeGeometry = DEFAULT_GEOMETRY,
) -> tuple[list[LatticeNode], list[LatticeNode]]:
    """Lay out the pressure-tube lattice and pick the control-rod positions.

    Rows follow ``geometry.row_profile``; the flattened sequence is cut to
    exactly ``target_tube_count`` nodes by dropping from the tail. The result
    depends only on the arguments.
    """
    target = max(0, int(target_tube_count))
    capacity = geometry.capacity
    if target > capacity:
        logger.warning(
            "Requested %d tubes but the lattice only holds %d; using the full lattice",
            target,
            capacity,
        )

    tubes = list(_iter_lattice(geometry, target))
    rods = select_control_rods(tubes, rod_stride, max_rod_count)
    return tubes, rods


class LatticeCache:
    """Keeps the last generated lattice until its inputs change.

    Layout does not depend on rendering quality, so callers may ask for the
    lattice every frame without triggering regeneration.
    """

    def __init__(self, geometry: LatticeGeometry = DEFAULT_GEOMETRY) -> None:
        self._geometry = geometry
        self._key: tuple[int, int, int, LatticeGeometry] | None = None
        self._tubes: list[LatticeNode] = []
        self._rods: list[LatticeNode] = []
        self._generation_count = 0
        self._lock = threading.Lock()

    @property
    def generation_count(self) -> int:
        with self._lock:
            return self._generation_count

    def set_geometry(self, geometry: LatticeGeometry) -> None:
        with self._lock:
            self._geometry = geometry

    def get(
        self,
        target_tube_count: int = DESIGN_TUBE_COUNT,
        rod_stride: int = CONTROL_ROD_STRIDE,
        max_rod_count: int = DESIGN_CONTROL_ROD_COUNT,
    ) -> tuple[list[LatticeNode], list[LatticeNode]]:
        with self._lock:
            key = (int(target_tube_count), int(rod_stride), int(max_rod_count), self._geometry)
            if key != self._key:
                self._tubes, self._rods = generate(
                    target_tube_count, rod_stride, max_rod_count, geometry=self._geometry
                )
                self._key = key
                self._generation_count += 1
                logger.info(
                    "Lattice regenerated: %d tubes, %d control rods",
                    len(self._tubes),
                    len(self._rods),
                )
            return list(self._tubes), list(self._rods)


__all__ = [
    "ROW_PROFILE",
    "LatticeGeometry",
    "DEFAULT_GEOMETRY",
    "LatticeNode",
    "node_temperature_c",
    "node_flux_fraction",
    "select_control_rods",
    "generate",
    "LatticeCache",
]
