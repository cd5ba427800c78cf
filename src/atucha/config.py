from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from atucha.errors import ConfigurationError

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "plant.json"

# Atucha II design figures.
DESIGN_TUBE_COUNT = 451
DESIGN_CONTROL_ROD_COUNT = 37
CONTROL_ROD_STRIDE = 12

ROW_SPACING = 0.65
LATTICE_PLANE_Y = 0.0
BASE_TEMPERATURE_C = 280.0
TEMPERATURE_GRADIENT_C = 12.0
MAX_LATTICE_RADIUS = 15.0

DEPTH_TEXTURE_EXTENSION = "WEBGL_depth_texture"
MIN_ORBIT_VIEWPORT_WIDTH_PX = 768

DEFAULT_CAMERA_POSITION = (50.0, 30.0, 50.0)
DEFAULT_CAMERA_TARGET = (0.0, 12.0, 0.0)


def _as_vec3(value: object, name: str) -> tuple[float, float, float]:
    try:
        items = [float(item) for item in value]  # type: ignore[union-attr]
    except (TypeError, ValueError) as exc:
        msg = f"{name} must be a sequence of three numbers"
        raise ValueError(msg) from exc
    if len(items) != 3:
        msg = f"{name} must be a sequence of three numbers"
        raise ValueError(msg)
    return (items[0], items[1], items[2])


@dataclass(frozen=True)
class PlantConfig:
    target_tube_count: int = DESIGN_TUBE_COUNT
    rod_stride: int = CONTROL_ROD_STRIDE
    max_rod_count: int = DESIGN_CONTROL_ROD_COUNT
    row_spacing: float = ROW_SPACING
    base_temperature_c: float = BASE_TEMPERATURE_C
    temperature_gradient_c: float = TEMPERATURE_GRADIENT_C
    max_radius: float = MAX_LATTICE_RADIUS
    depth_texture_extension: str = DEPTH_TEXTURE_EXTENSION
    min_orbit_viewport_width_px: int = MIN_ORBIT_VIEWPORT_WIDTH_PX
    default_camera_position: tuple[float, float, float] = DEFAULT_CAMERA_POSITION
    default_camera_target: tuple[float, float, float] = DEFAULT_CAMERA_TARGET

    def __post_init__(self) -> None:
        if self.target_tube_count < 0:
            msg = "target_tube_count must be non-negative"
            raise ValueError(msg)
        if self.rod_stride <= 0:
            msg = "rod_stride must be positive"
            raise ValueError(msg)
        if self.max_rod_count < 0:
            msg = "max_rod_count must be non-negative"
            raise ValueError(msg)
        if self.row_spacing <= 0:
            msg = "row_spacing must be positive"
            raise ValueError(msg)
        if self.max_radius <= 0:
            msg = "max_radius must be positive"
            raise ValueError(msg)
        if self.min_orbit_viewport_width_px < 0:
            msg = "min_orbit_viewport_width_px must be non-negative"
            raise ValueError(msg)
        if not self.depth_texture_extension:
            msg = "depth_texture_extension must be a non-empty string"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def load_plant_config(config_path: str | Path | None = None) -> PlantConfig:
    """Read a JSON overrides file on top of the built-in plant defaults.

    Without an explicit path the project's ``config/plant.json`` is used when it
    exists; otherwise the defaults are returned unchanged.
    """
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return PlantConfig()
        path = DEFAULT_CONFIG_PATH
    else:
        path = Path(config_path)
        if not path.exists():
            msg = f"Plant config path does not exist: {path}"
            raise FileNotFoundError(msg)

    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        msg = f"Plant config must be a JSON object: {path}"
        raise ConfigurationError(msg)

    known = {field.name for field in fields(PlantConfig)}
    unknown = sorted(set(payload) - known)
    if unknown:
        msg = f"Plant config has unknown keys: {unknown}"
        raise ConfigurationError(msg)

    try:
        for key in ("default_camera_position", "default_camera_target"):
            if key in payload:
                payload[key] = _as_vec3(payload[key], key)
        config = PlantConfig(**payload)
    except (TypeError, ValueError) as exc:
        msg = f"Invalid plant config {path}: {exc}"
        raise ConfigurationError(msg) from exc
    logger.info("Loaded plant config from %s", path)
    return config


__all__ = [
    "PROJECT_ROOT",
    "DEFAULT_CONFIG_PATH",
    "DESIGN_TUBE_COUNT",
    "DESIGN_CONTROL_ROD_COUNT",
    "CONTROL_ROD_STRIDE",
    "ROW_SPACING",
    "LATTICE_PLANE_Y",
    "BASE_TEMPERATURE_C",
    "TEMPERATURE_GRADIENT_C",
    "MAX_LATTICE_RADIUS",
    "DEPTH_TEXTURE_EXTENSION",
    "MIN_ORBIT_VIEWPORT_WIDTH_PX",
    "DEFAULT_CAMERA_POSITION",
    "DEFAULT_CAMERA_TARGET",
    "PlantConfig",
    "load_plant_config",
]
