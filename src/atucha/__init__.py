"""Atucha II core visualization: lattice layout, quality tiers and camera tours."""

from atucha.capabilities.probe import (
    CapabilityProbe,
    DeviceCapabilities,
    HostMetricsBackend,
    probe_host_metrics,
)
from atucha.config import PlantConfig, load_plant_config
from atucha.errors import (
    AtuchaError,
    ConfigurationError,
    InvalidWaypointListError,
    ProbeError,
    UnsupportedRenderingError,
)
from atucha.lattice.generator import LatticeCache, LatticeGeometry, LatticeNode, generate
from atucha.lattice.visuals import lattice_to_frame, summarize_lattice
from atucha.logging_config import setup_logging
from atucha.quality.controller import QualityController, QualityLevel, RenderingParameters
from atucha.scene.frame import build_scene_frame
from atucha.tour.controller import CameraPose, TourController, TourPhase, TourWaypoint
from atucha.tour.waypoints import DEFAULT_TOUR, tour_timeline

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CapabilityProbe",
    "DeviceCapabilities",
    "HostMetricsBackend",
    "probe_host_metrics",
    "PlantConfig",
    "load_plant_config",
    "AtuchaError",
    "ConfigurationError",
    "InvalidWaypointListError",
    "ProbeError",
    "UnsupportedRenderingError",
    "LatticeCache",
    "LatticeGeometry",
    "LatticeNode",
    "generate",
    "lattice_to_frame",
    "summarize_lattice",
    "setup_logging",
    "QualityController",
    "QualityLevel",
    "RenderingParameters",
    "build_scene_frame",
    "CameraPose",
    "TourController",
    "TourPhase",
    "TourWaypoint",
    "DEFAULT_TOUR",
    "tour_timeline",
]
