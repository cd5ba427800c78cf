from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

from atucha.capabilities.probe import DeviceCapabilities
from atucha.config import DEPTH_TEXTURE_EXTENSION

logger = logging.getLogger(__name__)

LOW_TEXTURE_THRESHOLD = 2048
MEDIUM_TEXTURE_THRESHOLD = 4096
LOW_TIER_SHADOW_MAP_SIZE = 512
MIN_ANTIALIAS_RENDERBUFFER_SIZE = 1024


class QualityLevel(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    ULTRA = 4

    @classmethod
    def coerce(cls, value: int | QualityLevel) -> QualityLevel:
        """Clamp an arbitrary integer into the tier range."""
        return cls(max(int(cls.LOW), min(int(cls.ULTRA), int(value))))


DEFAULT_QUALITY_LEVEL = QualityLevel.HIGH


@dataclass(frozen=True)
class TierSettings:
    shadow_map_base_size: int
    max_pixel_ratio: float
    antialiasing_allowed: bool


QUALITY_TIERS: dict[QualityLevel, TierSettings] = {
    QualityLevel.LOW: TierSettings(
        shadow_map_base_size=512, max_pixel_ratio=1.0, antialiasing_allowed=False
    ),
    QualityLevel.MEDIUM: TierSettings(
        shadow_map_base_size=1024, max_pixel_ratio=1.0, antialiasing_allowed=True
    ),
    QualityLevel.HIGH: TierSettings(
        shadow_map_base_size=2048, max_pixel_ratio=1.0, antialiasing_allowed=True
    ),
    QualityLevel.ULTRA: TierSettings(
        shadow_map_base_size=2048, max_pixel_ratio=2.0, antialiasing_allowed=True
    ),
}


@dataclass(frozen=True)
class RenderingParameters:
    quality_level: QualityLevel
    shadow_map_size: int
    pixel_ratio: float
    antialiasing_enabled: bool
    shadows_enabled: bool
    post_processing_enabled: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "quality_level": int(self.quality_level),
            "quality_name": self.quality_level.name,
            "shadow_map_size": self.shadow_map_size,
            "pixel_ratio": self.pixel_ratio,
            "antialiasing_enabled": self.antialiasing_enabled,
            "shadows_enabled": self.shadows_enabled,
            "post_processing_enabled": self.post_processing_enabled,
        }


def tier_base_size(level: QualityLevel) -> int:
    return QUALITY_TIERS[QualityLevel.coerce(level)].shadow_map_base_size


def level_for_capabilities(
    capabilities: DeviceCapabilities,
    default: QualityLevel = DEFAULT_QUALITY_LEVEL,
) -> QualityLevel:
    """Map hardware limits to a tier; capable hardware keeps ``default``."""
    max_texture_size = capabilities.max_texture_size
    if capabilities.is_mobile or max_texture_size < LOW_TEXTURE_THRESHOLD:
        return QualityLevel.LOW
    if max_texture_size < MEDIUM_TEXTURE_THRESHOLD:
        return QualityLevel.MEDIUM
    return default


def _sanitize_pixel_ratio(value: object) -> float:
    try:
        ratio = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(ratio) or ratio <= 0:
        return 1.0
    return ratio


def derive_rendering_parameters(
    level: QualityLevel,
    capabilities: DeviceCapabilities,
    *,
    shadow_preference: bool = True,
    post_processing_preference: bool = True,
    device_pixel_ratio: float = 1.0,
    depth_texture_extension: str = DEPTH_TEXTURE_EXTENSION,
) -> RenderingParameters:
    """Look up the tier settings, then clamp them against the device."""
    level = QualityLevel.coerce(level)
    tier = QUALITY_TIERS[level]

    if capabilities.max_texture_size <= 0:
        shadow_map_size = LOW_TIER_SHADOW_MAP_SIZE
    else:
        shadow_map_size = min(tier.shadow_map_base_size, capabilities.max_texture_size // 2)

    return RenderingParameters(
        quality_level=level,
        shadow_map_size=shadow_map_size,
        pixel_ratio=min(tier.max_pixel_ratio, _sanitize_pixel_ratio(device_pixel_ratio)),
        antialiasing_enabled=(
            tier.antialiasing_allowed
            and capabilities.max_renderbuffer_size >= MIN_ANTIALIAS_RENDERBUFFER_SIZE
        ),
        shadows_enabled=bool(shadow_preference)
        and capabilities.supports_extension(depth_texture_extension),
        post_processing_enabled=bool(post_processing_preference),
    )


class QualityController:
    """Owns the active quality tier and the user's rendering preferences.

    The device pixel ratio is read from ``pixel_ratio_source`` each time
    parameters are requested, since moving the window to another monitor can
    change it.
    """

    def __init__(
        self,
        *,
        pixel_ratio_source: Callable[[], float] | None = None,
        shadow_preference: bool = True,
        post_processing_preference: bool = True,
        default_level: QualityLevel = DEFAULT_QUALITY_LEVEL,
        depth_texture_extension: str = DEPTH_TEXTURE_EXTENSION,
    ) -> None:
        self._pixel_ratio_source = pixel_ratio_source or (lambda: 1.0)
        self._shadow_preference = shadow_preference
        self._post_processing_preference = post_processing_preference
        self._default_level = QualityLevel.coerce(default_level)
        self._depth_texture_extension = depth_texture_extension
        self._capabilities = DeviceCapabilities.minimal()
        self._initialized = False
        self._capability_level = self._default_level
        self._override: QualityLevel | None = None
        self._lock = threading.Lock()

    @property
    def capabilities(self) -> DeviceCapabilities:
        with self._lock:
            return self._capabilities

    @property
    def capability_level(self) -> QualityLevel:
        with self._lock:
            return self._capability_level

    @property
    def override(self) -> QualityLevel | None:
        with self._lock:
            return self._override

    @property
    def current_level(self) -> QualityLevel:
        with self._lock:
            return self._active_level()

    @property
    def shadow_preference(self) -> bool:
        with self._lock:
            return self._shadow_preference

    @property
    def post_processing_preference(self) -> bool:
        with self._lock:
            return self._post_processing_preference

    def _active_level(self) -> QualityLevel:
        if self._override is not None:
            return self._override
        return self._capability_level

    def initialize(self, capabilities: DeviceCapabilities) -> QualityLevel:
        with self._lock:
            if self._initialized and capabilities == self._capabilities:
                return self._active_level()
            self._capabilities = capabilities
            self._capability_level = level_for_capabilities(capabilities, self._default_level)
            self._initialized = True
            logger.info(
                "Quality tier %s selected for max texture size %d",
                self._capability_level.name,
                capabilities.max_texture_size,
            )
            return self._active_level()

    def set_override(self, level: QualityLevel | int | None) -> None:
        with self._lock:
            if level is None:
                if self._override is not None:
                    logger.info(
                        "Quality override cleared; reverting to %s", self._capability_level.name
                    )
                self._override = None
                return
            self._override = QualityLevel.coerce(level)
            logger.info("Quality override set to %s", self._override.name)

    def set_shadow_preference(self, enabled: bool) -> None:
        with self._lock:
            self._shadow_preference = bool(enabled)

    def set_post_processing_preference(self, enabled: bool) -> None:
        with self._lock:
            self._post_processing_preference = bool(enabled)

    def set_pixel_ratio_source(self, source: Callable[[], float]) -> None:
        with self._lock:
            self._pixel_ratio_source = source

    def current_parameters(self) -> RenderingParameters:
        with self._lock:
            level = self._active_level()
            capabilities = self._capabilities
            shadow_preference = self._shadow_preference
            post_processing_preference = self._post_processing_preference
            source = self._pixel_ratio_source

        return derive_rendering_parameters(
            level,
            capabilities,
            shadow_preference=shadow_preference,
            post_processing_preference=post_processing_preference,
            device_pixel_ratio=source(),
            depth_texture_extension=self._depth_texture_extension,
        )


__all__ = [
    "QualityLevel",
    "DEFAULT_QUALITY_LEVEL",
    "TierSettings",
    "QUALITY_TIERS",
    "RenderingParameters",
    "tier_base_size",
    "level_for_capabilities",
    "derive_rendering_parameters",
    "QualityController",
]
