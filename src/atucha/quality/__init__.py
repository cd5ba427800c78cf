from atucha.quality.controller import (
    DEFAULT_QUALITY_LEVEL,
    QUALITY_TIERS,
    QualityController,
    QualityLevel,
    RenderingParameters,
    derive_rendering_parameters,
    level_for_capabilities,
    tier_base_size,
)

__all__ = [
    "DEFAULT_QUALITY_LEVEL",
    "QUALITY_TIERS",
    "QualityController",
    "QualityLevel",
    "RenderingParameters",
    "derive_rendering_parameters",
    "level_for_capabilities",
    "tier_base_size",
]
