from __future__ import annotations

import pytest

from atucha.capabilities.probe import DeviceCapabilities
from atucha.quality.controller import (
    QUALITY_TIERS,
    QualityController,
    QualityLevel,
    derive_rendering_parameters,
    level_for_capabilities,
    tier_base_size,
)

DEPTH_EXT = "WEBGL_depth_texture"


def _caps(
    max_texture_size: int = 8192,
    max_renderbuffer_size: int = 8192,
    extensions: tuple[str, ...] = (DEPTH_EXT,),
    *,
    is_mobile: bool = False,
) -> DeviceCapabilities:
    return DeviceCapabilities(
        supports_basic_rendering=True,
        supports_advanced_rendering=True,
        max_texture_size=max_texture_size,
        max_renderbuffer_size=max_renderbuffer_size,
        max_vertex_uniforms=4096,
        max_fragment_uniforms=1024,
        supported_extensions=frozenset(extensions),
        is_mobile=is_mobile,
    )


@pytest.mark.parametrize(
    ("max_texture_size", "expected"),
    [
        (1024, QualityLevel.LOW),
        (2047, QualityLevel.LOW),
        (2048, QualityLevel.MEDIUM),
        (3000, QualityLevel.MEDIUM),
        (4096, QualityLevel.HIGH),
        (8192, QualityLevel.HIGH),
    ],
)
def test_texture_thresholds_select_tier(max_texture_size: int, expected: QualityLevel) -> None:
    controller = QualityController()

    assert controller.initialize(_caps(max_texture_size)) is expected
    assert controller.current_level is expected
    assert controller.current_parameters().quality_level is expected


def test_mobile_devices_start_low() -> None:
    assert level_for_capabilities(_caps(16384, is_mobile=True)) is QualityLevel.LOW


def test_override_wins_until_cleared() -> None:
    controller = QualityController()
    controller.initialize(_caps(1024))

    controller.set_override(QualityLevel.ULTRA)
    assert controller.current_level is QualityLevel.ULTRA
    assert controller.initialize(_caps(1024)) is QualityLevel.ULTRA
    assert controller.initialize(_caps(8192)) is QualityLevel.ULTRA
    assert controller.capability_level is QualityLevel.HIGH

    controller.set_override(None)
    assert controller.override is None
    assert controller.current_level is QualityLevel.HIGH


def test_override_integers_are_clamped() -> None:
    controller = QualityController()
    controller.set_override(9)
    assert controller.current_level is QualityLevel.ULTRA
    controller.set_override(0)
    assert controller.current_level is QualityLevel.LOW


def test_initialize_is_idempotent_for_same_capabilities() -> None:
    controller = QualityController()
    caps = _caps(3000)

    first = controller.initialize(caps)
    second = controller.initialize(_caps(3000))

    assert first is second is QualityLevel.MEDIUM


@pytest.mark.parametrize("level", list(QualityLevel))
@pytest.mark.parametrize("max_texture_size", [512, 1024, 2048, 3000, 4096, 8192, 16384])
def test_shadow_map_never_exceeds_half_texture_size(
    level: QualityLevel, max_texture_size: int
) -> None:
    params = derive_rendering_parameters(level, _caps(max_texture_size))

    assert params.shadow_map_size <= max_texture_size / 2
    assert params.shadow_map_size == min(tier_base_size(level), max_texture_size // 2)


def test_tier_table_base_sizes() -> None:
    assert tier_base_size(QualityLevel.LOW) == 512
    assert tier_base_size(QualityLevel.MEDIUM) == 1024
    assert tier_base_size(QualityLevel.HIGH) == 2048
    assert tier_base_size(QualityLevel.ULTRA) == 2048
    assert set(QUALITY_TIERS) == set(QualityLevel)


def test_degenerate_texture_size_falls_back_to_low_defaults() -> None:
    controller = QualityController()
    controller.initialize(_caps(0))
    params = controller.current_parameters()

    assert params.quality_level is QualityLevel.LOW
    assert params.shadow_map_size == 512

    negative = derive_rendering_parameters(QualityLevel.HIGH, _caps(-64))
    assert negative.shadow_map_size == 512


def test_pixel_ratio_is_capped_by_tier_and_repolled() -> None:
    ratio = [3.0]
    controller = QualityController(pixel_ratio_source=lambda: ratio[0])
    controller.initialize(_caps(8192))

    assert controller.current_parameters().pixel_ratio == 1.0

    controller.set_override(QualityLevel.ULTRA)
    assert controller.current_parameters().pixel_ratio == 2.0

    ratio[0] = 1.5
    assert controller.current_parameters().pixel_ratio == 1.5

    ratio[0] = 0.75
    controller.set_override(QualityLevel.HIGH)
    assert controller.current_parameters().pixel_ratio == 0.75


@pytest.mark.parametrize("bad_ratio", [0.0, -2.0, float("nan"), float("inf")])
def test_invalid_pixel_ratio_treated_as_one(bad_ratio: float) -> None:
    params = derive_rendering_parameters(
        QualityLevel.ULTRA, _caps(8192), device_pixel_ratio=bad_ratio
    )
    assert params.pixel_ratio == 1.0


def test_antialiasing_requires_medium_tier_and_renderbuffer() -> None:
    assert not derive_rendering_parameters(QualityLevel.LOW, _caps()).antialiasing_enabled
    assert derive_rendering_parameters(QualityLevel.MEDIUM, _caps()).antialiasing_enabled
    assert not derive_rendering_parameters(
        QualityLevel.ULTRA, _caps(max_renderbuffer_size=512)
    ).antialiasing_enabled
    assert derive_rendering_parameters(
        QualityLevel.MEDIUM, _caps(max_renderbuffer_size=1024)
    ).antialiasing_enabled


def test_shadows_need_preference_and_depth_texture_extension() -> None:
    controller = QualityController()
    controller.initialize(_caps(extensions=()))
    assert controller.current_parameters().shadows_enabled is False

    controller.initialize(_caps())
    assert controller.current_parameters().shadows_enabled is True

    controller.set_shadow_preference(False)
    assert controller.current_parameters().shadows_enabled is False


def test_post_processing_follows_preference() -> None:
    controller = QualityController(post_processing_preference=False)
    controller.initialize(_caps())
    assert controller.current_parameters().post_processing_enabled is False

    controller.set_post_processing_preference(True)
    assert controller.current_parameters().post_processing_enabled is True


def test_parameters_before_initialize_use_minimal_capabilities() -> None:
    params = QualityController().current_parameters()

    assert params.quality_level is QualityLevel.HIGH
    assert params.shadow_map_size == 512
    assert params.antialiasing_enabled is False
    assert params.shadows_enabled is False


def test_parameters_to_dict_is_serializable() -> None:
    payload = derive_rendering_parameters(QualityLevel.MEDIUM, _caps(3000)).to_dict()

    assert payload["quality_level"] == 2
    assert payload["quality_name"] == "MEDIUM"
    assert payload["shadow_map_size"] == 1024
