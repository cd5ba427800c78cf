from __future__ import annotations

import math

import pytest

from atucha.lattice.generator import generate
from atucha.lattice.visuals import (
    core_pulse_scale,
    fuel_emissive_intensity,
    lattice_to_frame,
    plant_rotation,
    summarize_lattice,
    tube_emissive_intensity,
)


def test_fuel_emissive_is_pure_function_of_flux_and_time() -> None:
    assert fuel_emissive_intensity(0.8, 3.2, 17) == fuel_emissive_intensity(0.8, 3.2, 17)
    assert fuel_emissive_intensity(0.0, 5.0, 3) == 0.0
    assert fuel_emissive_intensity(0.5, 0.0, 0) == pytest.approx(0.5 * 0.4)

    samples = [fuel_emissive_intensity(1.0, t * 0.1, 42) for t in range(200)]
    assert min(samples) >= 0.35 - 1e-9
    assert max(samples) <= 0.45 + 1e-9


def test_paused_playback_freezes_animation() -> None:
    assert fuel_emissive_intensity(0.6, 12.3, 9, playing=False) == pytest.approx(0.24)
    assert core_pulse_scale(7.0, playing=False) == 1.0
    assert plant_rotation(7.0, playing=False) == 0.0


def test_core_pulse_and_rotation_bounds() -> None:
    for t in (0.0, 1.0, 3.14, 100.0):
        assert 0.995 <= core_pulse_scale(t) <= 1.005
        assert 0.0 <= plant_rotation(t) < 2.0 * math.pi
    assert plant_rotation(10.0) == pytest.approx(0.5)


def test_tube_emissive_clamps_flux() -> None:
    assert tube_emissive_intensity(2.0) == pytest.approx(0.15)
    assert tube_emissive_intensity(-1.0) == 0.0


def test_lattice_to_frame_marks_control_rods() -> None:
    tubes, rods = generate(451, 12, 37)
    df = lattice_to_frame(tubes, rods)

    assert len(df) == 451
    assert {"id", "x", "z", "temperature_c", "flux_fraction", "is_control_rod"}.issubset(
        set(df.columns)
    )
    assert int(df["is_control_rod"].sum()) == 37
    assert df["flux_fraction"].between(0.0, 1.0).all()


def test_summarize_lattice_reports_counts_and_ranges() -> None:
    tubes, rods = generate(451, 12, 37)
    summary = summarize_lattice(tubes, rods)

    assert summary["tube_count"] == 451
    assert summary["control_rod_count"] == 37
    assert summary["row_count"] == 26
    assert summary["min_temperature_c"] <= summary["mean_temperature_c"]
    assert summary["mean_temperature_c"] <= summary["max_temperature_c"]
    assert summary["max_temperature_c"] == pytest.approx(280.0 + 15.0 * 12.0)

    empty = summarize_lattice([], [])
    assert empty["tube_count"] == 0.0
