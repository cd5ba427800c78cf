from __future__ import annotations

import logging
import math

import pytest

from atucha.lattice.generator import (
    DEFAULT_GEOMETRY,
    ROW_PROFILE,
    LatticeCache,
    LatticeGeometry,
    generate,
    node_flux_fraction,
    node_temperature_c,
)


def test_design_counts_yield_451_tubes_and_37_rods() -> None:
    tubes, rods = generate(451, 12, 37)

    assert len(tubes) == 451
    assert len(rods) == 37
    assert [node.id for node in tubes] == list(range(451))
    assert [rod.id for rod in rods] == list(range(0, 37 * 12, 12))


def test_row_profile_is_symmetric_diamond() -> None:
    assert len(ROW_PROFILE) == 31
    assert sum(ROW_PROFILE) == 479
    assert ROW_PROFILE[0] == ROW_PROFILE[-1] == 1
    assert max(ROW_PROFILE) == 29
    assert tuple(reversed(ROW_PROFILE)) == ROW_PROFILE


def test_truncation_drops_nodes_from_the_tail() -> None:
    tubes, _ = generate(451, 12, 37)
    last = tubes[-1]

    assert last.row_index == 25
    assert last.column_index_in_row == 7
    assert len({node.row_index for node in tubes}) == 26

    full, _ = generate(DEFAULT_GEOMETRY.capacity, 12, 37)
    assert full[:451] == tubes


def test_first_node_position_and_attributes() -> None:
    tubes, _ = generate(451, 12, 37)
    first = tubes[0]

    assert first.position == (0.0, pytest.approx(-9.75))
    assert first.position_3d[1] == 0.0
    assert first.distance_from_center == pytest.approx(9.75)
    assert first.temperature_c == pytest.approx(280.0 + (15.0 - 9.75) * 12.0)
    assert first.flux_fraction == pytest.approx(1.0 - 9.75 / 15.0)


def test_columns_are_centred_within_each_row() -> None:
    tubes, _ = generate(4, 12, 37)

    assert [node.row_index for node in tubes] == [0, 1, 1, 1]
    assert [node.x for node in tubes[1:]] == pytest.approx([-0.65, 0.0, 0.65])
    assert all(node.z == pytest.approx(-9.1) for node in tubes[1:])


def test_generate_is_deterministic() -> None:
    first = generate(451, 12, 37)
    second = generate(451, 12, 37)

    assert first == second


def test_node_attributes_stay_in_range() -> None:
    tubes, _ = generate(DEFAULT_GEOMETRY.capacity, 1, 1000)

    for node in tubes:
        assert 0.0 <= node.flux_fraction <= 1.0
        assert math.isfinite(node.temperature_c)
        assert node.temperature_c >= 0.0
        assert node.distance_from_center == pytest.approx(math.hypot(node.x, node.z))


@pytest.mark.parametrize(
    ("target", "stride", "cap"),
    [(451, 12, 37), (451, 12, 10), (100, 7, 50), (1, 3, 5), (479, 1, 479), (50, 500, 3)],
)
def test_control_rod_count_and_subsequence(target: int, stride: int, cap: int) -> None:
    tubes, rods = generate(target, stride, cap)
    tube_ids = [node.id for node in tubes]
    rod_ids = [rod.id for rod in rods]

    assert len(rods) == min(cap, math.ceil(target / stride))
    assert rod_ids == sorted(set(rod_ids))
    assert set(rod_ids).issubset(tube_ids)
    assert all(rod_id % stride == 0 for rod_id in rod_ids)


def test_degenerate_counts_are_clamped() -> None:
    tubes, rods = generate(0, 12, 37)
    assert tubes == []
    assert rods == []

    tubes, rods = generate(20, 0, 5)
    assert [rod.id for rod in rods] == [0, 1, 2, 3, 4]

    _, rods = generate(20, 4, -3)
    assert rods == []


def test_oversized_target_returns_full_lattice_and_warns(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="atucha.lattice.generator"):
        tubes, _ = generate(1000, 12, 37)

    assert len(tubes) == DEFAULT_GEOMETRY.capacity
    assert "only holds 479" in caplog.text


def test_original_27_row_footprint_still_reaches_design_count() -> None:
    geometry = LatticeGeometry(row_profile=ROW_PROFILE[:27])
    tubes, rods = generate(451, 12, 37, geometry=geometry)

    assert geometry.capacity == 463
    assert len(tubes) == 451
    assert len(rods) == 37
    assert tubes[0].z == pytest.approx(-13 * 0.65)


def test_temperature_and_flux_are_clamped() -> None:
    hot_gradient = LatticeGeometry(max_radius=1.0, temperature_gradient_c=100.0)
    tubes, _ = generate(30, 12, 37, geometry=hot_gradient)

    assert all(node.temperature_c == 0.0 for node in tubes)
    assert all(node.flux_fraction == 0.0 for node in tubes)
    assert node_temperature_c(float("nan")) == DEFAULT_GEOMETRY.base_temperature_c
    assert node_flux_fraction(float("nan")) == 0.0


def test_geometry_validation() -> None:
    with pytest.raises(ValueError, match="row_profile"):
        LatticeGeometry(row_profile=())
    with pytest.raises(ValueError, match="row_spacing"):
        LatticeGeometry(row_spacing=0.0)
    with pytest.raises(ValueError, match="max_radius"):
        LatticeGeometry(max_radius=-1.0)


def test_cache_regenerates_only_when_counts_change() -> None:
    cache = LatticeCache()

    tubes_a, rods_a = cache.get(451, 12, 37)
    tubes_b, rods_b = cache.get(451, 12, 37)
    assert cache.generation_count == 1
    assert tubes_a == tubes_b
    assert rods_a == rods_b

    tubes_a.clear()
    assert len(cache.get(451, 12, 37)[0]) == 451
    assert cache.generation_count == 1

    _, rods_c = cache.get(451, 6, 37)
    assert cache.generation_count == 2
    assert len(rods_c) == 37

    cache.set_geometry(LatticeGeometry(row_spacing=0.7))
    cache.get(451, 6, 37)
    assert cache.generation_count == 3
