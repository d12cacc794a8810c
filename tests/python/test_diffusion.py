from __future__ import annotations

import numpy as np
import pytest

from slimemold.sim.core.config import DiffusionConfig
from slimemold.sim.core.field import GridField
from slimemold.sim.systems.diffusion import (
    blend,
    blur_interior,
    decay_and_prune,
    diffuse_trails,
    pruning_rate,
    pruning_threshold,
)


def test_blur_writes_interior_mean_and_leaves_border_alone():
    trail = np.zeros((5, 5), dtype=np.float32)
    trail[2, 2] = 9.0
    scratch = np.full((5, 5), -1.0, dtype=np.float32)

    blur_interior(trail, scratch)

    assert np.allclose(scratch[1:4, 1:4], 1.0)
    assert np.all(scratch[0, :] == -1.0)
    assert np.all(scratch[:, 0] == -1.0)
    assert np.all(scratch[4, :] == -1.0)
    assert np.all(scratch[:, 4] == -1.0)
    # Source is read-only during the blur.
    assert trail[2, 2] == 9.0


def test_blur_matches_neighbourhood_mean_on_random_trail():
    trail = (np.random.default_rng(5).random((12, 9)) * 255.0).astype(np.float32)
    scratch = np.zeros_like(trail)

    blur_interior(trail, scratch)

    for y in range(1, 11):
        for x in range(1, 8):
            expected = trail[y - 1 : y + 2, x - 1 : x + 2].mean(dtype=np.float64)
            assert scratch[y, x] == pytest.approx(expected, rel=1e-4)
    assert not scratch[0, :].any()
    assert not scratch[:, -1].any()


def test_blend_mixes_scratch_and_trail():
    trail = np.full((3, 3), 10.0, dtype=np.float32)
    scratch = np.full((3, 3), 20.0, dtype=np.float32)

    blend(trail, scratch, 0.7)

    assert np.allclose(trail, 17.0)


def test_uniform_interior_survives_blur_and_blend():
    field = GridField(6, 6, boundary_margin=0.0)
    field.trail.fill(50.0)
    config = DiffusionConfig(decay_speed=0.0, pruning_threshold=0.0, pruning_threshold_growth=0.0)

    diffuse_trails(field, config, convergence=0.0)

    assert np.allclose(field.trail[1:-1, 1:-1], 50.0)
    # Border scratch stays zero so edges drain by the diffuse rate.
    assert np.allclose(field.trail[0, :], 15.0)
    assert np.allclose(field.trail[:, -1], 15.0)


def test_decay_and_prune_never_increase_any_cell():
    rng = np.random.default_rng(3)
    config = DiffusionConfig()
    for convergence in (0.0, 0.25, 0.5, 1.0):
        for decay_speed in (1.0, 5.0, 10.0):
            config.decay_speed = decay_speed
            trail = (rng.random((40, 40)) * 255.0).astype(np.float32)
            trail[::7, ::5] = 0.0
            trail[::3, ::11] = 1.0
            before = trail.copy()

            decay_and_prune(trail, config, convergence)

            assert np.all(trail <= before)
            assert np.all(trail >= 0.0)


def test_decay_factor_from_decay_speed():
    trail = np.array([[100.0]], dtype=np.float32)

    decay_and_prune(trail, DiffusionConfig(decay_speed=5.0), convergence=0.0)

    assert trail[0, 0] == pytest.approx(99.5)


def test_weak_cells_are_pruned_then_floored():
    config = DiffusionConfig(decay_speed=1.0)
    trail = np.array([[1.5, 0.305, 50.0]], dtype=np.float32)

    decay_and_prune(trail, config, convergence=0.0)

    assert trail[0, 0] == pytest.approx(1.5 * 0.999 * 0.97, rel=1e-5)
    assert trail[0, 1] == 0.0
    assert trail[0, 2] == pytest.approx(50.0 * 0.999, rel=1e-5)


def test_pruning_scales_with_convergence():
    config = DiffusionConfig()

    assert pruning_threshold(config, 0.0) == pytest.approx(2.0)
    assert pruning_threshold(config, 1.0) == pytest.approx(10.0)
    assert pruning_rate(config, 0.0) == pytest.approx(0.97)
    assert pruning_rate(config, 1.0) == pytest.approx(0.87)

    trail = np.array([[5.0]], dtype=np.float32)
    decay_and_prune(trail, DiffusionConfig(decay_speed=1.0), convergence=1.0)
    assert trail[0, 0] == pytest.approx(5.0 * 0.999 * 0.87, rel=1e-5)


def test_diffusion_spreads_a_point_into_its_neighbourhood():
    field = GridField(9, 9, boundary_margin=0.0)
    field.trail[4, 4] = 90.0

    diffuse_trails(field, DiffusionConfig(decay_speed=1.0), convergence=0.0)

    centre = 90.0 * 0.3 + 10.0 * 0.7
    neighbour = 10.0 * 0.7
    assert field.trail[4, 4] == pytest.approx(centre * 0.999, rel=1e-5)
    assert field.trail[3, 3] == pytest.approx(neighbour * 0.999, rel=1e-5)
    assert field.trail[2, 2] == 0.0
