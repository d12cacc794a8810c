from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy.ndimage import uniform_filter

from ..core.config import DiffusionConfig
from ..core.field import GridField

if TYPE_CHECKING:
    from ..core.world import World


def blur_interior(trail: np.ndarray, scratch: np.ndarray) -> None:
    """3x3 box mean of ``trail`` written into the interior of ``scratch``.

    Border rows and columns of ``scratch`` are left untouched.
    """
    if trail.shape[0] < 3 or trail.shape[1] < 3:
        return
    scratch[1:-1, 1:-1] = uniform_filter(trail, size=3, mode="nearest")[1:-1, 1:-1]


def blend(trail: np.ndarray, scratch: np.ndarray, diffuse_rate: float) -> None:
    trail *= 1.0 - diffuse_rate
    trail += scratch * diffuse_rate


def pruning_threshold(config: DiffusionConfig, convergence: float) -> float:
    return config.pruning_threshold + convergence * config.pruning_threshold_growth


def pruning_rate(config: DiffusionConfig, convergence: float) -> float:
    return config.pruning_rate - convergence * config.pruning_rate_drop


def decay_and_prune(trail: np.ndarray, config: DiffusionConfig, convergence: float) -> None:
    trail *= 1.0 - config.decay_speed * 0.001
    weak = trail < pruning_threshold(config, convergence)
    trail[weak] *= pruning_rate(config, convergence)
    trail[trail < config.zero_floor] = 0.0


def diffuse_trails(field: GridField, config: DiffusionConfig, convergence: float) -> None:
    # scratch is filled from the untouched trail before any trail cell is written.
    blur_interior(field.trail, field.scratch)
    blend(field.trail, field.scratch, config.diffuse_rate)
    decay_and_prune(field.trail, config, convergence)


def tick_diffusion(world: World) -> None:
    diffuse_trails(world.field, world._config.diffusion, world.convergence)
