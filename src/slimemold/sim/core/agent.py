from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from pygame.math import Vector2

from .config import FitnessBandConfig


class BehaviorMode(str, Enum):
    LOST = "Lost"
    EXPLORING = "Exploring"
    NORMAL = "Normal"


class FitnessBand(str, Enum):
    THRIVING = "Thriving"
    NEUTRAL = "Neutral"
    STRUGGLING = "Struggling"


@dataclass(slots=True)
class Agent:
    id: int
    position: Vector2
    heading: float
    fitness: float = 0.0
    last_food_distance: float = math.inf
    mode: BehaviorMode = BehaviorMode.NORMAL
    source_id: int = 0
    last_reward: float = 0.0


def classify_behavior(
    fitness: float, total_signal: float, bands: FitnessBandConfig, exploration_threshold: float
) -> BehaviorMode:
    if fitness < bands.lost_below:
        return BehaviorMode.LOST
    if total_signal < exploration_threshold:
        return BehaviorMode.EXPLORING
    return BehaviorMode.NORMAL


def fitness_band(fitness: float, bands: FitnessBandConfig) -> FitnessBand:
    if fitness > bands.thriving_above:
        return FitnessBand.THRIVING
    if fitness < bands.struggling_below:
        return FitnessBand.STRUGGLING
    return FitnessBand.NEUTRAL


def deposit_multiplier(fitness: float, bands: FitnessBandConfig) -> float:
    band = fitness_band(fitness, bands)
    if band is FitnessBand.THRIVING:
        return bands.thriving_multiplier
    if band is FitnessBand.STRUGGLING:
        return bands.struggling_multiplier
    return 1.0
