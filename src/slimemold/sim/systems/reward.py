from __future__ import annotations

import math
from typing import Iterable, Optional, TYPE_CHECKING

from ..core.agent import Agent
from ..types.sources import FoodSource

if TYPE_CHECKING:
    from ..core.world import World


def nearest_food_sources(
    x: float, y: float, food_sources: Iterable[FoodSource]
) -> tuple[float, Optional[FoodSource], float, Optional[FoodSource]]:
    """Distance and source of the nearest and second-nearest food."""
    nearest_dist = math.inf
    second_dist = math.inf
    nearest: Optional[FoodSource] = None
    second: Optional[FoodSource] = None
    for food in food_sources:
        dist = math.hypot(x - food.x, y - food.y)
        if dist < nearest_dist:
            second_dist = nearest_dist
            second = nearest
            nearest_dist = dist
            nearest = food
        elif dist < second_dist:
            second_dist = dist
            second = food
    return nearest_dist, nearest, second_dist, second


def calculate_reward(world: World, agent: Agent) -> float:
    """Score the agent's current situation and fold it into ``agent.fitness``.

    Overwrites ``agent.last_food_distance`` on every call, so the directional
    term always compares against the previous call, not the previous tick.
    """
    reward_config = world._config.reward
    conv = world.convergence
    x = agent.position.x
    y = agent.position.y
    dist, nearest, second_dist, second = nearest_food_sources(x, y, world.food_sources)
    trail_strength = world.field.trail_at(x, y)

    reward = 0.0

    if trail_strength > reward_config.strong_trail_threshold:
        reward += reward_config.strong_trail_bonus + conv * reward_config.strong_trail_growth
    elif trail_strength > reward_config.weak_trail_threshold:
        reward += reward_config.weak_trail_bonus

    # Without food there is no distance to score.
    if nearest is not None:
        if dist < reward_config.proximity_range:
            reward += (reward_config.proximity_range - dist) / reward_config.proximity_scale

        if dist > agent.last_food_distance:
            reward -= reward_config.retreat_penalty + conv * reward_config.retreat_penalty_growth
        elif dist < agent.last_food_distance:
            reward += reward_config.approach_bonus

        if dist > reward_config.far_distance:
            penalty = (dist - reward_config.far_distance) / reward_config.far_scale
            reward -= penalty * (1.0 + conv * reward_config.far_penalty_growth)

        if (
            second is not None
            and dist > reward_config.long_span_distance
            and second_dist < dist * reward_config.long_span_ratio
        ):
            reward -= reward_config.long_span_penalty * conv

    agent.last_food_distance = dist
    agent.fitness += reward * reward_config.fitness_gain
    agent.last_reward = reward
    return reward
