from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from ..core.agent import Agent

if TYPE_CHECKING:
    from ..core.world import World


def convergence(tick: int, horizon: int) -> float:
    """Ramp from 0 to 1 over ``horizon`` ticks, then held at 1."""
    if horizon <= 0:
        return 1.0
    return min(max(tick, 0) / horizon, 1.0)


def trail_weight(world: World) -> float:
    agent_config = world._config.agent
    return agent_config.base_trail_weight + world.convergence * agent_config.trail_weight_growth


def sense(world: World, agent: Agent, offset_angle: float, weight: float | None = None) -> float:
    agent_config = world._config.agent
    angle = agent.heading + offset_angle
    sensor_x = agent.position.x + math.cos(angle) * agent_config.sensor_distance
    sensor_y = agent.position.y + math.sin(angle) * agent_config.sensor_distance
    block = world.field.window(sensor_x, sensor_y, agent_config.sensor_radius)
    if block is None:
        return 0.0
    if weight is None:
        weight = trail_weight(world)
    trail = world.field.trail[block]
    food = world.field.food[block]
    values = np.minimum(trail * weight, agent_config.trail_signal_cap) + food * agent_config.food_attraction
    return float(values.mean())


def sense_all(world: World, agent: Agent) -> tuple[float, float, float]:
    """Forward, left and right readings for one agent."""
    weight = trail_weight(world)
    sensor_angle = world._config.agent.sensor_angle
    forward = sense(world, agent, 0.0, weight)
    left = sense(world, agent, -sensor_angle, weight)
    right = sense(world, agent, sensor_angle, weight)
    return forward, left, right
