from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ..core.agent import Agent, BehaviorMode, classify_behavior, deposit_multiplier
from ..core.config import AgentConfig
from ..core.rng import DeterministicRng
from ..utils.math2d import _angle_delta, _bearing, _wrap_angle
from . import reward, sensing

if TYPE_CHECKING:
    from ..core.world import World


def exploration_factor(fitness: float, config: AgentConfig, struggling_below: float) -> float:
    if fitness > struggling_below:
        return config.exploration_factor
    return config.struggling_exploration_factor


def gradient_turn(
    forward: float, left: float, right: float, random_steer: float, rotation: float, rng: DeterministicRng
) -> float:
    """Heading change for an agent following its three sensor readings."""
    if forward > left and forward > right:
        return random_steer * 0.5
    if forward < left and forward < right:
        return rng.next_sign() * rotation + random_steer
    if right > left:
        return rotation + random_steer
    if left > right:
        return -(rotation + random_steer)
    return random_steer


def exploration_turn(config: AgentConfig, rng: DeterministicRng) -> float:
    if rng.next_float() < config.exploration_jump_chance:
        return rng.next_centered() * config.rotation_angle * config.exploration_jump_scale
    return 0.0


def homing_turn(world: World, agent: Agent, turn_fraction: float) -> float | None:
    _dist, nearest, _second_dist, _second = reward.nearest_food_sources(
        agent.position.x, agent.position.y, world.food_sources
    )
    if nearest is None:
        return None
    target = _bearing(agent.position.x, agent.position.y, nearest.x, nearest.y)
    return _angle_delta(agent.heading, target) * turn_fraction


def steer(world: World, agent: Agent, forward: float, left: float, right: float) -> BehaviorMode:
    config = world._config
    agent_config = config.agent
    rng = world._rng
    factor = exploration_factor(agent.fitness, agent_config, config.bands.struggling_below)
    random_steer = rng.next_centered() * factor

    mode = classify_behavior(
        agent.fitness, forward + left + right, config.bands, agent_config.exploration_signal_threshold
    )
    turn: float | None = None
    if mode is BehaviorMode.LOST:
        turn = homing_turn(world, agent, agent_config.lost_turn_fraction)
    elif mode is BehaviorMode.EXPLORING:
        turn = exploration_turn(agent_config, rng)
    if turn is None:
        # Lost with no food on the plate: nothing to home in on.
        turn = gradient_turn(forward, left, right, random_steer, agent_config.rotation_angle, rng)

    agent.heading = _wrap_angle(agent.heading + turn)
    agent.mode = mode
    return mode


def move(world: World, agent: Agent) -> bool:
    """Advance one step inside the plate; returns False if the agent hit the rim."""
    agent_config = world._config.agent
    field = world.field
    step = agent_config.step_size
    position = agent.position
    new_x = position.x + math.cos(agent.heading) * step
    new_y = position.y + math.sin(agent.heading) * step
    if field.within_plate(new_x, new_y):
        position.x = new_x
        position.y = new_y
        return True

    center_x, center_y = field.center
    inward = _bearing(position.x, position.y, center_x, center_y)
    agent.heading = _wrap_angle(inward + world._rng.next_centered() * agent_config.boundary_jitter)
    agent.fitness -= agent_config.boundary_penalty
    new_x = position.x + math.cos(agent.heading) * step
    new_y = position.y + math.sin(agent.heading) * step
    if field.within_plate(new_x, new_y):
        position.x = new_x
        position.y = new_y
    return False


def update_agent(world: World, agent: Agent) -> None:
    reward.calculate_reward(world, agent)
    forward, left, right = sensing.sense_all(world, agent)
    steer(world, agent, forward, left, right)
    move(world, agent)
    reward.calculate_reward(world, agent)
    multiplier = deposit_multiplier(agent.fitness, world._config.bands)
    world.field.deposit(agent.position.x, agent.position.y, world._config.agent.deposit_amount * multiplier)
