from __future__ import annotations

import math

import pytest
from pygame.math import Vector2

from slimemold.sim.core.agent import Agent
from slimemold.sim.core.config import SimulationConfig, SourceConfig
from slimemold.sim.core.world import World
from slimemold.sim.systems.sensing import convergence, sense, sense_all, trail_weight


def _world() -> World:
    return World(SimulationConfig(width=100, height=100, seed=11, sources=SourceConfig(agents_per_source=0)))


def test_convergence_ramp_is_monotone_and_bounded():
    values = [convergence(tick, 3000) for tick in range(0, 4000, 7)]

    assert values == sorted(values)
    assert all(0.0 <= value <= 1.0 for value in values)
    assert convergence(0, 3000) == 0.0
    assert convergence(1500, 3000) == pytest.approx(0.5)
    assert convergence(3000, 3000) == 1.0
    assert convergence(10_000, 3000) == 1.0


def test_convergence_with_empty_horizon_is_fully_converged():
    assert convergence(0, 0) == 1.0


def test_trail_weight_grows_with_convergence():
    world = _world()

    assert trail_weight(world) == pytest.approx(0.3)
    world._tick = 3000
    assert trail_weight(world) == pytest.approx(1.5)


def test_sense_off_grid_returns_zero():
    world = _world()
    world.field.trail.fill(200.0)
    world.set_parameters(sensor_distance=1000.0)
    agent = Agent(id=0, position=Vector2(50.0, 50.0), heading=0.0)

    assert sense(world, agent, 0.0) == 0.0


def test_sense_averages_capped_trail_and_food():
    world = _world()
    world.field.trail.fill(100.0)
    world.field.food.fill(2.0)
    agent = Agent(id=0, position=Vector2(50.0, 50.0), heading=0.0)

    assert sense(world, agent, 0.0) == pytest.approx(100.0 * 0.3 + 2.0 * 10.0)

    world._tick = 3000
    # 100 * 1.5 is capped at 80 per cell.
    assert sense(world, agent, 0.0) == pytest.approx(80.0 + 20.0)


def test_sense_near_edge_averages_only_cells_on_grid():
    world = _world()
    world.field.trail[:, 0] = 100.0
    agent = Agent(id=0, position=Vector2(30.5, 50.5), heading=math.pi)

    # Window covers columns 0..2 and five rows; only column 0 carries trail.
    assert sense(world, agent, 0.0) == pytest.approx(5 * 30.0 / 15)


def test_sense_all_distinguishes_left_and_right():
    world = _world()
    world.field.trail[:44, :] = 100.0
    agent = Agent(id=0, position=Vector2(30.5, 50.5), heading=0.0)

    forward, left, right = sense_all(world, agent)

    assert forward == 0.0
    assert right == 0.0
    assert left == pytest.approx(30.0)
