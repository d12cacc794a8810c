from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.agent import BehaviorMode
from ..types.metrics import TickMetrics

if TYPE_CHECKING:
    from ..core.world import World


def create_metrics(world: World, duration_ms: float) -> TickMetrics:
    field = world.field
    counts = {mode: 0 for mode in BehaviorMode}
    fitness_sum = 0.0
    for agent in world.agents:
        counts[agent.mode] += 1
        fitness_sum += agent.fitness
    population = len(world.agents)
    return TickMetrics(
        tick=world.tick,
        population=population,
        food_sources=len(world.food_sources),
        mold_sources=len(world.mold_sources),
        trail_mass=field.trail_mass(),
        max_trail=field.max_trail(),
        vein_cells=field.count_above(world._config.vein_threshold),
        average_fitness=0.0 if population == 0 else fitness_sum / population,
        lost=counts[BehaviorMode.LOST],
        exploring=counts[BehaviorMode.EXPLORING],
        normal=counts[BehaviorMode.NORMAL],
        convergence=world.convergence,
        tick_duration_ms=duration_ms,
    )
