from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    food_sources: int
    mold_sources: int
    trail_mass: float
    max_trail: float
    vein_cells: int
    average_fitness: float
    lost: int
    exploring: int
    normal: int
    convergence: float
    tick_duration_ms: float = 0.0
