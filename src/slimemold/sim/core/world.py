from __future__ import annotations

import copy
import logging
import math
from time import perf_counter
from typing import Any, Dict, List, Optional

from pygame.math import Vector2

from .agent import Agent
from .config import TUNABLE_PARAMETERS, SimulationConfig
from .field import GridField
from .rng import DeterministicRng
from ..systems import diffusion, metrics as metrics_system, sensing, steering
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotFields, SnapshotMetadata, SnapshotWorld
from ..types.sources import FoodSource, MoldSource
from ..utils.math2d import TAU, _clamp_value

logger = logging.getLogger(__name__)

_PLATE_EPSILON = 1e-6


class World:
    """Owns the grid, the agent population and the tick counter.

    Placement and parameter calls are only valid between ticks; use the
    ``queue_*`` variants to schedule a placement for the start of the next
    ``step()``.
    """

    def __init__(self, config: SimulationConfig, rng: Optional[DeterministicRng] = None):
        self._config = copy.deepcopy(config)
        self._rng = rng if rng is not None else DeterministicRng(config.seed)
        self.field = GridField.from_config(config)
        self._agents: List[Agent] = []
        self._food_sources: List[FoodSource] = []
        self._mold_sources: List[MoldSource] = []
        self._pending_placements: List[tuple[str, float, float]] = []
        self._tick = 0
        self._next_id = 0
        self._metrics: TickMetrics | None = None
        self._parameter_defaults = self.parameters()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def food_sources(self) -> List[FoodSource]:
        return self._food_sources

    @property
    def mold_sources(self) -> List[MoldSource]:
        return self._mold_sources

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def convergence(self) -> float:
        return sensing.convergence(self._tick, self._config.convergence_horizon)

    def place_mold_source(self, x: float, y: float) -> bool:
        """Spawn a batch of agents around (x, y); points off the plate are ignored."""
        if not self.field.within_plate(x, y):
            logger.debug("ignoring mold source off the plate at (%.1f, %.1f)", x, y)
            return False
        sources = self._config.sources
        source = MoldSource(id=len(self._mold_sources), x=float(x), y=float(y), radius=sources.mold_radius)
        self._mold_sources.append(source)
        self._spawn_agents(source, int(sources.agents_per_source))
        self.field.stamp_trail_blob(
            x, y, sources.mold_radius, sources.mold_blob_base, sources.mold_blob_spread, sources.mold_blob_falloff
        )
        logger.debug("mold source %d at (%.1f, %.1f), population %d", source.id, x, y, len(self._agents))
        return True

    def place_food_source(self, x: float, y: float) -> bool:
        if not self.field.within_plate(x, y):
            logger.debug("ignoring food source off the plate at (%.1f, %.1f)", x, y)
            return False
        sources = self._config.sources
        self._food_sources.append(FoodSource(x=float(x), y=float(y), radius=sources.food_radius))
        self.field.stamp_food_gradient(x, y, sources)
        logger.debug("food source at (%.1f, %.1f), total %d", x, y, len(self._food_sources))
        return True

    def queue_mold_source(self, x: float, y: float) -> None:
        self._pending_placements.append(("mold", float(x), float(y)))

    def queue_food_source(self, x: float, y: float) -> None:
        self._pending_placements.append(("food", float(x), float(y)))

    def step(self) -> TickMetrics:
        start = perf_counter()
        self._tick += 1
        self._apply_pending_placements()

        for agent in self._agents:
            steering.update_agent(self, agent)

        diffusion.tick_diffusion(self)

        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(self, duration_ms)
        return self._metrics

    def reset(self) -> None:
        self._clear_population()
        self._pending_placements.clear()
        self._rng.reset()
        self._tick = 0
        self._next_id = 0
        self._metrics = None
        logger.info("world reset")

    def auto_setup(self, food_count: Optional[int] = None) -> int:
        """Mold in the centre and food scattered around it; returns the number of food sources placed."""
        setup = self._config.auto_setup
        sources = self._config.sources
        target = setup.food_count if food_count is None else max(0, int(food_count))
        self._clear_population()

        center_x, center_y = self.field.center
        mold = MoldSource(id=0, x=center_x, y=center_y, radius=sources.mold_radius)
        self._mold_sources.append(mold)
        self._spawn_agents(mold, int(sources.agents_per_source))
        self.field.stamp_trail_blob(
            center_x,
            center_y,
            sources.mold_radius,
            setup.mold_blob_base,
            setup.mold_blob_spread,
            setup.mold_blob_falloff,
        )

        outer = min(self.field.width, self.field.height) / 2.0 - setup.plate_inset
        inner = setup.min_distance_from_center
        attempts = 0
        while len(self._food_sources) < target and attempts < setup.max_attempts:
            attempts += 1
            angle = self._rng.next_angle()
            distance = inner + self._rng.next_float() * (outer - inner)
            x = center_x + math.cos(angle) * distance
            y = center_y + math.sin(angle) * distance
            if not self.field.within_plate(x, y):
                continue
            if any(math.hypot(x - food.x, y - food.y) < setup.min_food_spacing for food in self._food_sources):
                continue
            self.place_food_source(x, y)

        logger.info(
            "auto setup placed %d/%d food sources in %d attempts", len(self._food_sources), target, attempts
        )
        return len(self._food_sources)

    def parameters(self) -> Dict[str, float]:
        return {
            name: getattr(getattr(self._config, section), attr)
            for name, (section, attr, _low, _high) in TUNABLE_PARAMETERS.items()
        }

    def set_parameters(self, **values: float) -> None:
        unknown = sorted(set(values) - set(TUNABLE_PARAMETERS))
        if unknown:
            raise ValueError(f"Unknown parameter(s): {', '.join(unknown)}")
        for name, value in values.items():
            section, attr, low, high = TUNABLE_PARAMETERS[name]
            value = float(value)
            if math.isnan(value):
                logger.warning("ignoring NaN for parameter %s", name)
                continue
            clamped = _clamp_value(value, low, high)
            if name == "agents_per_source":
                clamped = int(clamped)
            setattr(getattr(self._config, section), attr, clamped)
            logger.debug("parameter %s set to %s", name, clamped)

    def reset_parameters(self) -> None:
        self.set_parameters(**self._parameter_defaults)

    def stats(self) -> Dict[str, int]:
        return {
            "agents": len(self._agents),
            "food_sources": len(self._food_sources),
            "mold_sources": len(self._mold_sources),
        }

    def snapshot(self) -> Snapshot:
        metrics = self._metrics if self._metrics is not None else metrics_system.create_metrics(self, 0.0)
        return Snapshot(
            tick=self._tick,
            metrics=metrics,
            agents=[self._agent_snapshot(agent) for agent in self._agents],
            food_sources=[{"x": food.x, "y": food.y, "radius": food.radius} for food in self._food_sources],
            mold_sources=[
                {"id": mold.id, "x": mold.x, "y": mold.y, "radius": mold.radius} for mold in self._mold_sources
            ],
            world=SnapshotWorld(
                width=self.field.width, height=self.field.height, plate_radius=self.field.plate_radius
            ),
            metadata=SnapshotMetadata(
                seed=self._rng.seed,
                config_version=self._config.config_version,
                convergence_horizon=self._config.convergence_horizon,
            ),
            fields=SnapshotFields(trail=self.field.trail.copy(), food=self.field.food.copy()),
        )

    def _agent_snapshot(self, agent: Agent) -> Dict[str, Any]:
        return {
            "id": agent.id,
            "x": agent.position.x,
            "y": agent.position.y,
            "heading": agent.heading,
            "fitness": agent.fitness,
            "last_reward": agent.last_reward,
            "mode": agent.mode.value,
            "source": agent.source_id,
        }

    def _spawn_agents(self, source: MoldSource, count: int) -> None:
        spawn_radius = self._config.sources.spawn_radius
        for i in range(count):
            angle = (i / count) * TAU
            radius = self._rng.next_float() * spawn_radius
            position = self._confine_to_plate(
                Vector2(source.x + math.cos(angle) * radius, source.y + math.sin(angle) * radius)
            )
            self._agents.append(Agent(id=self._next_id, position=position, heading=angle, source_id=source.id))
            self._next_id += 1

    def _confine_to_plate(self, position: Vector2) -> Vector2:
        if self.field.within_plate(position.x, position.y):
            return position
        center = Vector2(self.field.center)
        offset = position - center
        limit = max(0.0, self.field.plate_radius - _PLATE_EPSILON)
        if offset.length_squared() <= 1e-12:
            return center
        offset.scale_to_length(limit)
        return center + offset

    def _apply_pending_placements(self) -> None:
        if not self._pending_placements:
            return
        pending = self._pending_placements
        self._pending_placements = []
        for kind, x, y in pending:
            if kind == "mold":
                self.place_mold_source(x, y)
            else:
                self.place_food_source(x, y)

    def _clear_population(self) -> None:
        self._agents.clear()
        self._food_sources.clear()
        self._mold_sources.clear()
        self.field.clear()
