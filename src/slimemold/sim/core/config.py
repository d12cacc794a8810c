from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class AgentConfig:
    sensor_angle: float = 0.45
    sensor_distance: float = 30.0
    sensor_radius: int = 2
    rotation_angle: float = 0.4
    step_size: float = 3.0
    deposit_amount: float = 6.0
    food_attraction: float = 10.0
    base_trail_weight: float = 0.3
    trail_weight_growth: float = 1.2
    trail_signal_cap: float = 80.0
    exploration_signal_threshold: float = 80.0
    exploration_jump_chance: float = 0.6
    exploration_jump_scale: float = 4.0
    exploration_factor: float = 0.6
    struggling_exploration_factor: float = 0.3
    lost_turn_fraction: float = 0.3
    boundary_penalty: float = 10.0
    boundary_jitter: float = 0.8


@dataclass
class RewardConfig:
    proximity_range: float = 100.0
    proximity_scale: float = 10.0
    strong_trail_threshold: float = 30.0
    weak_trail_threshold: float = 10.0
    strong_trail_bonus: float = 5.0
    strong_trail_growth: float = 10.0
    weak_trail_bonus: float = 2.0
    retreat_penalty: float = 2.0
    retreat_penalty_growth: float = 3.0
    approach_bonus: float = 3.0
    far_distance: float = 150.0
    far_scale: float = 15.0
    far_penalty_growth: float = 2.0
    long_span_distance: float = 80.0
    long_span_ratio: float = 0.6
    long_span_penalty: float = 8.0
    fitness_gain: float = 0.1


@dataclass
class FitnessBandConfig:
    lost_below: float = -20.0
    thriving_above: float = 10.0
    struggling_below: float = -10.0
    thriving_multiplier: float = 1.5
    struggling_multiplier: float = 0.3


@dataclass
class DiffusionConfig:
    diffuse_rate: float = 0.7
    decay_speed: float = 5.0
    pruning_threshold: float = 2.0
    pruning_threshold_growth: float = 8.0
    pruning_rate: float = 0.97
    pruning_rate_drop: float = 0.1
    zero_floor: float = 0.3


@dataclass
class SourceConfig:
    agents_per_source: int = 18000
    spawn_radius: float = 15.0
    mold_radius: float = 18.0
    mold_blob_base: float = 120.0
    mold_blob_spread: float = 80.0
    mold_blob_falloff: float = 0.5
    food_radius: float = 12.0
    food_gradient_radius: int = 40
    food_base_strength: float = 150.0
    food_decay_length: float = 15.0


@dataclass
class AutoSetupConfig:
    food_count: int = 8
    plate_inset: float = 40.0
    min_food_spacing: float = 60.0
    min_distance_from_center: float = 80.0
    max_attempts: int = 1000
    mold_blob_base: float = 150.0
    mold_blob_spread: float = 70.0
    mold_blob_falloff: float = 0.6


@dataclass
class SimulationConfig:
    width: int = 600
    height: int = 600
    boundary_margin: float = 10.0
    max_trail: float = 255.0
    vein_threshold: float = 100.0
    convergence_horizon: int = 3000
    seed: Optional[int] = 42
    config_version: str = "v1"
    agent: AgentConfig = field(default_factory=AgentConfig)
    reward: RewardConfig = field(default_factory=RewardConfig)
    bands: FitnessBandConfig = field(default_factory=FitnessBandConfig)
    diffusion: DiffusionConfig = field(default_factory=DiffusionConfig)
    sources: SourceConfig = field(default_factory=SourceConfig)
    auto_setup: AutoSetupConfig = field(default_factory=AutoSetupConfig)

    @property
    def plate_radius(self) -> float:
        return min(self.width, self.height) / 2.0 - self.boundary_margin

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text())
        return load_config(data or {})


# Parameters an external control surface may change between ticks, mapped to
# (section, attribute, lower bound, upper bound).
TUNABLE_PARAMETERS: dict[str, tuple[str, str, float, float]] = {
    "agents_per_source": ("sources", "agents_per_source", 0.0, 1_000_000.0),
    "step_size": ("agent", "step_size", 0.0, math.inf),
    "sensor_distance": ("agent", "sensor_distance", 0.0, math.inf),
    "deposit_amount": ("agent", "deposit_amount", 0.0, math.inf),
    "decay_speed": ("diffusion", "decay_speed", 1.0, 10.0),
    "food_attraction": ("agent", "food_attraction", 0.0, math.inf),
}

_SECTIONS = {
    "agent": AgentConfig,
    "reward": RewardConfig,
    "bands": FitnessBandConfig,
    "diffusion": DiffusionConfig,
    "sources": SourceConfig,
    "auto_setup": AutoSetupConfig,
}


def load_config(raw: dict) -> SimulationConfig:
    sections = {name: cls(**(raw.get(name) or {})) for name, cls in _SECTIONS.items()}
    sim_values = {k: v for k, v in raw.items() if k not in _SECTIONS}
    return SimulationConfig(**sections, **sim_values)
