from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics
    agents: List[Dict[str, Any]]
    food_sources: List[Dict[str, float]]
    mold_sources: List[Dict[str, float]]
    world: "SnapshotWorld"
    metadata: "SnapshotMetadata"
    fields: "SnapshotFields"


@dataclass(slots=True)
class SnapshotWorld:
    width: int
    height: int
    plate_radius: float


@dataclass(slots=True)
class SnapshotMetadata:
    seed: Optional[int]
    config_version: str
    convergence_horizon: int


@dataclass(slots=True)
class SnapshotFields:
    trail: np.ndarray
    food: np.ndarray
