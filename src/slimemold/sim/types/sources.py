from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FoodSource:
    x: float
    y: float
    radius: float


@dataclass(frozen=True, slots=True)
class MoldSource:
    id: int
    x: float
    y: float
    radius: float
