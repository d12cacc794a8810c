from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from .config import SimulationConfig, SourceConfig

CellIndex = Tuple[int, int]


class GridField:
    """Trail, food and scratch layers over the rectangular domain.

    Arrays are indexed ``[row, col]`` which is ``[y, x]`` in world units; one
    cell covers one unit square.  The circular plate is a movement constraint
    and is not enforced here.
    """

    def __init__(self, width: int, height: int, boundary_margin: float, max_value: float = 255.0):
        self._width = int(width)
        self._height = int(height)
        self._max_value = float(max_value)
        self._center_x = self._width / 2.0
        self._center_y = self._height / 2.0
        self._plate_radius = min(self._width, self._height) / 2.0 - boundary_margin
        self._plate_radius_sq = self._plate_radius * self._plate_radius
        self.trail = np.zeros((self._height, self._width), dtype=np.float32)
        self.food = np.zeros_like(self.trail)
        self.scratch = np.zeros_like(self.trail)

    @classmethod
    def from_config(cls, config: SimulationConfig) -> "GridField":
        return cls(config.width, config.height, config.boundary_margin, config.max_trail)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def center(self) -> tuple[float, float]:
        return (self._center_x, self._center_y)

    @property
    def plate_radius(self) -> float:
        return self._plate_radius

    def cell_index(self, x: float, y: float) -> Optional[CellIndex]:
        ix = math.floor(x)
        iy = math.floor(y)
        if ix < 0 or ix >= self._width or iy < 0 or iy >= self._height:
            return None
        return (iy, ix)

    def within_plate(self, x: float, y: float) -> bool:
        dx = x - self._center_x
        dy = y - self._center_y
        return dx * dx + dy * dy <= self._plate_radius_sq

    def trail_at(self, x: float, y: float) -> float:
        idx = self.cell_index(x, y)
        return 0.0 if idx is None else float(self.trail[idx])

    def deposit(self, x: float, y: float, amount: float) -> None:
        if amount <= 0:
            return
        idx = self.cell_index(x, y)
        if idx is None:
            return
        self.trail[idx] = min(float(self.trail[idx]) + amount, self._max_value)

    def window(self, x: float, y: float, radius: int) -> tuple[slice, slice] | None:
        """Slices of the ``(2r+1)²`` block around the cell containing (x, y), clipped to the grid."""
        cx = math.floor(x)
        cy = math.floor(y)
        x0 = max(0, cx - radius)
        x1 = min(self._width, cx + radius + 1)
        y0 = max(0, cy - radius)
        y1 = min(self._height, cy + radius + 1)
        if x0 >= x1 or y0 >= y1:
            return None
        return (slice(y0, y1), slice(x0, x1))

    def stamp_food_gradient(self, x: float, y: float, sources: SourceConfig) -> None:
        block = self._disc_block(x, y, sources.food_gradient_radius)
        if block is None:
            return
        rows, cols, dist, inside = block
        strength = np.where(
            dist <= sources.food_radius,
            self._max_value,
            sources.food_base_strength * np.exp(-dist / sources.food_decay_length),
        )
        strength = np.minimum(strength, self._max_value).astype(np.float32)
        current = self.food[rows, cols]
        self.food[rows, cols] = np.where(inside, np.maximum(current, strength), current)

    def stamp_trail_blob(self, x: float, y: float, radius: float, base: float, spread: float, falloff: float) -> None:
        if radius <= 0:
            return
        block = self._disc_block(x, y, int(radius))
        if block is None:
            return
        rows, cols, dist, inside = block
        intensity = 1.0 - (dist / radius) * falloff
        value = np.minimum(base + intensity * spread, self._max_value).astype(np.float32)
        current = self.trail[rows, cols]
        self.trail[rows, cols] = np.where(inside, np.maximum(current, value), current)

    def clear(self) -> None:
        self.trail.fill(0.0)
        self.food.fill(0.0)
        self.scratch.fill(0.0)

    def trail_mass(self) -> float:
        return float(self.trail.sum(dtype=np.float64))

    def max_trail(self) -> float:
        return float(self.trail.max()) if self.trail.size else 0.0

    def count_above(self, threshold: float) -> int:
        return int(np.count_nonzero(self.trail > threshold))

    def _disc_block(self, x: float, y: float, radius: int):
        # Offsets are integral and added before flooring, so
        # floor(x + dx) == floor(x) + dx and the disc fits a plain slice.
        radius = int(radius)
        block = self.window(x, y, radius)
        if block is None:
            return None
        rows, cols = block
        dx = np.arange(cols.start, cols.stop) - math.floor(x)
        dy = np.arange(rows.start, rows.stop) - math.floor(y)
        dist = np.sqrt(dx[np.newaxis, :] ** 2 + dy[:, np.newaxis] ** 2)
        return rows, cols, dist, dist <= radius
