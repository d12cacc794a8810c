from __future__ import annotations

import math

TAU = 2.0 * math.pi


def _wrap_angle(angle: float) -> float:
    return angle % TAU


def _angle_delta(current: float, target: float) -> float:
    """Signed shortest rotation from ``current`` to ``target`` in [-pi, pi)."""
    return (target - current + math.pi) % TAU - math.pi


def _bearing(from_x: float, from_y: float, to_x: float, to_y: float) -> float:
    return math.atan2(to_y - from_y, to_x - from_x)


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))
