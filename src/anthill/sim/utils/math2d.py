from __future__ import annotations

import math

from pygame.math import Vector2


def _step_vector(origin_x: int, origin_y: int, target_x: int, target_y: int) -> Vector2:
    return Vector2(target_x - origin_x, target_y - origin_y)


def _heading_from_velocity(vector: Vector2, fallback: float = 0.0) -> float:
    if vector.length_squared() < 1e-12:
        return fallback
    return math.atan2(vector.y, vector.x)
