# -*- coding: utf-8 -*-
########################
# geometry.py
########################
# Purpose:
# - 2D point value type shared by raw events, paths, and converted hit objects.
# - Playfield dimension constants for default object placement.
#
# Design notes:
# - Vector2 is immutable. Arithmetic returns new values.
# - Path math runs on numpy arrays; from_array/as_array convert at the boundary.
# - Pure module, no logging and no I/O.
#
########################
# Interfaces:
# Public constants:
# - PLAYFIELD_WIDTH: float
# - PLAYFIELD_HEIGHT: float
#
# Public dataclasses:
# - Vector2(x: float, y: float)
#   - from_array(values) -> Vector2 (classmethod)
#   - as_array() -> np.ndarray
#
# Public functions:
# - playfield_center(width: float = PLAYFIELD_WIDTH, height: float = PLAYFIELD_HEIGHT) -> Vector2
#
########################

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

PLAYFIELD_WIDTH = 512.0
PLAYFIELD_HEIGHT = 384.0


@dataclass(frozen=True)
class Vector2:
    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_array(cls, values) -> Vector2:
        return cls(float(values[0]), float(values[1]))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)


ZERO = Vector2(0.0, 0.0)


def playfield_center(width: float = PLAYFIELD_WIDTH, height: float = PLAYFIELD_HEIGHT) -> Vector2:
    return Vector2(float(width) / 2.0, float(height) / 2.0)


def _run_unit_tests() -> None:
    a = Vector2(3.0, 4.0)
    assert a + Vector2(1.0, 1.0) == Vector2(4.0, 5.0)
    assert Vector2.from_array(a.as_array()) == a
    assert playfield_center() == Vector2(256.0, 192.0)


if __name__ == "__main__":
    _run_unit_tests()
    print("geometry.py: ok")
