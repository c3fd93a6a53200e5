# -*- coding: utf-8 -*-
########################
# slider_path.py
########################
# Purpose:
# - Path geometry for curve objects: turns control points + path type into a polyline
#   and answers position_at(progress) and distance.
#
# Design notes:
# - Control points are relative to the owning slider's position. The first point is usually (0, 0).
# - Polylines are (N, 2) float arrays. Bezier segments are evaluated with bezier.Curve.
# - The approximated polyline is cached and rebuilt lazily after any setter runs.
# - A positive expected_distance truncates or extends the polyline to exactly that length.
#   Extension continues along the direction of the final segment.
# - Empty control points produce a zero-length path whose every position is (0, 0).
# - No I/O. Pure geometry.
#
########################
# Interfaces:
# Public classes:
# - class SliderPath
#   - __init__(path_type: PathType = PathType.BEZIER, control_points: Sequence[Vector2] = (), expected_distance: Optional[float] = None)
#   - path_type (property, settable)
#   - control_points (property, settable)
#   - expected_distance (property, settable)
#   - distance (property) -> float
#   - position_at(progress: float) -> Vector2
#   - calculated_path() -> list[Vector2]
#
# Public functions (all take and return (N, 2) arrays):
# - approximate_linear / approximate_bezier / approximate_circular_arc / approximate_catmull
#
########################

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import bezier
import numpy as np

from geometry import Vector2, ZERO
from raw_events import PathType

BEZIER_TOLERANCE = 0.25
CATMULL_DETAIL = 50
CIRCULAR_ARC_TOLERANCE = 0.1


def points_to_array(points: Sequence[Vector2]) -> np.ndarray:
    if not points:
        return np.zeros((0, 2), dtype=np.float64)
    return np.vstack([point.as_array() for point in points])


def _segment_lengths(points: np.ndarray) -> np.ndarray:
    return np.linalg.norm(np.diff(points, axis=0), axis=1)


def approximate_linear(points: np.ndarray) -> np.ndarray:
    return np.array(points, dtype=np.float64)


def _approximate_bezier_segment(points: np.ndarray) -> np.ndarray:
    if len(points) < 2:
        return np.array(points, dtype=np.float64)
    polygon_length = float(_segment_lengths(points).sum())
    # The control polygon bounds the curve length, so this keeps chords under the tolerance scale.
    steps = max(2, int(np.ceil(polygon_length / (BEZIER_TOLERANCE * 16.0))))
    curve = bezier.Curve.from_nodes(np.asfortranarray(points.T))
    return curve.evaluate_multi(np.linspace(0.0, 1.0, steps + 1)).T


def approximate_bezier(points: np.ndarray) -> np.ndarray:
    """Approximate a multi-segment Bezier curve.

    A control point repeated twice in a row ends one segment and starts the next.
    """
    points = np.asarray(points, dtype=np.float64)
    if len(points) == 0:
        return np.zeros((0, 2), dtype=np.float64)

    pieces: List[np.ndarray] = []
    segment_start = 0
    for index in range(len(points)):
        is_last = index == len(points) - 1
        is_break = not is_last and np.array_equal(points[index + 1], points[index])
        if is_last or is_break:
            approximated = _approximate_bezier_segment(points[segment_start:index + 1])
            if pieces and len(approximated) and np.array_equal(pieces[-1][-1], approximated[0]):
                approximated = approximated[1:]
            pieces.append(approximated)
            segment_start = index + 1
    return np.vstack(pieces)


def approximate_circular_arc(points: np.ndarray) -> Optional[np.ndarray]:
    """Approximate the circle through three points, or None when they are collinear."""
    a, b, c = (np.asarray(point, dtype=np.float64) for point in points[:3])

    a_sq = float(np.sum((b - c) ** 2))
    b_sq = float(np.sum((a - c) ** 2))
    c_sq = float(np.sum((a - b) ** 2))

    wa = a_sq * (b_sq + c_sq - a_sq)
    wb = b_sq * (a_sq + c_sq - b_sq)
    wc = c_sq * (a_sq + b_sq - c_sq)
    denominator = 2.0 * (wa + wb + wc)
    if abs(denominator) < 1e-6:
        return None

    centre = (a * wa + b * wb + c * wc) * (2.0 / denominator)

    d_a = a - centre
    d_c = c - centre
    radius = float(np.linalg.norm(d_a))

    theta_start = float(np.arctan2(d_a[1], d_a[0]))
    theta_end = float(np.arctan2(d_c[1], d_c[0]))
    while theta_end < theta_start:
        theta_end += 2.0 * np.pi

    direction = 1.0
    theta_range = theta_end - theta_start

    # Travel direction depends on which side of a->c the middle point lies on.
    ortho_a_to_c = np.array([c[1] - a[1], -(c[0] - a[0])])
    if float(np.dot(ortho_a_to_c, b - a)) < 0.0:
        direction = -direction
        theta_range = 2.0 * np.pi - theta_range

    if 2.0 * radius <= CIRCULAR_ARC_TOLERANCE:
        amount_points = 2
    else:
        amount_points = max(2, int(np.ceil(theta_range / (2.0 * np.arccos(1.0 - CIRCULAR_ARC_TOLERANCE / radius)))))

    thetas = theta_start + direction * np.linspace(0.0, 1.0, amount_points) * theta_range
    return centre + radius * np.column_stack((np.cos(thetas), np.sin(thetas)))


def _catmull_segment(v1: np.ndarray, v2: np.ndarray, v3: np.ndarray, v4: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = t[:, np.newaxis]
    t2 = t * t
    t3 = t2 * t
    return 0.5 * (
        2.0 * v2
        + (-v1 + v3) * t
        + (2.0 * v1 - 5.0 * v2 + 4.0 * v3 - v4) * t2
        + (-v1 + 3.0 * v2 - 3.0 * v3 + v4) * t3
    )


def approximate_catmull(points: np.ndarray) -> np.ndarray:
    points = np.asarray(points, dtype=np.float64)
    count = len(points)
    if count < 2:
        return points.copy()

    t = np.linspace(0.0, 1.0, CATMULL_DETAIL + 1)
    pieces: List[np.ndarray] = []
    for index in range(count - 1):
        v1 = points[index - 1] if index > 0 else points[index]
        v2 = points[index]
        v3 = points[index + 1]
        v4 = points[index + 2] if index < count - 2 else v3 * 2.0 - v2
        segment = _catmull_segment(v1, v2, v3, v4, t)
        pieces.append(segment if not pieces else segment[1:])
    return np.vstack(pieces)


def _fit_to_expected_distance(path: np.ndarray, expected_distance: Optional[float]) -> Tuple[np.ndarray, np.ndarray]:
    """Return (path, cumulative lengths) truncated or extended to a positive expected distance."""
    if len(path) == 0:
        return path, np.zeros(0, dtype=np.float64)

    segment_lengths = _segment_lengths(path)
    cumulative = np.concatenate(([0.0], np.cumsum(segment_lengths)))

    if expected_distance is None or float(expected_distance) <= 0.0 or len(path) < 2:
        return path, cumulative

    expected = float(expected_distance)

    if cumulative[-1] > expected:
        # First vertex past the expected distance. The path is cut on the segment leading to it.
        index = int(np.searchsorted(cumulative, expected, side="right"))
        start = path[index - 1]
        weight = (expected - cumulative[index - 1]) / segment_lengths[index - 1]
        cut_point = start + (path[index] - start) * weight
        return np.vstack((path[:index], cut_point)), np.append(cumulative[:index], expected)

    if cumulative[-1] < expected and segment_lengths[-1] > 0.0:
        path = path.copy()
        path[-1] = path[-1] + (path[-1] - path[-2]) * ((expected - cumulative[-1]) / segment_lengths[-1])
        cumulative[-1] = expected

    return path, cumulative


class SliderPath:
    def __init__(
        self,
        path_type: PathType = PathType.BEZIER,
        control_points: Sequence[Vector2] = (),
        expected_distance: Optional[float] = None,
    ) -> None:
        self._path_type = path_type
        self._control_points: Sequence[Vector2] = control_points
        self._expected_distance = expected_distance
        self._calculated_path = np.zeros((0, 2), dtype=np.float64)
        self._cumulative_length = np.zeros(0, dtype=np.float64)
        self._is_valid = False

    @property
    def path_type(self) -> PathType:
        return self._path_type

    @path_type.setter
    def path_type(self, value: PathType) -> None:
        self._path_type = value
        self._is_valid = False

    @property
    def control_points(self) -> Sequence[Vector2]:
        return self._control_points

    @control_points.setter
    def control_points(self, value: Sequence[Vector2]) -> None:
        self._control_points = value
        self._is_valid = False

    @property
    def expected_distance(self) -> Optional[float]:
        return self._expected_distance

    @expected_distance.setter
    def expected_distance(self, value: Optional[float]) -> None:
        self._expected_distance = value
        self._is_valid = False

    @property
    def distance(self) -> float:
        self._ensure_valid()
        return float(self._cumulative_length[-1]) if len(self._cumulative_length) else 0.0

    def calculated_path(self) -> List[Vector2]:
        self._ensure_valid()
        return [Vector2.from_array(row) for row in self._calculated_path]

    def position_at(self, progress: float) -> Vector2:
        self._ensure_valid()
        clamped = min(1.0, max(0.0, float(progress)))
        return self._interpolate_vertices(clamped * self.distance)

    def _ensure_valid(self) -> None:
        if self._is_valid:
            return
        self._calculated_path, self._cumulative_length = _fit_to_expected_distance(
            self._calculate_path(), self._expected_distance
        )
        self._is_valid = True

    def _calculate_path(self) -> np.ndarray:
        points = points_to_array(list(self._control_points))
        if len(points) == 0:
            return points
        if self._path_type == PathType.LINEAR:
            return approximate_linear(points)
        if self._path_type == PathType.PERFECT_CURVE and len(points) == 3:
            arc = approximate_circular_arc(points)
            if arc is not None:
                return arc
        if self._path_type == PathType.CATMULL:
            return approximate_catmull(points)
        return approximate_bezier(points)

    def _interpolate_vertices(self, target_distance: float) -> Vector2:
        path = self._calculated_path
        if len(path) == 0:
            return ZERO

        index = int(np.searchsorted(self._cumulative_length, target_distance, side="left"))
        if index <= 0:
            return Vector2.from_array(path[0])
        if index >= len(path):
            return Vector2.from_array(path[-1])

        start_point = path[index - 1]
        start_distance = self._cumulative_length[index - 1]
        end_distance = self._cumulative_length[index]

        if abs(end_distance - start_distance) < 1e-7:
            return Vector2.from_array(start_point)

        weight = (target_distance - start_distance) / (end_distance - start_distance)
        return Vector2.from_array(start_point + (path[index] - start_point) * weight)


def _run_unit_tests() -> None:
    linear = SliderPath(PathType.LINEAR, [Vector2(0, 0), Vector2(300, 0)], expected_distance=300.0)
    assert abs(linear.distance - 300.0) < 1e-9
    assert linear.position_at(0.5) == Vector2(150.0, 0.0)
    assert linear.position_at(1.0) == Vector2(300.0, 0.0)

    truncated = SliderPath(PathType.LINEAR, [Vector2(0, 0), Vector2(100, 0), Vector2(100, 100)], expected_distance=150.0)
    assert abs(truncated.distance - 150.0) < 1e-9
    assert truncated.position_at(1.0) == Vector2(100.0, 50.0)

    extended = SliderPath(PathType.LINEAR, [Vector2(0, 0), Vector2(0, 100)], expected_distance=200.0)
    assert extended.position_at(1.0) == Vector2(0.0, 200.0)

    empty = SliderPath(PathType.BEZIER, [], expected_distance=100.0)
    assert empty.distance == 0.0
    assert empty.position_at(0.7) == ZERO

    arc = SliderPath(PathType.PERFECT_CURVE, [Vector2(0, 0), Vector2(50, 50), Vector2(100, 0)])
    assert abs(arc.distance - np.pi * 50.0) < 1.0
    end = arc.position_at(1.0)
    assert abs(end.x - 100.0) < 1e-6 and abs(end.y) < 1e-6


if __name__ == "__main__":
    _run_unit_tests()
    print("slider_path.py: ok")
