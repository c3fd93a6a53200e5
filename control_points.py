# -*- coding: utf-8 -*-
########################
# control_points.py
########################
# Purpose:
# - Source of truth for tempo and speed metadata over beatmap time.
# - Answers "which timing point / difficulty point is active at time t" for the expansion engine.
#
# Design notes:
# - Both lookups are step functions: the last point at or before t wins.
# - Timing lookups before the first timing point fall back to the first timing point.
# - Difficulty lookups before the first difficulty point fall back to the default (speed 1.0).
# - Read-only from the converter's perspective. Nothing here mutates during conversion.
#
########################
# Interfaces:
# Public dataclasses:
# - TimingControlPoint(time: float, beat_length: float)
# - DifficultyControlPoint(time: float, speed_multiplier: float)
# - TimingSnapshot(beat_length: float, speed_multiplier: float)
# - BeatmapDifficulty(slider_multiplier: float, slider_tick_rate: float, circle_size: float)
#
# Public classes:
# - class ControlPointInfo
#   - add_timing_point(point: TimingControlPoint) -> None
#   - add_difficulty_point(point: DifficultyControlPoint) -> None
#   - timing_points() -> list[TimingControlPoint]
#   - difficulty_points() -> list[DifficultyControlPoint]
#   - timing_point_at(time: float) -> TimingControlPoint
#   - difficulty_point_at(time: float) -> DifficultyControlPoint
#   - snapshot_at(time: float) -> TimingSnapshot
#
# Inputs:
# - Timing and difficulty points decoded from a beatmap (external).
#
# Outputs:
# - TimingSnapshot used by Slider.apply_defaults and the pre-v8 tick compensation.
#
########################

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, TypeVar

DEFAULT_BEAT_LENGTH = 1000.0
DEFAULT_SPEED_MULTIPLIER = 1.0


@dataclass(frozen=True)
class TimingControlPoint:
    time: float = 0.0
    beat_length: float = DEFAULT_BEAT_LENGTH


@dataclass(frozen=True)
class DifficultyControlPoint:
    time: float = 0.0
    speed_multiplier: float = DEFAULT_SPEED_MULTIPLIER


@dataclass(frozen=True)
class TimingSnapshot:
    beat_length: float
    speed_multiplier: float


@dataclass(frozen=True)
class BeatmapDifficulty:
    slider_multiplier: float = 1.4
    slider_tick_rate: float = 1.0
    circle_size: float = 5.0


_PointT = TypeVar("_PointT", TimingControlPoint, DifficultyControlPoint)


def _point_at(points: Sequence[_PointT], times: Sequence[float], time: float, fallback: Optional[_PointT]) -> Optional[_PointT]:
    if not points:
        return fallback
    index = bisect.bisect_right(times, float(time)) - 1
    if index < 0:
        return fallback
    return points[index]


class ControlPointInfo:
    def __init__(
        self,
        timing_points: Iterable[TimingControlPoint] = (),
        difficulty_points: Iterable[DifficultyControlPoint] = (),
    ) -> None:
        self._timing_points: List[TimingControlPoint] = []
        self._timing_times: List[float] = []
        self._difficulty_points: List[DifficultyControlPoint] = []
        self._difficulty_times: List[float] = []
        for timing_point in timing_points:
            self.add_timing_point(timing_point)
        for difficulty_point in difficulty_points:
            self.add_difficulty_point(difficulty_point)

    def add_timing_point(self, point: TimingControlPoint) -> None:
        # bisect_right keeps insertion order for points sharing a time, so the later one wins.
        index = bisect.bisect_right(self._timing_times, float(point.time))
        self._timing_times.insert(index, float(point.time))
        self._timing_points.insert(index, point)

    def add_difficulty_point(self, point: DifficultyControlPoint) -> None:
        index = bisect.bisect_right(self._difficulty_times, float(point.time))
        self._difficulty_times.insert(index, float(point.time))
        self._difficulty_points.insert(index, point)

    def timing_points(self) -> List[TimingControlPoint]:
        return list(self._timing_points)

    def difficulty_points(self) -> List[DifficultyControlPoint]:
        return list(self._difficulty_points)

    def timing_point_at(self, time: float) -> TimingControlPoint:
        first = self._timing_points[0] if self._timing_points else None
        point = _point_at(self._timing_points, self._timing_times, time, first)
        return point if point is not None else TimingControlPoint()

    def difficulty_point_at(self, time: float) -> DifficultyControlPoint:
        point = _point_at(self._difficulty_points, self._difficulty_times, time, None)
        return point if point is not None else DifficultyControlPoint()

    def snapshot_at(self, time: float) -> TimingSnapshot:
        return TimingSnapshot(
            beat_length=float(self.timing_point_at(time).beat_length),
            speed_multiplier=float(self.difficulty_point_at(time).speed_multiplier),
        )


def _run_unit_tests() -> None:
    info = ControlPointInfo(
        timing_points=[TimingControlPoint(time=1000.0, beat_length=500.0), TimingControlPoint(time=0.0, beat_length=400.0)],
        difficulty_points=[DifficultyControlPoint(time=500.0, speed_multiplier=2.0)],
    )
    assert info.timing_point_at(-100.0).beat_length == 400.0
    assert info.timing_point_at(999.0).beat_length == 400.0
    assert info.timing_point_at(1000.0).beat_length == 500.0
    assert info.difficulty_point_at(0.0).speed_multiplier == 1.0
    assert info.difficulty_point_at(500.0).speed_multiplier == 2.0

    snap = info.snapshot_at(1200.0)
    assert snap == TimingSnapshot(beat_length=500.0, speed_multiplier=2.0)

    empty = ControlPointInfo()
    assert empty.snapshot_at(0.0) == TimingSnapshot(beat_length=DEFAULT_BEAT_LENGTH, speed_multiplier=DEFAULT_SPEED_MULTIPLIER)


if __name__ == "__main__":
    _run_unit_tests()
    print("control_points.py: ok")
