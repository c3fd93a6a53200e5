# -*- coding: utf-8 -*-
########################
# slider.py
########################
# Purpose:
# - Curve-following hit object and its expansion engine.
# - Derives velocity and tick spacing from the tempo active at the slider's start time,
#   then synthesizes head, tail, tick, and repeat point nested objects from path geometry.
#
# Design notes:
# - Nested objects are rebuilt from scratch on every apply_defaults call.
# - Stored order is head, tail, all ticks (by span), all repeat points (by repeat index).
#   This is not a global time sort and consumers must not assume one.
# - Setting position moves the head and tail only. Ticks and repeat points keep the
#   geometry they were built with until apply_defaults runs again.
# - Setting control_points (to a different sequence object) notifies listeners and moves the tail.
# - Combo index setters cascade to every nested ComboHitObject (head and tail).
# - Every nested object inherits the slider's stack height and scale when it is created.
# - Non-positive beat length or tick rate is not validated. Derived values become inf or nan.
#
########################
# Interfaces:
# Public constants:
# - BASE_SCORING_DISTANCE = 100.0
# - TICK_END_GUARD_FACTOR = 0.01
#
# Public classes:
# - class Slider(ComboHitObject)
#   - path -> SliderPath
#   - control_points / path_type / distance (properties, settable)
#   - node_samples: list[list[SampleInfo]]
#   - repeat_count: int
#   - legacy_last_tick_offset: Optional[float]
#   - tick_distance_multiplier: float
#   - velocity, tick_distance (read-only, set by apply_defaults)
#   - span_count, end_time, duration, span_duration, end_position (derived)
#   - head_circle, tail_circle
#   - progress_at(progress: float) -> float
#   - curve_position_at(progress: float) -> Vector2
#   - add_control_points_listener(callback) / remove_control_points_listener(callback) -> None
#
########################

from __future__ import annotations

import math
from typing import Callable, Iterable, List, Optional, Sequence

from loguru import logger

from control_points import BeatmapDifficulty, ControlPointInfo
from geometry import Vector2
from hit_objects import ComboHitObject, RepeatPoint, SliderCircle, SliderTailCircle, SliderTick
from raw_events import HIT_NORMAL, PathType, SampleInfo
from slider_path import SliderPath

# Scoring distance with a speed-adjusted beat length of 1 second.
BASE_SCORING_DISTANCE = 100.0

# Ticks closer to a span's end than velocity * TICK_END_GUARD_FACTOR are dropped.
TICK_END_GUARD_FACTOR = 0.01

SLIDER_TICK_SAMPLE_NAME = "slidertick"

ControlPointsListener = Callable[[Sequence[Vector2]], None]


def ieee_divide(numerator: float, denominator: float) -> float:
    """Float division that yields inf or nan for a zero denominator instead of raising."""
    try:
        return float(numerator) / float(denominator)
    except ZeroDivisionError:
        if numerator == 0.0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


class Slider(ComboHitObject):
    def __init__(
        self,
        *,
        control_points: Sequence[Vector2] = (),
        path_type: PathType = PathType.BEZIER,
        distance: Optional[float] = None,
        node_samples: Iterable[Iterable[SampleInfo]] = (),
        repeat_count: int = 0,
        legacy_last_tick_offset: Optional[float] = None,
        tick_distance_multiplier: float = 1.0,
        **kwargs,
    ) -> None:
        self.head_circle: Optional[SliderCircle] = None
        self.tail_circle: Optional[SliderTailCircle] = None
        self._path = SliderPath(path_type, control_points, distance)
        self._control_points_listeners: List[ControlPointsListener] = []
        super().__init__(**kwargs)

        self.node_samples: List[List[SampleInfo]] = [list(samples) for samples in node_samples]
        self.repeat_count = int(repeat_count)
        self.legacy_last_tick_offset = legacy_last_tick_offset
        self.tick_distance_multiplier = float(tick_distance_multiplier)

        self._velocity = 0.0
        self._tick_distance = 0.0

    # Path delegation

    @property
    def path(self) -> SliderPath:
        return self._path

    @property
    def control_points(self) -> Sequence[Vector2]:
        return self._path.control_points

    @control_points.setter
    def control_points(self, value: Sequence[Vector2]) -> None:
        if self._path.control_points is value:
            return
        self._path.control_points = value

        for listener in list(self._control_points_listeners):
            listener(value)

        if self.tail_circle is not None:
            self.tail_circle.position = self.end_position

    def add_control_points_listener(self, callback: ControlPointsListener) -> None:
        self._control_points_listeners.append(callback)

    def remove_control_points_listener(self, callback: ControlPointsListener) -> None:
        self._control_points_listeners.remove(callback)

    @property
    def path_type(self) -> PathType:
        return self._path.path_type

    @path_type.setter
    def path_type(self, value: PathType) -> None:
        self._path.path_type = value

    @property
    def distance(self) -> float:
        return self._path.distance

    @distance.setter
    def distance(self, value: Optional[float]) -> None:
        self._path.expected_distance = value

    # Cascading setters

    @ComboHitObject.position.setter
    def position(self, value: Vector2) -> None:
        self._position = value

        if self.head_circle is not None:
            self.head_circle.position = value

        if self.tail_circle is not None:
            self.tail_circle.position = self.end_position

    @ComboHitObject.combo_index.setter
    def combo_index(self, value: int) -> None:
        self._combo_index = int(value)
        for nested in self.nested_objects:
            if isinstance(nested, ComboHitObject):
                nested.combo_index = value

    @ComboHitObject.index_in_current_combo.setter
    def index_in_current_combo(self, value: int) -> None:
        self._index_in_current_combo = int(value)
        for nested in self.nested_objects:
            if isinstance(nested, ComboHitObject):
                nested.index_in_current_combo = value

    # Derived timing

    @property
    def velocity(self) -> float:
        return self._velocity

    @property
    def tick_distance(self) -> float:
        return self._tick_distance

    @property
    def span_count(self) -> int:
        return self.repeat_count + 1

    @property
    def end_time(self) -> float:
        return self.start_time + ieee_divide(self.span_count * self._path.distance, self._velocity)

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def span_duration(self) -> float:
        return self.duration / self.span_count

    @property
    def end_position(self) -> Vector2:
        return self.position + self.curve_position_at(1.0)

    def progress_at(self, progress: float) -> float:
        """Map whole-slider progress to progress along the path, reversing on odd spans."""
        span_progress = float(progress) * self.span_count
        path_progress = span_progress % 1.0
        if int(span_progress) % 2 == 1:
            path_progress = 1.0 - path_progress
        return path_progress

    def curve_position_at(self, progress: float) -> Vector2:
        return self._path.position_at(self.progress_at(progress))

    # Expansion

    def _apply_defaults_to_self(self, control_point_info: ControlPointInfo, difficulty: BeatmapDifficulty) -> None:
        super()._apply_defaults_to_self(control_point_info, difficulty)

        snapshot = control_point_info.snapshot_at(self.start_time)

        scoring_distance = BASE_SCORING_DISTANCE * float(difficulty.slider_multiplier) * snapshot.speed_multiplier

        self._velocity = ieee_divide(scoring_distance, snapshot.beat_length)
        self._tick_distance = ieee_divide(scoring_distance, difficulty.slider_tick_rate) * self.tick_distance_multiplier

        if not math.isfinite(self._velocity) or not math.isfinite(self._tick_distance):
            logger.warning(
                f"Slider at {self.start_time}ms has non-finite motion: velocity={self._velocity}, "
                f"tick_distance={self._tick_distance} (beat_length={snapshot.beat_length}, "
                f"slider_tick_rate={difficulty.slider_tick_rate})"
            )

    def _create_nested_objects(self) -> None:
        self._create_slider_ends()
        self._create_ticks()
        self._create_repeat_points()

        if self.legacy_last_tick_offset is not None and self.tail_circle is not None:
            self.tail_circle.start_time = max(
                self.start_time + self.duration / 2.0,
                self.tail_circle.start_time - float(self.legacy_last_tick_offset),
            )

        logger.debug(
            f"Expanded slider at {self.start_time}ms into {len(self.nested_objects)} nested objects "
            f"(velocity={self._velocity:.4f}, tick_distance={self._tick_distance:.4f}, spans={self.span_count})"
        )

    def _create_slider_ends(self) -> None:
        self.head_circle = SliderCircle(
            start_time=self.start_time,
            position=self.position,
            samples=self._node_samples(0),
            stack_height=self.stack_height,
            scale=self.scale,
            combo_index=self.combo_index,
            index_in_current_combo=self.index_in_current_combo,
        )

        self.tail_circle = SliderTailCircle(
            start_time=self.end_time,
            position=self.end_position,
            stack_height=self.stack_height,
            scale=self.scale,
            combo_index=self.combo_index,
            index_in_current_combo=self.index_in_current_combo,
        )

        self._add_nested(self.head_circle)
        self._add_nested(self.tail_circle)

    def _create_ticks(self) -> None:
        length = self._path.distance
        tick_distance = min(max(self._tick_distance, 0.0), length)

        if tick_distance == 0.0:
            if length == 0.0:
                logger.debug(f"Slider at {self.start_time}ms has a zero-length path; no ticks generated")
            return

        min_distance_from_end = self._velocity * TICK_END_GUARD_FACTOR
        span_duration = self.span_duration
        tick_samples = self._tick_samples()

        for span in range(self.span_count):
            span_start_time = self.start_time + span * span_duration
            reversed_span = span % 2 == 1

            d = tick_distance
            while d <= length:
                if d > length - min_distance_from_end:
                    break

                distance_progress = d / length
                time_progress = 1.0 - distance_progress if reversed_span else distance_progress

                self._add_nested(
                    SliderTick(
                        span_index=span,
                        span_start_time=span_start_time,
                        start_time=span_start_time + time_progress * span_duration,
                        position=self.position + self._path.position_at(distance_progress),
                        stack_height=self.stack_height,
                        scale=self.scale,
                        samples=list(tick_samples),
                    )
                )
                d += tick_distance

    def _create_repeat_points(self) -> None:
        span_duration = self.span_duration
        for repeat_index in range(self.repeat_count):
            repeat = repeat_index + 1
            self._add_nested(
                RepeatPoint(
                    repeat_index=repeat_index,
                    span_duration=span_duration,
                    start_time=self.start_time + repeat * span_duration,
                    position=self.position + self._path.position_at(repeat % 2),
                    stack_height=self.stack_height,
                    scale=self.scale,
                    samples=self._node_samples(repeat),
                )
            )

    def _tick_samples(self) -> List[SampleInfo]:
        first_sample = next((sample for sample in self.samples if sample.name == HIT_NORMAL), None)
        if first_sample is None and self.samples:
            first_sample = self.samples[0]
        if first_sample is None:
            return []
        return [first_sample.with_name(SLIDER_TICK_SAMPLE_NAME)]

    def _node_samples(self, node_index: int) -> List[SampleInfo]:
        if node_index < len(self.node_samples):
            return list(self.node_samples[node_index])
        return list(self.samples)


def _run_unit_tests() -> None:
    from control_points import DifficultyControlPoint, TimingControlPoint

    info = ControlPointInfo(
        timing_points=[TimingControlPoint(time=0.0, beat_length=500.0)],
        difficulty_points=[DifficultyControlPoint(time=0.0, speed_multiplier=1.0)],
    )
    difficulty = BeatmapDifficulty(slider_multiplier=1.4, slider_tick_rate=1.0)

    slider = Slider(
        start_time=1000.0,
        control_points=[Vector2(0, 0), Vector2(300, 0)],
        path_type=PathType.LINEAR,
        distance=300.0,
        repeat_count=1,
        samples=[SampleInfo(HIT_NORMAL, bank="normal")],
    )
    slider.apply_defaults(info, difficulty)

    assert abs(slider.velocity - 0.28) < 1e-9
    assert abs(slider.tick_distance - 140.0) < 1e-9
    ticks = [n for n in slider.nested_objects if isinstance(n, SliderTick)]
    repeats = [n for n in slider.nested_objects if isinstance(n, RepeatPoint)]
    assert len(ticks) == 4
    assert len(repeats) == 1
    assert repeats[0].position == Vector2(300.0, 0.0)
    assert slider.nested_objects[0] is slider.head_circle
    assert slider.nested_objects[1] is slider.tail_circle

    slider.combo_index = 5
    assert slider.head_circle.combo_index == 5
    assert slider.tail_circle.combo_index == 5


if __name__ == "__main__":
    _run_unit_tests()
    print("slider.py: ok")
