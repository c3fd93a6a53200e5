# -*- coding: utf-8 -*-
########################
# hit_objects.py
########################
# Purpose:
# - Ruleset-specific runtime hit objects produced by beatmap_converter.
# - Defines the two-phase lifecycle shared by all objects: construct, then apply_defaults.
#
# Design notes:
# - apply_defaults(control_point_info, difficulty) derives per-object parameters and then
#   rebuilds nested_objects as a brand new list. Calling it again with the same context
#   produces an equal result.
# - Nested objects are owned by exactly one parent. They are never shared or re-parented.
# - Only ComboHitObject subclasses carry combo metadata. Ticks and repeat points do not.
# - Combo fields and position are properties so subclasses can cascade on set.
# - Positioned objects take their scale from the beatmap circle size in apply_defaults.
#   Stack height is assigned externally and copied into slider ticks and repeat points.
#
########################
# Interfaces:
# Public classes:
# - class HitObject
#   - start_time: float, samples: list[SampleInfo]
#   - nested_objects -> list[HitObject]
#   - apply_defaults(control_point_info: ControlPointInfo, difficulty: BeatmapDifficulty) -> None
#
# Public functions:
# - scale_from_circle_size(circle_size: float) -> float
# - class PositionedHitObject(HitObject): position, end_position, stack_height, scale
# - class ComboHitObject(PositionedHitObject): new_combo, combo_offset, combo_index, index_in_current_combo
# - class HitCircle(ComboHitObject)
# - class SliderCircle(HitCircle)          # slider head
# - class SliderTailCircle(SliderCircle)   # slider tail, carries no samples
# - class SliderTick(PositionedHitObject): span_index, span_start_time
# - class RepeatPoint(PositionedHitObject): repeat_index, span_duration
# - class Spinner(ComboHitObject): end_time, duration
#
# Inputs/Outputs:
# - Built by beatmap_converter and slider.Slider. Consumed by scoring and rendering (external).
#
########################

from __future__ import annotations

from typing import Iterable, List, Optional

from control_points import BeatmapDifficulty, ControlPointInfo
from geometry import Vector2, ZERO
from raw_events import SampleInfo


def scale_from_circle_size(circle_size: float) -> float:
    """Object scale relative to a 64px base radius. Circle size 5 gives 0.5."""
    return (1.0 - 0.7 * (float(circle_size) - 5.0) / 5.0) / 2.0


class HitObject:
    def __init__(self, *, start_time: float = 0.0, samples: Iterable[SampleInfo] = ()) -> None:
        self.start_time = float(start_time)
        self.samples: List[SampleInfo] = list(samples)
        self._nested_objects: List[HitObject] = []

    @property
    def nested_objects(self) -> List[HitObject]:
        return self._nested_objects

    def apply_defaults(self, control_point_info: ControlPointInfo, difficulty: BeatmapDifficulty) -> None:
        self._apply_defaults_to_self(control_point_info, difficulty)

        self._nested_objects = []
        self._create_nested_objects()

        for nested in self._nested_objects:
            nested.apply_defaults(control_point_info, difficulty)

    def _apply_defaults_to_self(self, control_point_info: ControlPointInfo, difficulty: BeatmapDifficulty) -> None:
        pass

    def _create_nested_objects(self) -> None:
        pass

    def _add_nested(self, hit_object: HitObject) -> None:
        self._nested_objects.append(hit_object)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(start_time={self.start_time!r})"


class PositionedHitObject(HitObject):
    def __init__(self, *, position: Vector2 = ZERO, stack_height: int = 0, scale: float = 1.0, **kwargs) -> None:
        super().__init__(**kwargs)
        self._position = position
        self.stack_height = int(stack_height)
        self.scale = float(scale)

    @property
    def position(self) -> Vector2:
        return self._position

    @position.setter
    def position(self, value: Vector2) -> None:
        self._position = value

    @property
    def end_position(self) -> Vector2:
        return self._position

    def _apply_defaults_to_self(self, control_point_info: ControlPointInfo, difficulty: BeatmapDifficulty) -> None:
        self.scale = scale_from_circle_size(difficulty.circle_size)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(start_time={self.start_time!r}, position={self._position!r})"


class ComboHitObject(PositionedHitObject):
    def __init__(
        self,
        *,
        new_combo: bool = False,
        combo_offset: int = 0,
        combo_index: int = 0,
        index_in_current_combo: int = 0,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.new_combo = bool(new_combo)
        self.combo_offset = int(combo_offset)
        self._combo_index = int(combo_index)
        self._index_in_current_combo = int(index_in_current_combo)

    @property
    def combo_index(self) -> int:
        return self._combo_index

    @combo_index.setter
    def combo_index(self, value: int) -> None:
        self._combo_index = int(value)

    @property
    def index_in_current_combo(self) -> int:
        return self._index_in_current_combo

    @index_in_current_combo.setter
    def index_in_current_combo(self, value: int) -> None:
        self._index_in_current_combo = int(value)


class HitCircle(ComboHitObject):
    pass


class SliderCircle(HitCircle):
    """Head circle of a slider."""


class SliderTailCircle(SliderCircle):
    """Tail circle of a slider. Tail sounds are resolved outside the converter."""

    def __init__(self, **kwargs) -> None:
        kwargs["samples"] = ()
        super().__init__(**kwargs)


class SliderTick(PositionedHitObject):
    def __init__(self, *, span_index: int = 0, span_start_time: float = 0.0, **kwargs) -> None:
        super().__init__(**kwargs)
        self.span_index = int(span_index)
        self.span_start_time = float(span_start_time)


class RepeatPoint(PositionedHitObject):
    def __init__(self, *, repeat_index: int = 0, span_duration: float = 0.0, **kwargs) -> None:
        super().__init__(**kwargs)
        self.repeat_index = int(repeat_index)
        self.span_duration = float(span_duration)


class Spinner(ComboHitObject):
    def __init__(self, *, end_time: Optional[float] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.end_time = float(end_time) if end_time is not None else self.start_time

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


def _run_unit_tests() -> None:
    circle = HitCircle(start_time=10.0, position=Vector2(5, 5), new_combo=True, combo_offset=2)
    assert circle.end_position == Vector2(5, 5)
    assert circle.new_combo and circle.combo_offset == 2

    circle.apply_defaults(ControlPointInfo(), BeatmapDifficulty())
    assert circle.nested_objects == []
    assert circle.scale == 0.5

    spinner = Spinner(start_time=100.0, end_time=600.0)
    assert spinner.duration == 500.0
    assert spinner.position == ZERO

    tail = SliderTailCircle(start_time=5.0, samples=[SampleInfo("hitnormal")])
    assert tail.samples == []

    tick = SliderTick(start_time=1.0, span_index=1, span_start_time=0.5)
    assert not isinstance(tick, ComboHitObject)


if __name__ == "__main__":
    _run_unit_tests()
    print("hit_objects.py: ok")
