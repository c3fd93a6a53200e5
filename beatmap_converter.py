# -*- coding: utf-8 -*-
########################
# beatmap_converter.py
########################
# Purpose:
# - Classify raw timed events into hit circles, sliders, and spinners.
# - Run the full pipeline for a beatmap: convert, apply defaults, assign combo numbering.
#
########################
# Key Logic:
# - Classification priority is fixed, first match wins, facets are never merged:
#   - curve facet -> Slider
#   - end time facet -> Spinner
#   - otherwise -> HitCircle
# - Missing facets resolve to defaults, never errors:
#   - position: origin, except spinners which default to the playfield centre
#   - combo: new_combo False, combo_offset 0
#   - legacy last tick offset: unset
# - Beatmaps older than format version 8 cancel the speed multiplier when spacing slider ticks.
# - Conversion is lazy and one-to-one. Output order equals input order.
# - Without an explicit converter_config the converter section of get_config() applies,
#   so the config file and HITCONVERT_PLAYFIELD_* overrides reach conversion.
#
########################
# Interfaces:
# Public exceptions:
# - class BeatmapConversionError(Exception)
#
# Public dataclasses:
# - Beatmap(format_version: int, hit_objects: list[RawTimedEvent], control_point_info, difficulty)
# - ConvertedBeatmap(format_version: int, hit_objects: list[HitObject], control_point_info, difficulty)
#   - sliders() -> list[Slider]
#   - nested_object_count() -> int
#
# Public functions:
# - convert_hit_object(raw: RawTimedEvent, beatmap: Beatmap, *, converter_config: ConverterConfig = None) -> HitObject
# - assign_combo_indices(hit_objects: Iterable[HitObject]) -> None
# - convert_beatmap(beatmap: Beatmap, *, converter_config: ConverterConfig = None) -> ConvertedBeatmap
#
# Public classes:
# - class BeatmapConverter
#   - convert() -> Iterator[HitObject]
#
# Inputs:
# - Beatmap with decoded raw events, control points, and difficulty (decoding is external).
#
# Outputs:
# - Converted hit objects with nested objects expanded, for scoring and rendering.
#
########################
# Smoke Tests:
#   - python beatmap_converter.py
########################

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional

from loguru import logger

from config import ConverterConfig, get_config
from control_points import BeatmapDifficulty, ControlPointInfo
from geometry import Vector2, ZERO, playfield_center
from hit_objects import ComboHitObject, HitCircle, HitObject, Spinner
from log_setup import setup_logging
from raw_events import RawTimedEvent
from slider import Slider, ieee_divide


class BeatmapConversionError(Exception):
    """Raised when the converter is handed something that is not a RawTimedEvent."""


@dataclass
class Beatmap:
    format_version: int = 14
    hit_objects: List[RawTimedEvent] = field(default_factory=list)
    control_point_info: ControlPointInfo = field(default_factory=ControlPointInfo)
    difficulty: BeatmapDifficulty = field(default_factory=BeatmapDifficulty)


@dataclass
class ConvertedBeatmap:
    format_version: int
    hit_objects: List[HitObject]
    control_point_info: ControlPointInfo
    difficulty: BeatmapDifficulty

    def sliders(self) -> List[Slider]:
        return [hit_object for hit_object in self.hit_objects if isinstance(hit_object, Slider)]

    def nested_object_count(self) -> int:
        return sum(len(hit_object.nested_objects) for hit_object in self.hit_objects)


def _resolve_converter_config(converter_config: Optional[ConverterConfig]) -> ConverterConfig:
    if converter_config is not None:
        return converter_config
    app_config, _config_path = get_config()
    return app_config.converter


def _tick_distance_multiplier(raw: RawTimedEvent, beatmap: Beatmap, converter_config: ConverterConfig) -> float:
    # Prior to v8, speed multipliers don't adjust how many ticks are generated over the same distance.
    if int(beatmap.format_version) < int(converter_config.legacy_tick_version_cutoff):
        speed_multiplier = beatmap.control_point_info.difficulty_point_at(raw.start_time).speed_multiplier
        return ieee_divide(1.0, speed_multiplier)
    return 1.0


def convert_hit_object(
    raw: RawTimedEvent,
    beatmap: Beatmap,
    *,
    converter_config: Optional[ConverterConfig] = None,
) -> HitObject:
    if not isinstance(raw, RawTimedEvent):
        raise BeatmapConversionError(f"Expected RawTimedEvent, got {type(raw).__name__}")

    settings = _resolve_converter_config(converter_config)

    new_combo = raw.combo.new_combo if raw.has_combo() else False
    combo_offset = raw.combo.combo_offset if raw.has_combo() else 0

    if raw.has_curve():
        curve = raw.curve
        return Slider(
            start_time=raw.start_time,
            samples=raw.samples,
            control_points=curve.control_points,
            path_type=curve.path_type,
            distance=curve.distance,
            node_samples=curve.node_samples,
            repeat_count=curve.repeat_count,
            position=raw.position.position if raw.has_position() else ZERO,
            new_combo=new_combo,
            combo_offset=combo_offset,
            legacy_last_tick_offset=(
                raw.legacy_offset.legacy_last_tick_offset if raw.legacy_offset is not None else None
            ),
            tick_distance_multiplier=_tick_distance_multiplier(raw, beatmap, settings),
        )

    if raw.has_end_time():
        centre = playfield_center(settings.playfield_width, settings.playfield_height)
        return Spinner(
            start_time=raw.start_time,
            samples=raw.samples,
            end_time=raw.end_time.end_time,
            position=raw.position.position if raw.has_position() else centre,
            new_combo=new_combo,
            combo_offset=combo_offset,
        )

    return HitCircle(
        start_time=raw.start_time,
        samples=raw.samples,
        position=raw.position.position if raw.has_position() else ZERO,
        new_combo=new_combo,
        combo_offset=combo_offset,
    )


class BeatmapConverter:
    def __init__(self, beatmap: Beatmap, *, converter_config: Optional[ConverterConfig] = None) -> None:
        self._beatmap = beatmap
        self._converter_config = _resolve_converter_config(converter_config)

    def convert(self) -> Iterator[HitObject]:
        for raw in self._beatmap.hit_objects:
            yield convert_hit_object(raw, self._beatmap, converter_config=self._converter_config)


def assign_combo_indices(hit_objects: Iterable[HitObject]) -> None:
    """Number combos in object order from new_combo and combo_offset.

    Setting the fields goes through each object's setters, so sliders cascade to their head and tail.
    """
    last_object: Optional[ComboHitObject] = None
    for hit_object in hit_objects:
        if not isinstance(hit_object, ComboHitObject):
            continue
        if hit_object.new_combo:
            hit_object.index_in_current_combo = 0
            if last_object is not None:
                hit_object.combo_index = last_object.combo_index + hit_object.combo_offset + 1
        elif last_object is not None:
            hit_object.index_in_current_combo = last_object.index_in_current_combo + 1
            hit_object.combo_index = last_object.combo_index
        last_object = hit_object


def convert_beatmap(beatmap: Beatmap, *, converter_config: Optional[ConverterConfig] = None) -> ConvertedBeatmap:
    converter = BeatmapConverter(beatmap, converter_config=converter_config)

    hit_objects: List[HitObject] = []
    for hit_object in converter.convert():
        hit_object.apply_defaults(beatmap.control_point_info, beatmap.difficulty)
        hit_objects.append(hit_object)

    assign_combo_indices(hit_objects)

    converted = ConvertedBeatmap(
        format_version=int(beatmap.format_version),
        hit_objects=hit_objects,
        control_point_info=beatmap.control_point_info,
        difficulty=beatmap.difficulty,
    )
    logger.info(
        f"Converted {len(hit_objects)} hit objects "
        f"({len(converted.sliders())} sliders, {converted.nested_object_count()} nested objects, "
        f"format v{converted.format_version})"
    )
    return converted


def _assert(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def _run_chunk_tests() -> None:
    from control_points import DifficultyControlPoint, TimingControlPoint
    from raw_events import ComboFacet, EndTimeFacet, PathType, PositionFacet, curve_facet

    beatmap = Beatmap(
        format_version=14,
        hit_objects=[
            RawTimedEvent(start_time=0.0, position=PositionFacet(Vector2(10, 20)), combo=ComboFacet(new_combo=True)),
            RawTimedEvent(
                start_time=500.0,
                curve=curve_facet([Vector2(0, 0), Vector2(300, 0)], path_type=PathType.LINEAR, distance=300.0, repeat_count=1),
            ),
            RawTimedEvent(start_time=3000.0, end_time=EndTimeFacet(4000.0), combo=ComboFacet(new_combo=True, combo_offset=1)),
        ],
        control_point_info=ControlPointInfo(
            timing_points=[TimingControlPoint(time=0.0, beat_length=500.0)],
            difficulty_points=[DifficultyControlPoint(time=0.0, speed_multiplier=1.0)],
        ),
        difficulty=BeatmapDifficulty(slider_multiplier=1.4, slider_tick_rate=1.0),
    )

    converted = convert_beatmap(beatmap)
    kinds = [type(hit_object).__name__ for hit_object in converted.hit_objects]
    _assert(kinds == ["HitCircle", "Slider", "Spinner"], f"Unexpected kinds: {kinds}")
    _assert(converted.hit_objects[2].position == Vector2(256.0, 192.0), "Spinner should default to playfield centre")

    slider = converted.sliders()[0]
    _assert(len(slider.nested_objects) == 2 + 4 + 1, "Expected head, tail, 4 ticks, 1 repeat")
    _assert(slider.index_in_current_combo == 1, "Slider continues the first combo")
    _assert(slider.tail_circle.index_in_current_combo == 1, "Combo numbering cascades to the tail")
    _assert(converted.hit_objects[2].combo_index == 2, "Combo offset skips one combo index")

    try:
        convert_hit_object("not an event", beatmap)  # type: ignore[arg-type]
    except BeatmapConversionError:
        pass
    else:
        raise AssertionError("Expected BeatmapConversionError for a non-RawTimedEvent input")


def main() -> int:
    """Chunk test entrypoint."""
    try:
        app_config, _config_path = get_config()
        setup_logging(app_config.logging)
        _run_chunk_tests()
    except Exception as exc:
        print("Beatmap conversion chunk tests: FAIL")
        print(str(exc))
        return 2

    print("Beatmap conversion chunk tests: PASS")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
