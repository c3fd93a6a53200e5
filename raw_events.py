# -*- coding: utf-8 -*-
########################
# raw_events.py
########################
# Purpose:
# - Editor-agnostic input model for timed gameplay events.
# - A RawTimedEvent carries optional capability facets; the converter inspects which are present.
#
# Design notes:
# - Keep these models immutable. The converter copies what it needs.
# - Facets are independent optional fields. The converter tests them with the has_* methods.
# - Pure data definitions. No I/O.
#
########################
# Interfaces:
# Public constants:
# - HIT_NORMAL, HIT_WHISTLE, HIT_FINISH, HIT_CLAP: sample names
#
# Public enums:
# - class PathType(enum.Enum): LINEAR | PERFECT_CURVE | BEZIER | CATMULL
#
# Public dataclasses:
# - SampleInfo(name: str, bank: Optional[str], volume: int)
#   - with_name(name: str) -> SampleInfo
# - CurveFacet(control_points, path_type, distance, node_samples, repeat_count)
# - EndTimeFacet(end_time: float)
# - PositionFacet(position: Vector2)
# - ComboFacet(new_combo: bool, combo_offset: int)
# - LegacyOffsetFacet(legacy_last_tick_offset: Optional[float])
# - RawTimedEvent(start_time, samples, curve, end_time, position, combo, legacy_offset)
#   - has_curve() / has_end_time() / has_position() / has_combo() -> bool
#
# Inputs/Outputs:
# - Produced by a beatmap decoder (external). Consumed by beatmap_converter.convert_hit_object.
#
########################

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Tuple

from geometry import Vector2

HIT_NORMAL = "hitnormal"
HIT_WHISTLE = "hitwhistle"
HIT_FINISH = "hitfinish"
HIT_CLAP = "hitclap"


class PathType(enum.Enum):
    LINEAR = "L"
    PERFECT_CURVE = "P"
    BEZIER = "B"
    CATMULL = "C"


@dataclass(frozen=True)
class SampleInfo:
    name: str
    bank: Optional[str] = None
    volume: int = 100

    def with_name(self, name: str) -> SampleInfo:
        return replace(self, name=str(name))


@dataclass(frozen=True)
class CurveFacet:
    control_points: Tuple[Vector2, ...]
    path_type: PathType = PathType.BEZIER
    distance: float = 0.0
    node_samples: Tuple[Tuple[SampleInfo, ...], ...] = ()
    repeat_count: int = 0


@dataclass(frozen=True)
class EndTimeFacet:
    end_time: float


@dataclass(frozen=True)
class PositionFacet:
    position: Vector2


@dataclass(frozen=True)
class ComboFacet:
    new_combo: bool = False
    combo_offset: int = 0


@dataclass(frozen=True)
class LegacyOffsetFacet:
    legacy_last_tick_offset: Optional[float] = None


@dataclass(frozen=True)
class RawTimedEvent:
    start_time: float
    samples: Tuple[SampleInfo, ...] = ()
    curve: Optional[CurveFacet] = None
    end_time: Optional[EndTimeFacet] = None
    position: Optional[PositionFacet] = None
    combo: Optional[ComboFacet] = None
    legacy_offset: Optional[LegacyOffsetFacet] = field(default=None)

    def has_curve(self) -> bool:
        return self.curve is not None

    def has_end_time(self) -> bool:
        return self.end_time is not None

    def has_position(self) -> bool:
        return self.position is not None

    def has_combo(self) -> bool:
        return self.combo is not None


def curve_facet(
    control_points: Sequence[Vector2],
    *,
    path_type: PathType = PathType.BEZIER,
    distance: float = 0.0,
    node_samples: Sequence[Sequence[SampleInfo]] = (),
    repeat_count: int = 0,
) -> CurveFacet:
    """Build a CurveFacet from plain sequences, freezing them into tuples."""
    return CurveFacet(
        control_points=tuple(control_points),
        path_type=path_type,
        distance=float(distance),
        node_samples=tuple(tuple(samples) for samples in node_samples),
        repeat_count=int(repeat_count),
    )


def _run_unit_tests() -> None:
    event = RawTimedEvent(start_time=100.0, samples=(SampleInfo(HIT_NORMAL, bank="soft"),))
    assert not event.has_curve()
    assert not event.has_position()

    facet = curve_facet([Vector2(0, 0), Vector2(100, 0)], path_type=PathType.LINEAR, distance=100, repeat_count=1)
    assert isinstance(facet.control_points, tuple)
    assert facet.repeat_count == 1

    tick = event.samples[0].with_name("slidertick")
    assert tick.bank == "soft"
    assert tick.name == "slidertick"


if __name__ == "__main__":
    _run_unit_tests()
    print("raw_events.py: ok")
