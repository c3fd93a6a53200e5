# tests/test_slider.py
import math

import pytest

from conftest import make_control_points, make_slider
from control_points import BeatmapDifficulty
from geometry import Vector2
from hit_objects import RepeatPoint, SliderCircle, SliderTailCircle, SliderTick
from raw_events import HIT_NORMAL, HIT_WHISTLE, SampleInfo


def _ticks(slider):
    return [n for n in slider.nested_objects if isinstance(n, SliderTick)]


def _repeats(slider):
    return [n for n in slider.nested_objects if isinstance(n, RepeatPoint)]


def test_motion_parameters_follow_scoring_distance(control_point_info, difficulty):
    slider = make_slider(length=300.0, repeat_count=1)
    slider.apply_defaults(control_point_info, difficulty)

    assert slider.velocity == pytest.approx(0.28)
    assert slider.tick_distance == pytest.approx(140.0)
    assert slider.span_count == 2
    assert slider.span_duration == pytest.approx(300.0 / 0.28)
    assert slider.end_time == pytest.approx(1000.0 + 2 * 300.0 / 0.28)


def test_speed_multiplier_scales_velocity_and_tick_distance(difficulty):
    slider = make_slider(length=300.0)
    slider.apply_defaults(make_control_points(beat_length=500.0, speed_multiplier=2.0), difficulty)

    assert slider.velocity == pytest.approx(0.56)
    assert slider.tick_distance == pytest.approx(280.0)


def test_concrete_scenario_nested_layout(control_point_info, difficulty):
    slider = make_slider(length=300.0, repeat_count=1)
    slider.apply_defaults(control_point_info, difficulty)

    nested = slider.nested_objects
    assert len(nested) == 7
    assert isinstance(nested[0], SliderCircle) and nested[0] is slider.head_circle
    assert isinstance(nested[1], SliderTailCircle) and nested[1] is slider.tail_circle
    assert all(isinstance(n, SliderTick) for n in nested[2:6])
    assert isinstance(nested[6], RepeatPoint)


def test_concrete_scenario_tick_times_and_positions(control_point_info, difficulty):
    slider = make_slider(length=300.0, repeat_count=1)
    slider.apply_defaults(control_point_info, difficulty)
    span_duration = 300.0 / 0.28

    ticks = _ticks(slider)
    assert [t.span_index for t in ticks] == [0, 0, 1, 1]
    assert [t.start_time for t in ticks] == pytest.approx([
        1500.0,
        2000.0,
        1000.0 + span_duration + (160.0 / 300.0) * span_duration,
        1000.0 + span_duration + (20.0 / 300.0) * span_duration,
    ])
    assert [t.position.x for t in ticks] == pytest.approx([140.0, 280.0, 140.0, 280.0])
    assert ticks[2].span_start_time == pytest.approx(1000.0 + span_duration)


def test_concrete_scenario_repeat_and_tail(control_point_info, difficulty):
    slider = make_slider(length=300.0, repeat_count=1)
    slider.apply_defaults(control_point_info, difficulty)

    repeat = _repeats(slider)[0]
    assert repeat.repeat_index == 0
    assert repeat.start_time == pytest.approx(1000.0 + 300.0 / 0.28)
    assert repeat.span_duration == pytest.approx(300.0 / 0.28)
    assert repeat.position.x == pytest.approx(300.0)

    # Two spans end back at the path start.
    assert slider.tail_circle.start_time == pytest.approx(slider.end_time)
    assert slider.tail_circle.position.x == pytest.approx(0.0)
    assert slider.head_circle.start_time == slider.start_time


def test_no_repeat_slider_has_no_repeat_points(control_point_info, difficulty):
    slider = make_slider(length=300.0, repeat_count=0)
    slider.apply_defaults(control_point_info, difficulty)

    assert _repeats(slider) == []
    assert len(_ticks(slider)) == 2
    assert len(slider.nested_objects) == 2 + 2
    assert slider.tail_circle.position.x == pytest.approx(300.0)


def test_repeat_points_alternate_ends():
    slider = make_slider(length=200.0, repeat_count=3)
    slider.apply_defaults(make_control_points(), BeatmapDifficulty(slider_multiplier=1.4, slider_tick_rate=1.0))

    repeats = _repeats(slider)
    assert [r.repeat_index for r in repeats] == [0, 1, 2]
    assert [r.position.x for r in repeats] == pytest.approx([200.0, 0.0, 200.0])
    assert [r.start_time for r in repeats] == pytest.approx(
        [1000.0 + k * slider.span_duration for k in (1, 2, 3)]
    )
    # Four spans end at the path start.
    assert slider.tail_circle.position.x == pytest.approx(0.0)


def test_tick_near_span_end_is_suppressed(control_point_info, difficulty):
    slider = make_slider(length=280.0)
    slider.apply_defaults(control_point_info, difficulty)

    ticks = _ticks(slider)
    assert len(ticks) == 1
    assert ticks[0].position.x == pytest.approx(140.0)


def test_zero_tick_distance_generates_no_ticks(control_point_info):
    slider = make_slider(length=300.0, repeat_count=2)
    slider.apply_defaults(control_point_info, BeatmapDifficulty(slider_multiplier=1.4, slider_tick_rate=math.inf))

    assert slider.tick_distance == 0.0
    assert _ticks(slider) == []
    assert len(_repeats(slider)) == 2


def test_zero_tick_distance_multiplier_generates_no_ticks(control_point_info, difficulty):
    slider = make_slider(length=300.0, tick_distance_multiplier=0.0)
    slider.apply_defaults(control_point_info, difficulty)

    assert _ticks(slider) == []


def test_zero_length_path_yields_no_ticks(control_point_info, difficulty):
    slider = make_slider(length=300.0)
    slider.control_points = []
    slider.apply_defaults(control_point_info, difficulty)

    assert slider.distance == 0.0
    assert _ticks(slider) == []
    assert slider.end_time == slider.start_time
    assert len(slider.nested_objects) == 2


def test_zero_beat_length_propagates_non_finite_velocity(difficulty):
    slider = make_slider(length=300.0)
    slider.apply_defaults(make_control_points(beat_length=0.0), difficulty)

    assert math.isinf(slider.velocity)
    assert _ticks(slider) == []


def test_tick_samples_prefer_normal_hit_sound(control_point_info, difficulty):
    slider = make_slider(
        samples=[SampleInfo(HIT_WHISTLE, bank="drum", volume=50), SampleInfo(HIT_NORMAL, bank="soft", volume=80)]
    )
    slider.apply_defaults(control_point_info, difficulty)

    for tick in _ticks(slider):
        assert tick.samples == [SampleInfo("slidertick", bank="soft", volume=80)]


def test_tick_samples_fall_back_to_first_sample(control_point_info, difficulty):
    slider = make_slider(samples=[SampleInfo(HIT_WHISTLE, bank="drum", volume=50)])
    slider.apply_defaults(control_point_info, difficulty)

    assert _ticks(slider)[0].samples == [SampleInfo("slidertick", bank="drum", volume=50)]


def test_ticks_without_slider_samples_are_silent(control_point_info, difficulty):
    slider = make_slider(samples=[])
    slider.apply_defaults(control_point_info, difficulty)

    assert _ticks(slider)
    assert all(tick.samples == [] for tick in _ticks(slider))


def test_node_samples_feed_head_and_repeats(control_point_info, difficulty):
    head_samples = [SampleInfo(HIT_NORMAL, bank="normal")]
    repeat_samples = [SampleInfo(HIT_WHISTLE, bank="normal")]
    slider = make_slider(repeat_count=2, node_samples=[head_samples, repeat_samples])
    slider.apply_defaults(control_point_info, difficulty)

    assert slider.head_circle.samples == head_samples
    assert slider.tail_circle.samples == []
    repeats = _repeats(slider)
    assert repeats[0].samples == repeat_samples
    # No node sample set for the second repeat; falls back to the slider's own samples.
    assert repeats[1].samples == slider.samples


def test_legacy_offset_shifts_tail_earlier(control_point_info, difficulty):
    slider = make_slider(length=300.0, legacy_last_tick_offset=36.0)
    slider.apply_defaults(control_point_info, difficulty)

    assert slider.tail_circle.start_time == pytest.approx(slider.end_time - 36.0)


def test_legacy_offset_never_moves_tail_before_midpoint(control_point_info, difficulty):
    slider = make_slider(length=300.0, legacy_last_tick_offset=100000.0)
    slider.apply_defaults(control_point_info, difficulty)

    assert slider.tail_circle.start_time == pytest.approx(slider.start_time + slider.duration / 2)


def test_zero_legacy_offset_keeps_tail_at_end(control_point_info, difficulty):
    slider = make_slider(length=300.0, repeat_count=1, legacy_last_tick_offset=0.0)
    slider.apply_defaults(control_point_info, difficulty)

    assert slider.tail_circle.start_time == slider.end_time


def test_apply_defaults_is_idempotent(control_point_info, difficulty):
    slider = make_slider(length=300.0, repeat_count=2)

    def snapshot():
        return [(type(n).__name__, n.start_time, n.position, list(n.samples)) for n in slider.nested_objects]

    slider.apply_defaults(control_point_info, difficulty)
    first_nested = slider.nested_objects
    first = (slider.velocity, slider.tick_distance, snapshot())

    slider.apply_defaults(control_point_info, difficulty)
    second = (slider.velocity, slider.tick_distance, snapshot())

    assert first == second
    assert slider.nested_objects is not first_nested


def test_position_change_moves_head_and_tail_only(control_point_info, difficulty):
    slider = make_slider(length=300.0, repeat_count=1)
    slider.apply_defaults(control_point_info, difficulty)
    tick_positions = [t.position for t in _ticks(slider)]
    repeat_positions = [r.position for r in _repeats(slider)]

    slider.position = Vector2(100, 50)

    assert slider.head_circle.position == Vector2(100, 50)
    assert slider.tail_circle.position == slider.end_position
    assert slider.tail_circle.position.x == pytest.approx(100.0)
    # Known staleness window: ticks and repeats keep their old geometry until apply_defaults runs again.
    assert [t.position for t in _ticks(slider)] == tick_positions
    assert [r.position for r in _repeats(slider)] == repeat_positions

    slider.apply_defaults(control_point_info, difficulty)
    assert _ticks(slider)[0].position.x == pytest.approx(240.0)
    assert _ticks(slider)[0].position.y == pytest.approx(50.0)


def test_control_points_change_moves_tail_and_notifies(control_point_info, difficulty):
    slider = make_slider(length=300.0)
    slider.apply_defaults(control_point_info, difficulty)
    seen = []
    slider.add_control_points_listener(seen.append)

    new_points = [Vector2(0, 0), Vector2(0, 100)]
    slider.control_points = new_points

    assert seen == [new_points]
    # The declared distance still applies, so the path is extended to 300.
    assert slider.tail_circle.position.x == pytest.approx(0.0)
    assert slider.tail_circle.position.y == pytest.approx(300.0)
    assert _ticks(slider)[0].position.y == pytest.approx(0.0)


def test_assigning_same_control_points_does_not_notify(control_point_info, difficulty):
    slider = make_slider(length=300.0)
    slider.apply_defaults(control_point_info, difficulty)
    seen = []
    slider.add_control_points_listener(seen.append)

    slider.control_points = slider.control_points

    assert seen == []


def test_removed_listener_is_not_notified(control_point_info, difficulty):
    slider = make_slider(length=300.0)
    slider.apply_defaults(control_point_info, difficulty)
    seen = []
    slider.add_control_points_listener(seen.append)
    slider.remove_control_points_listener(seen.append)

    slider.control_points = [Vector2(0, 0), Vector2(0, 100)]

    assert seen == []


def test_removing_unknown_listener_raises():
    with pytest.raises(ValueError):
        make_slider().remove_control_points_listener(print)


def test_circle_size_scale_and_stack_height_reach_every_nested_object(control_point_info):
    difficulty = BeatmapDifficulty(slider_multiplier=1.4, slider_tick_rate=1.0, circle_size=4.0)
    slider = make_slider(length=300.0, repeat_count=1)
    slider.stack_height = 2
    slider.apply_defaults(control_point_info, difficulty)

    assert slider.scale == pytest.approx(0.57)
    assert len(slider.nested_objects) == 7
    for nested in slider.nested_objects:
        assert nested.scale == pytest.approx(0.57)
        assert nested.stack_height == 2


def test_combo_fields_cascade_to_head_and_tail(control_point_info, difficulty):
    slider = make_slider(length=300.0, repeat_count=1)
    slider.apply_defaults(control_point_info, difficulty)

    slider.combo_index = 5
    slider.index_in_current_combo = 3

    assert slider.head_circle.combo_index == 5
    assert slider.tail_circle.combo_index == 5
    assert slider.head_circle.index_in_current_combo == 3
    assert slider.tail_circle.index_in_current_combo == 3
    for nested in _ticks(slider) + _repeats(slider):
        assert not hasattr(nested, "combo_index")


def test_combo_fields_are_copied_into_new_head_and_tail(control_point_info, difficulty):
    slider = make_slider(length=300.0)
    slider.combo_index = 4
    slider.apply_defaults(control_point_info, difficulty)

    assert slider.head_circle.combo_index == 4
    assert slider.tail_circle.combo_index == 4


def test_progress_at_reverses_on_odd_spans():
    slider = make_slider(length=300.0, repeat_count=1)

    assert slider.progress_at(0.25) == pytest.approx(0.5)
    assert slider.progress_at(0.75) == pytest.approx(0.5)
    assert slider.progress_at(0.6) == pytest.approx(0.8)
