# tests/conftest.py
import pytest

import paths
from config import get_config
from control_points import BeatmapDifficulty, ControlPointInfo, DifficultyControlPoint, TimingControlPoint
from geometry import Vector2
from raw_events import HIT_NORMAL, PathType, SampleInfo
from slider import Slider


@pytest.fixture(autouse=True)
def isolated_config_dirs(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(paths, "user_config_path", lambda: tmp_path / "user_config")
    for name in (
        "HITCONVERT_CONFIG_PATH",
        "HITCONVERT_LOG_LEVEL",
        "HITCONVERT_LOG_TO_FILE",
        "HITCONVERT_PLAYFIELD_WIDTH",
        "HITCONVERT_PLAYFIELD_HEIGHT",
    ):
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield tmp_path
    get_config.cache_clear()


def make_control_points(beat_length=500.0, speed_multiplier=1.0):
    return ControlPointInfo(
        timing_points=[TimingControlPoint(time=0.0, beat_length=beat_length)],
        difficulty_points=[DifficultyControlPoint(time=0.0, speed_multiplier=speed_multiplier)],
    )


def make_slider(length=300.0, repeat_count=0, start_time=1000.0, **kwargs):
    kwargs.setdefault("samples", [SampleInfo(HIT_NORMAL, bank="soft", volume=80)])
    return Slider(
        start_time=start_time,
        control_points=[Vector2(0, 0), Vector2(length, 0)],
        path_type=PathType.LINEAR,
        distance=length,
        repeat_count=repeat_count,
        **kwargs,
    )


@pytest.fixture
def control_point_info():
    return make_control_points()


@pytest.fixture
def difficulty():
    return BeatmapDifficulty(slider_multiplier=1.4, slider_tick_rate=1.0)
