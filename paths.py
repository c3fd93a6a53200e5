# -*- coding: utf-8 -*-
########################
# paths.py
########################
# Purpose:
# - Central filesystem path helpers.
# - Defines where the config file and log files live.
#
# Design notes:
# - Keep path derivation consistent across modules.
# - Return pathlib.Path only. Directories are not created here.
#
########################
# Interfaces:
# Public constants:
# - APP_NAME, APP_AUTHOR
#
# Public functions:
# - user_config_path() -> pathlib.Path
# - user_log_path() -> pathlib.Path
# - config_candidates() -> list[pathlib.Path]
#
# Inputs:
# - Current working directory and the platform user directories.
#
# Outputs:
# - Paths used by config.py and log_setup.py.
#
########################

from __future__ import annotations

from pathlib import Path
from typing import List

from platformdirs import user_config_dir, user_log_dir

APP_NAME = "HitConvert"
APP_AUTHOR = "HitConvert"
CONFIG_FILE_NAME = "hitconvert_config.json"


def user_config_path() -> Path:
    """Return the per-user config directory (not created automatically)."""
    return Path(user_config_dir(APP_NAME, APP_AUTHOR))


def user_log_path() -> Path:
    """Return the per-user log directory (not created automatically)."""
    return Path(user_log_dir(APP_NAME, APP_AUTHOR))


def config_candidates() -> List[Path]:
    return [
        Path.cwd() / CONFIG_FILE_NAME,
        user_config_path() / CONFIG_FILE_NAME,
        user_config_path() / "config.json",
    ]
