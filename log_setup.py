"""
Logging setup using Loguru.

Console output goes to stderr. File output is optional and rotates in the user log dir.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from config import LoggingConfig
import paths

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def setup_logging(logging_config: Optional[LoggingConfig] = None, log_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Configure loguru sinks from the logging section of the app config.

    Args:
        logging_config: Logging section; defaults are used when omitted
        log_dir: Override for the log directory (defaults to the user log dir)

    Returns:
        Path of the log file when file logging is enabled, otherwise None
    """
    settings = logging_config if logging_config is not None else LoggingConfig()

    # Remove default handler
    logger.remove()

    logger.add(sys.stderr, level=settings.level, format=LOG_FORMAT)

    log_file: Optional[Path] = None
    if settings.log_to_file:
        target_dir = log_dir if log_dir is not None else paths.user_log_path()
        target_dir.mkdir(parents=True, exist_ok=True)
        log_file = target_dir / settings.file_name
        logger.add(
            log_file,
            rotation="10 MB",
            retention=5,  # Keep 5 backup files
            level=settings.level,
            format=LOG_FORMAT,
            enqueue=False,
        )

    logger.debug(f"Loguru initialized (level={settings.level}, file={log_file})")
    return log_file
