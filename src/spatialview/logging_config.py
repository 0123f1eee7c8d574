"""
Logging Configuration
=====================
Console and file logging for the `spatialview` namespace.

The console shows short `HH:MM:SS` stamps. The optional log file uses the
same full timestamp as the in-app log panel, so a file line can be matched to
the panel entry it mirrors. VTK and map libraries are held at WARNING, since
their INFO chatter would bury the load events.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, Union

from spatialview.model.log import TIMESTAMP_FORMAT

LOGGER_NAMESPACE = "spatialview"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"
QUIET_LOGGERS: tuple[str, ...] = ("pyvista", "vtkmodules", "folium", "branca", "open3d")


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configure the 'spatialview' logger and return it.

    Args:
        level: Level number or name ("DEBUG", "info", ...).
        log_file: Optional path; the file is overwritten on each start.

    Raises:
        ValueError: If `level` is an unknown level name.
    """
    level = _resolve_level(level)
    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(level)

    # Re-init in the same process (tests, restarted window) must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=CONSOLE_DATEFMT))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=TIMESTAMP_FORMAT))
        logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger.debug(f"Logging at {logging.getLevelName(level)}" + (f", file '{log_file}'" if log_file else ""))
    return logger
