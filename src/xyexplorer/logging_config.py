"""
Logging Configuration
Sets up the 'xyexplorer' logger once, at application start.

The level may be given as a logging constant or as a name ('debug',
'WARNING', ...); without one, XYEXPLORER_LOG_LEVEL decides (INFO if unset or
unknown). XYEXPLORER_LOG_FILE additionally mirrors the output to a file.
"""
import logging
import sys
from typing import Optional, Union

from xyexplorer import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'


def resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = config.LOG_LEVEL_NAME
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Union[int, str, None] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach a stdout handler (and a file handler when a path is known) to the
    package logger. Calling it again replaces the handlers instead of stacking them.
    """
    log_level = resolve_level(level)
    log_file = log_file or config.LOG_FILE

    package_logger = logging.getLogger("xyexplorer")
    package_logger.setLevel(log_level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.info(f"Logging initialized at {logging.getLevelName(log_level)}"
                        + (f", mirrored to {log_file}." if log_file else "."))
    return package_logger
