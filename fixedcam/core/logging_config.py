"""Root logging setup for the fixedcam window process.

fixedcam owns at most two root handlers, a stdout console handler and a
rotating file handler. Each is tagged with a handler name so that calling
:func:`configure_logging` again replaces them without touching handlers
installed by anyone else (test harnesses, embedding applications).
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

CONSOLE_HANDLER_NAME = "fixedcam.console"
FILE_HANDLER_NAME = "fixedcam.file"
_OWNED_HANDLERS = (CONSOLE_HANDLER_NAME, FILE_HANDLER_NAME)

# Third-party loggers held at WARNING or above
QUIET_LOGGERS = ("PIL", "asyncio")

_DEFAULT_MAX_BYTES = 500 * 1024
_DEFAULT_BACKUP_COUNT = 2


def coerce_level(level: Union[int, str]) -> int:
    """Turn ``"info"``/``"DEBUG"``/``20`` into a numeric level."""
    if isinstance(level, str):
        name = level.strip().upper()
        if not name or not isinstance(getattr(logging, name, None), int):
            raise ValueError(f"Unknown log level '{level}'")
        return getattr(logging, name)
    return int(level)


def _drop_owned_handlers(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        if handler.get_name() in _OWNED_HANDLERS:
            root.removeHandler(handler)
            handler.close()


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = _DEFAULT_MAX_BYTES,
    backup_count: int = _DEFAULT_BACKUP_COUNT,
) -> List[logging.Handler]:
    """Install the fixedcam handlers on the root logger.

    Args:
        level: Root level, as a number or a name such as ``"info"``.
        console: Emit records on stdout.
        log_file: Rotating log file; parent directories are created.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files kept next to the active one.

    Returns:
        The handlers that were installed.
    """
    numeric_level = coerce_level(level)
    root = logging.getLogger()
    _drop_owned_handlers(root)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    installed: List[logging.Handler] = []

    if console:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.set_name(CONSOLE_HANDLER_NAME)
        installed.append(stream_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.set_name(FILE_HANDLER_NAME)
        installed.append(file_handler)

    for handler in installed:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, numeric_level))

    return installed


__all__ = ["configure_logging", "coerce_level", "LOG_FORMAT", "LOG_DATEFMT", "QUIET_LOGGERS"]
