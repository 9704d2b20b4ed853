"""Logger helpers that keep every fixedcam message under one namespace."""

from __future__ import annotations

import logging
from typing import Optional, Union

LOGGER_NAMESPACE = "fixedcam"
DEFAULT_COMPONENT = "App"


def _qualified_name(name: Optional[str]) -> str:
    if not name:
        return LOGGER_NAMESPACE
    if name == LOGGER_NAMESPACE or name.startswith(f"{LOGGER_NAMESPACE}."):
        return name
    return f"{LOGGER_NAMESPACE}.{name}"


def _component_for(name: str) -> str:
    if not name:
        return DEFAULT_COMPONENT
    if name.startswith(LOGGER_NAMESPACE):
        tail = name[len(LOGGER_NAMESPACE):].lstrip(".")
        # fixedcam.capture.controller -> controller
        return tail.rsplit(".", 1)[-1] if tail else DEFAULT_COMPONENT
    return name


class StructuredLogger:
    """Thin wrapper that prefixes each record with ``[Component]``."""

    __slots__ = ("_logger", "_component")

    def __init__(self, logger: logging.Logger, component: Optional[str] = None) -> None:
        object.__setattr__(self, "_logger", logger)
        object.__setattr__(self, "_component", component or _component_for(logger.name))

    def __getattr__(self, item):
        return getattr(self._logger, item)

    def __setattr__(self, key, value):
        if key in self.__slots__:
            object.__setattr__(self, key, value)
        else:
            setattr(self._logger, key, value)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"StructuredLogger({self._logger!r}, component={self._component!r})"

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def component(self) -> str:
        return self._component

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _prefixed(self, message: object) -> str:
        text = str(message)
        prefix = f"[{self._component}]"
        if text.startswith(prefix):
            return text
        return f"{prefix} {text}"

    # Arguments are passed through untouched so %-formatting stays lazy.

    def log(self, level: int, message: object, *args, **kwargs) -> None:
        self._logger.log(level, self._prefixed(message), *args, **kwargs)

    def debug(self, message: object, *args, **kwargs) -> None:
        self._logger.debug(self._prefixed(message), *args, **kwargs)

    def info(self, message: object, *args, **kwargs) -> None:
        self._logger.info(self._prefixed(message), *args, **kwargs)

    def warning(self, message: object, *args, **kwargs) -> None:
        self._logger.warning(self._prefixed(message), *args, **kwargs)

    def error(self, message: object, *args, **kwargs) -> None:
        self._logger.error(self._prefixed(message), *args, **kwargs)

    def exception(self, message: object, *args, **kwargs) -> None:
        kwargs.setdefault("exc_info", True)
        self._logger.error(self._prefixed(message), *args, **kwargs)

    def critical(self, message: object, *args, **kwargs) -> None:
        self._logger.critical(self._prefixed(message), *args, **kwargs)

    def getChild(self, suffix: str) -> "StructuredLogger":
        return StructuredLogger(self._logger.getChild(suffix), component=f"{self._component}.{suffix}")


LoggerLike = Union[StructuredLogger, logging.Logger, logging.LoggerAdapter, None]


def get_module_logger(name: Optional[str] = None) -> StructuredLogger:
    """Return a structured logger scoped to the fixedcam namespace."""
    return StructuredLogger(logging.getLogger(_qualified_name(name)))


def ensure_structured_logger(
    logger: LoggerLike,
    *,
    component: Optional[str] = None,
    fallback_name: Optional[str] = None,
) -> StructuredLogger:
    """Wrap ``logger`` (or a fresh module logger) as a StructuredLogger."""

    if isinstance(logger, StructuredLogger):
        return logger
    if isinstance(logger, logging.LoggerAdapter):
        return StructuredLogger(logger.logger, component=component)
    if isinstance(logger, logging.Logger):
        return StructuredLogger(logger, component=component)
    return get_module_logger(fallback_name)


__all__ = [
    "LoggerLike",
    "StructuredLogger",
    "ensure_structured_logger",
    "get_module_logger",
]
