"""State definitions for the capture controller."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Any, Optional

from fixedcam.errors import InvalidSettingsError

Resolution = tuple[int, int]

SUPPORTED_RESOLUTIONS: tuple[Resolution, ...] = (
    (640, 480),
    (1280, 720),
    (1920, 1080),
)
DEFAULT_RESOLUTION: Resolution = SUPPORTED_RESOLUTIONS[0]
DEFAULT_INTERVAL_MINUTES = 1
MS_PER_MINUTE = 60 * 1000


class Phase(Enum):
    """Capture lifecycle phase."""

    IDLE = auto()
    RUNNING = auto()


@dataclass(frozen=True)
class SessionSettings:
    """Per-session capture settings - immutable once a session starts."""

    resolution: Resolution = DEFAULT_RESOLUTION
    interval_ms: int = DEFAULT_INTERVAL_MINUTES * MS_PER_MINUTE

    @classmethod
    def from_minutes(cls, resolution: Resolution, minutes: int) -> "SessionSettings":
        return cls(resolution=tuple(resolution), interval_ms=int(minutes) * MS_PER_MINUTE)

    @property
    def interval_minutes(self) -> float:
        return self.interval_ms / MS_PER_MINUTE

    def validate(self) -> None:
        if tuple(self.resolution) not in SUPPORTED_RESOLUTIONS:
            raise InvalidSettingsError(
                f"Unsupported resolution {format_resolution(self.resolution)}; "
                f"choose one of {', '.join(format_resolution(r) for r in SUPPORTED_RESOLUTIONS)}"
            )
        if self.interval_ms <= 0:
            raise InvalidSettingsError(f"Capture interval must be positive, got {self.interval_ms} ms")


@dataclass
class CaptureState:
    """Mutable controller state handed to subscribers."""

    phase: Phase = Phase.IDLE
    settings: Optional[SessionSettings] = None
    counter: int = 0  # Number the next completed tick will use
    frames_saved: int = 0
    last_saved: Optional[Path] = None
    last_capture_at: Optional[datetime] = None
    last_error: str = ""

    @property
    def running(self) -> bool:
        return self.phase == Phase.RUNNING


def format_resolution(resolution: Resolution) -> str:
    return f"{resolution[0]}x{resolution[1]}"


def parse_resolution(text: str) -> Resolution:
    """Parse ``"1280x720"`` into ``(1280, 720)``."""
    try:
        width, height = (int(part) for part in text.lower().split("x", 1))
    except ValueError as exc:
        raise InvalidSettingsError(f"Invalid resolution '{text}'") from exc
    return (width, height)


def parse_interval_minutes(text: str) -> int:
    """Parse the interval entry text; whole minutes, at least one."""
    try:
        minutes = int(str(text).strip())
    except ValueError as exc:
        raise InvalidSettingsError(f"Interval must be a whole number of minutes, got '{text}'") from exc
    if minutes <= 0:
        raise InvalidSettingsError(f"Interval must be at least 1 minute, got {minutes}")
    return minutes


# ---------------------------------------------------------------------------
# Settings Persistence Helpers
# ---------------------------------------------------------------------------


def settings_to_persistable(settings: SessionSettings) -> dict[str, str]:
    """Convert SessionSettings to config file entries."""
    return {
        "resolution_width": str(settings.resolution[0]),
        "resolution_height": str(settings.resolution[1]),
        "interval_minutes": str(max(1, round(settings.interval_minutes))),
    }


def settings_from_persistable(
    data: dict[str, Any],
    defaults: Optional[SessionSettings] = None,
) -> SessionSettings:
    """Restore SessionSettings from config entries.

    Unparseable or unsupported values fall back to ``defaults``.
    """
    if defaults is None:
        defaults = SessionSettings()

    def get_int(key: str, default: int) -> int:
        val = data.get(key)
        if val is None:
            return default
        try:
            return int(val)
        except (ValueError, TypeError):
            return default

    resolution = (
        get_int("resolution_width", defaults.resolution[0]),
        get_int("resolution_height", defaults.resolution[1]),
    )
    if resolution not in SUPPORTED_RESOLUTIONS:
        resolution = defaults.resolution

    minutes = get_int("interval_minutes", round(defaults.interval_minutes))
    if minutes <= 0:
        return SessionSettings(resolution=resolution, interval_ms=defaults.interval_ms)
    return SessionSettings.from_minutes(resolution, minutes)
