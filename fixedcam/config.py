"""Typed configuration for fixedcam."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from fixedcam.capture.state import (
    DEFAULT_INTERVAL_MINUTES,
    DEFAULT_RESOLUTION,
    SessionSettings,
    settings_from_persistable,
    settings_to_persistable,
)
from fixedcam.core.config_manager import ConfigManager, get_config_manager
from fixedcam.core.logging_config import coerce_level
from fixedcam.core.logging_utils import LoggerLike, ensure_structured_logger
from fixedcam.core.paths import CONFIG_PATH, DEFAULT_LOG_FILE, DEFAULT_OUTPUT_DIR
from fixedcam.imaging.preview import DEFAULT_PREVIEW_SIZE
from fixedcam.imaging.writer import DEFAULT_JPEG_QUALITY

DEFAULT_DEVICE_INDEX = 0
DEFAULT_LOG_LEVEL = "info"


@dataclass(slots=True)
class CameraSettings:
    device_index: int = DEFAULT_DEVICE_INDEX


@dataclass(slots=True)
class CaptureSettings:
    resolution: tuple[int, int] = DEFAULT_RESOLUTION
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES

    def to_session(self) -> SessionSettings:
        return SessionSettings.from_minutes(self.resolution, self.interval_minutes)


@dataclass(slots=True)
class StorageSettings:
    output_dir: Path = DEFAULT_OUTPUT_DIR
    jpeg_quality: int = DEFAULT_JPEG_QUALITY


@dataclass(slots=True)
class PreviewSettings:
    size: tuple[int, int] = DEFAULT_PREVIEW_SIZE


@dataclass(slots=True)
class LoggingSettings:
    level: str = DEFAULT_LOG_LEVEL
    file: Optional[Path] = DEFAULT_LOG_FILE
    console: bool = True


@dataclass(slots=True)
class AppConfig:
    camera: CameraSettings = field(default_factory=CameraSettings)
    capture: CaptureSettings = field(default_factory=CaptureSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    preview: PreviewSettings = field(default_factory=PreviewSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source_path: Optional[Path] = None

    @classmethod
    def from_mapping(
        cls,
        data: Dict[str, str],
        *,
        cli_overrides: Optional[Dict[str, Any]] = None,
        manager: Optional[ConfigManager] = None,
        logger: LoggerLike = None,
    ) -> "AppConfig":
        """Build a validated config from raw ``key = value`` entries.

        Invalid values are replaced by their defaults with a warning; CLI
        overrides (``None`` entries ignored) win over the file.
        """
        log = ensure_structured_logger(logger, fallback_name=__name__)
        cm = manager or get_config_manager()
        overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}

        device_index = int(overrides.get("device_index", cm.get_int(data, "device_index", DEFAULT_DEVICE_INDEX)))
        if device_index < 0:
            log.warning("device_index must be >= 0, got %d; using %d", device_index, DEFAULT_DEVICE_INDEX)
            device_index = DEFAULT_DEVICE_INDEX

        session = settings_from_persistable(data)

        quality = cm.get_int(data, "jpeg_quality", DEFAULT_JPEG_QUALITY)
        if not 0 <= quality <= 100:
            log.warning("jpeg_quality must be within 0-100, got %d; using %d", quality, DEFAULT_JPEG_QUALITY)
            quality = DEFAULT_JPEG_QUALITY

        output_dir = Path(overrides.get("output_dir") or cm.get_str(data, "output_dir", str(DEFAULT_OUTPUT_DIR)))

        preview_size = (
            cm.get_int(data, "preview_width", DEFAULT_PREVIEW_SIZE[0]),
            cm.get_int(data, "preview_height", DEFAULT_PREVIEW_SIZE[1]),
        )
        if min(preview_size) <= 0:
            log.warning("Invalid preview size %s; using %s", preview_size, DEFAULT_PREVIEW_SIZE)
            preview_size = DEFAULT_PREVIEW_SIZE

        level = str(overrides.get("log_level") or cm.get_str(data, "log_level", DEFAULT_LOG_LEVEL))
        try:
            coerce_level(level)
        except ValueError:
            log.warning("Unknown log_level '%s'; using %s", level, DEFAULT_LOG_LEVEL)
            level = DEFAULT_LOG_LEVEL

        log_file_text = overrides.get("log_file") or cm.get_str(data, "log_file", str(DEFAULT_LOG_FILE))
        log_file = Path(log_file_text) if str(log_file_text).strip().lower() not in ("", "none") else None

        return cls(
            camera=CameraSettings(device_index=device_index),
            capture=CaptureSettings(
                resolution=session.resolution,
                interval_minutes=max(1, round(session.interval_minutes)),
            ),
            storage=StorageSettings(output_dir=output_dir, jpeg_quality=quality),
            preview=PreviewSettings(size=preview_size),
            logging=LoggingSettings(
                level=level,
                file=log_file,
                console=not overrides.get("no_console", False),
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        entries: Dict[str, Any] = {
            "device_index": self.camera.device_index,
            "output_dir": str(self.storage.output_dir),
            "jpeg_quality": self.storage.jpeg_quality,
            "preview_width": self.preview.size[0],
            "preview_height": self.preview.size[1],
            "log_level": self.logging.level,
            "log_file": str(self.logging.file) if self.logging.file else "none",
        }
        entries.update(settings_to_persistable(self.capture.to_session()))
        return entries


def load_config(
    path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    *,
    manager: Optional[ConfigManager] = None,
) -> AppConfig:
    """Read ``path`` (default: the shipped config.txt) into an AppConfig."""
    config_path = Path(path) if path else CONFIG_PATH
    cm = manager or get_config_manager()
    data = cm.read_config(config_path)
    config = AppConfig.from_mapping(data, cli_overrides=cli_overrides, manager=cm)
    config.source_path = config_path
    return config


async def remember_session_settings(
    config: AppConfig,
    settings: SessionSettings,
    *,
    manager: Optional[ConfigManager] = None,
) -> bool:
    """Persist the resolution/interval of a started session for the next launch."""
    config.capture.resolution = tuple(settings.resolution)
    config.capture.interval_minutes = max(1, round(settings.interval_minutes))
    if config.source_path is None:
        return False
    cm = manager or get_config_manager()
    return await cm.write_config_async(config.source_path, settings_to_persistable(settings))


__all__ = [
    "AppConfig",
    "CameraSettings",
    "CaptureSettings",
    "LoggingSettings",
    "PreviewSettings",
    "StorageSettings",
    "load_config",
    "remember_session_settings",
]
