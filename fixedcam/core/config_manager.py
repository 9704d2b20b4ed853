"""Reader/writer for the plain ``key = value`` config files."""

import asyncio
import errno
import hashlib
import re
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import aiofiles

from fixedcam.core.logging_utils import get_module_logger
from fixedcam.core.paths import PACKAGE_ROOT, USER_CONFIG_OVERRIDES_DIR


logger = get_module_logger("ConfigManager")


class ConfigManager:

    def __init__(self, overrides_dir: Optional[Path] = None):
        self.lock = asyncio.Lock()
        self._overrides_dir = Path(overrides_dir) if overrides_dir else USER_CONFIG_OVERRIDES_DIR
        self._package_root = PACKAGE_ROOT.resolve()

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _stringify_value(value: Any) -> str:
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)

    @staticmethod
    def _parse_config_lines(lines: Iterable[str]) -> Dict[str, str]:
        config: Dict[str, str] = {}

        for raw_line in lines:
            line = raw_line.strip()
            if not line or line.startswith('#') or '=' not in line:
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            value = value.split('#')[0].strip()

            if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                value = value[1:-1]

            if key:
                config[key] = value

        return config

    def _apply_updates(self, lines: list[str], updates: Dict[str, Any]) -> list[str]:
        updated_keys = set()

        for i, line in enumerate(lines):
            stripped = line.strip()
            if not stripped or stripped.startswith('#') or '=' not in stripped:
                continue
            key = stripped.split('=')[0].strip()
            if key in updates:
                indent = len(line) - len(line.lstrip())
                lines[i] = ' ' * indent + f"{key} = {self._stringify_value(updates[key])}\n"
                updated_keys.add(key)

        if lines and not lines[-1].endswith('\n'):
            lines[-1] += '\n'

        for key, value in updates.items():
            if key not in updated_keys:
                lines.append(f"{key} = {self._stringify_value(value)}\n")
                logger.debug("Added new config key: %s", key)

        return lines

    def override_path(self, config_path: Path) -> Path:
        try:
            rel_path = config_path.resolve().relative_to(self._package_root)
        except ValueError:
            digest = hashlib.sha1(str(config_path).encode('utf-8')).hexdigest()[:10]
            safe_name = re.sub(r'[^a-zA-Z0-9._-]+', '_', config_path.stem or 'config')
            rel_path = Path('external') / f"{safe_name}_{digest}{config_path.suffix or '.txt'}"
        return self._overrides_dir / rel_path

    def _load_override_sync(self, config_path: Path) -> Dict[str, str]:
        override_path = self.override_path(config_path)
        if not override_path.exists():
            return {}
        try:
            with open(override_path, 'r', encoding='utf-8') as fh:
                return self._parse_config_lines(fh)
        except OSError as exc:
            logger.warning("Failed to read override config %s: %s", override_path, exc)
            return {}

    def _write_override_sync(self, config_path: Path, updates: Dict[str, Any]) -> bool:
        override_path = self.override_path(config_path)
        try:
            merged = self._load_override_sync(config_path)
            for key, value in updates.items():
                merged[key] = self._stringify_value(value)

            override_path.parent.mkdir(parents=True, exist_ok=True)
            with open(override_path, 'w', encoding='utf-8') as fh:
                for key in sorted(merged):
                    fh.write(f"{key} = {merged[key]}\n")

            logger.debug("Stored config overrides in %s", override_path)
            return True
        except OSError as exc:
            logger.error("Failed to write config override %s: %s", override_path, exc)
            return False

    def _clear_override(self, config_path: Path) -> None:
        try:
            self.override_path(config_path).unlink(missing_ok=True)
        except OSError:
            return

    @staticmethod
    def _is_read_only_error(exc: OSError) -> bool:
        return isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EROFS)

    # ------------------------------------------------------------------
    # Reading

    def read_config(self, config_path: Path) -> Dict[str, str]:
        """Read ``config_path`` merged with any user override file."""
        config: Dict[str, str] = {}

        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    config = self._parse_config_lines(f)
            except OSError as e:
                logger.error("Failed to read config %s: %s", config_path, e)

        config.update(self._load_override_sync(config_path))
        return config

    # ------------------------------------------------------------------
    # Writing

    async def write_config_async(self, config_path: Path, updates: Dict[str, Any]) -> bool:
        """Update keys in place, appending unknown keys at the end."""
        if not updates:
            return True
        if not await asyncio.to_thread(config_path.exists):
            logger.error("Config file not found: %s", config_path)
            return False

        async with self.lock:
            try:
                async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                    lines = await f.readlines()
                lines = self._apply_updates(lines, updates)
                async with aiofiles.open(config_path, 'w', encoding='utf-8') as f:
                    await f.writelines(lines)
                await asyncio.to_thread(self._clear_override, config_path)
                return True
            except OSError as e:
                if self._is_read_only_error(e):
                    logger.warning("Config %s is not writable (%s). Falling back to override file", config_path, e)
                    return await asyncio.to_thread(self._write_override_sync, config_path, updates)
                logger.error("Failed to write config %s: %s", config_path, e, exc_info=True)
                return False

    # ------------------------------------------------------------------
    # Typed getters

    def get_int(self, config: Dict[str, str], key: str, default: int = 0) -> int:
        if key not in config:
            return default
        try:
            return int(config[key])
        except ValueError:
            logger.warning("Invalid int value for %s: %s, using default %d", key, config[key], default)
            return default

    def get_str(self, config: Dict[str, str], key: str, default: str = "") -> str:
        return config.get(key, default) or default


_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
