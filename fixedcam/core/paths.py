"""Path constants for fixedcam."""

from __future__ import annotations

import os
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1]

# Shipped defaults; edited in place when writable
CONFIG_PATH = PACKAGE_ROOT / "config.txt"

DEFAULT_OUTPUT_DIR = Path("./captures")
DEFAULT_LOG_FILE = Path("./logs/fixedcam.log")

# Per-user state, used when the shipped config is read-only
_USER_STATE_ENV = os.environ.get("FIXEDCAM_STATE_DIR")
USER_STATE_DIR = Path(_USER_STATE_ENV).expanduser() if _USER_STATE_ENV else (Path.home() / ".fixedcam")
USER_CONFIG_OVERRIDES_DIR = USER_STATE_DIR / "config_overrides"
