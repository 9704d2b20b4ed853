"""Fixed-point camera: periodic timestamped JPEG capture with live preview."""

from __future__ import annotations

from importlib import metadata
from typing import Optional, Sequence

try:
    __version__ = metadata.version("fixedcam")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


def run(argv: Optional[Sequence[str]] = None) -> None:
    """Launch the capture window."""
    from .app.main_app import run as _run

    _run(argv)


__all__ = ["__version__", "run"]
