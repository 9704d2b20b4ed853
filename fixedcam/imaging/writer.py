"""JPEG persistence for annotated frames."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiofiles
import cv2
import numpy as np

from fixedcam.errors import FrameWriteError

logger = logging.getLogger(__name__)

JPEG_EXTENSION = ".jpg"
DEFAULT_JPEG_QUALITY = 95


def build_filename(timestamp: str, counter: int) -> str:
    return f"{timestamp}_{counter}{JPEG_EXTENSION}"


def encode_jpeg(frame: np.ndarray, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Encode ``frame`` as JPEG bytes. Raises ValueError when OpenCV refuses."""
    try:
        ok, buf = cv2.imencode(JPEG_EXTENSION, frame, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    except cv2.error as exc:
        raise ValueError(str(exc)) from exc
    if not ok:
        raise ValueError("JPEG encoder returned no data")
    return buf.tobytes()


def _target_path(output_dir: Path, timestamp: str, counter: int) -> Path:
    path = Path(output_dir) / build_filename(timestamp, counter)
    if not path.parent.is_dir():
        raise FrameWriteError(path, "output directory does not exist")
    return path


def save(
    frame: np.ndarray,
    timestamp: str,
    counter: int,
    output_dir: Path,
    *,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> Path:
    """Write ``frame`` to ``output_dir/<timestamp>_<counter>.jpg``."""
    path = _target_path(output_dir, timestamp, counter)
    try:
        data = encode_jpeg(frame, jpeg_quality)
    except ValueError as exc:
        raise FrameWriteError(path, f"encode failed: {exc}") from exc
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise FrameWriteError(path, exc.strerror or str(exc)) from exc
    logger.debug("Saved %s (%d bytes)", path, len(data))
    return path


async def save_async(
    frame: np.ndarray,
    timestamp: str,
    counter: int,
    output_dir: Path,
    *,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> Path:
    """Async variant of :func:`save`; encoding runs in a worker thread."""
    path = _target_path(output_dir, timestamp, counter)
    try:
        data = await asyncio.to_thread(encode_jpeg, frame, jpeg_quality)
    except ValueError as exc:
        raise FrameWriteError(path, f"encode failed: {exc}") from exc
    try:
        async with aiofiles.open(path, "wb") as fh:
            await fh.write(data)
    except OSError as exc:
        raise FrameWriteError(path, exc.strerror or str(exc)) from exc
    logger.debug("Saved %s (%d bytes)", path, len(data))
    return path


__all__ = ["DEFAULT_JPEG_QUALITY", "build_filename", "encode_jpeg", "save", "save_async"]
