"""Convert captured frames into images the Tk preview can display."""

from __future__ import annotations

import cv2
import numpy as np
from PIL import Image

DEFAULT_PREVIEW_SIZE = (640, 480)


def frame_to_preview(frame: np.ndarray, size: tuple[int, int] = DEFAULT_PREVIEW_SIZE) -> Image.Image:
    """Return ``frame`` (OpenCV BGR/BGRA/gray) as a Pillow image of exactly ``size``.

    The frame is stretched to the fixed preview size; aspect ratio is not kept.
    """
    if frame.ndim == 2:
        image = Image.fromarray(frame)
    elif frame.ndim == 3 and frame.shape[2] == 4:
        image = Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGRA2RGB))
    elif frame.ndim == 3 and frame.shape[2] == 3:
        image = Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
    else:
        raise ValueError(f"Unsupported frame shape {frame.shape}")

    if image.size != tuple(size):
        image = image.resize(tuple(size), Image.Resampling.BILINEAR)
    return image


__all__ = ["DEFAULT_PREVIEW_SIZE", "frame_to_preview"]
