"""Timestamp overlay burned into each saved frame."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import cv2
import numpy as np

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

FONT_FACE = cv2.FONT_HERSHEY_SIMPLEX
FONT_SCALE = 2.0
FONT_THICKNESS = 2
FONT_COLOR = (255, 255, 255)  # BGR white
TEXT_MARGIN = 10
MIN_FONT_SCALE = 0.3
_SCALE_STEP = 0.1


@dataclass(frozen=True, slots=True)
class TextPlacement:
    """Where and how large the overlay text is drawn.

    ``origin`` is the left end of the baseline, which is what ``cv2.putText``
    expects. ``baseline`` is the descent below it.
    """

    origin: tuple[int, int]
    width: int
    height: int
    baseline: int
    scale: float

    @property
    def box(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom) in pixel coordinates."""
        x, y = self.origin
        return (x, y - self.height, x + self.width, y + self.baseline)


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


def build_stamp_text(timestamp: str, counter: int) -> str:
    return f"{timestamp}_{counter}"


def text_placement(
    frame_size: tuple[int, int],
    text: str,
    *,
    scale: float = FONT_SCALE,
    thickness: int = FONT_THICKNESS,
    margin: int = TEXT_MARGIN,
) -> TextPlacement:
    """Anchor ``text`` to the bottom-right corner of a ``(width, height)`` frame.

    The font scale shrinks until the text fits inside the margins, so narrow
    frames (640 px wide) still get the whole stamp.
    """
    width, height = frame_size
    avail_w = width - 2 * margin
    avail_h = height - 2 * margin

    while True:
        (text_w, text_h), baseline = cv2.getTextSize(text, FONT_FACE, scale, thickness)
        fits = text_w <= avail_w and text_h + baseline <= avail_h
        if fits or scale <= MIN_FONT_SCALE:
            break
        scale = max(MIN_FONT_SCALE, round(scale - _SCALE_STEP, 2))

    origin = (width - margin - text_w, height - margin - baseline)
    return TextPlacement(origin=origin, width=text_w, height=text_h, baseline=baseline, scale=scale)


def annotate(frame: np.ndarray, text: str) -> np.ndarray:
    """Draw ``text`` in the bottom-right corner of ``frame`` (in place)."""
    height, width = frame.shape[:2]
    placement = text_placement((width, height), text)
    cv2.putText(
        frame,
        text,
        placement.origin,
        FONT_FACE,
        placement.scale,
        FONT_COLOR,
        FONT_THICKNESS,
        cv2.LINE_AA,
    )
    return frame


__all__ = [
    "TextPlacement",
    "annotate",
    "build_stamp_text",
    "format_timestamp",
    "text_placement",
]
