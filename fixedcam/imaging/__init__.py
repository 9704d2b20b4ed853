"""Per-frame image operations: overlay, JPEG output, preview conversion."""

from .annotate import TextPlacement, annotate, build_stamp_text, format_timestamp, text_placement
from .preview import frame_to_preview
from .writer import build_filename, save, save_async

__all__ = [
    "TextPlacement",
    "annotate",
    "build_filename",
    "build_stamp_text",
    "format_timestamp",
    "frame_to_preview",
    "save",
    "save_async",
    "text_placement",
]
