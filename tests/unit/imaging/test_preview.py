"""Unit tests for frame_to_preview()."""

import numpy as np
import pytest
from PIL import Image

from fixedcam.imaging.preview import DEFAULT_PREVIEW_SIZE, frame_to_preview


class TestFrameToPreview:
    def test_bgr_converted_to_rgb(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        frame[:, :] = (255, 0, 0)  # BGR blue

        image = frame_to_preview(frame)

        assert isinstance(image, Image.Image)
        assert image.mode == "RGB"
        assert image.getpixel((10, 10)) == (0, 0, 255)

    def test_resized_to_preview_size(self):
        frame = np.zeros((1080, 1920, 3), dtype=np.uint8)
        assert frame_to_preview(frame).size == DEFAULT_PREVIEW_SIZE
        assert frame_to_preview(frame, (320, 240)).size == (320, 240)

    def test_same_size_not_resampled(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        frame[0, 0] = (0, 0, 255)
        image = frame_to_preview(frame, (640, 480))
        assert image.getpixel((0, 0)) == (255, 0, 0)

    def test_bgra_drops_alpha(self):
        frame = np.zeros((240, 320, 4), dtype=np.uint8)
        frame[:, :] = (0, 255, 0, 128)

        image = frame_to_preview(frame, (320, 240))

        assert image.mode == "RGB"
        assert image.getpixel((5, 5)) == (0, 255, 0)

    def test_grayscale(self):
        frame = np.full((240, 320), 77, dtype=np.uint8)
        image = frame_to_preview(frame, (320, 240))
        assert image.mode == "L"
        assert image.getpixel((0, 0)) == 77

    def test_unsupported_shape(self):
        with pytest.raises(ValueError):
            frame_to_preview(np.zeros((4, 4, 2), dtype=np.uint8))
