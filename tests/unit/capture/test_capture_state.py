"""Unit tests for session settings and their parsing/persistence helpers."""

from datetime import datetime

import numpy as np
import pytest

from fixedcam.capture.frame import CapturedFrame
from fixedcam.capture.state import (
    DEFAULT_RESOLUTION,
    SUPPORTED_RESOLUTIONS,
    CaptureState,
    Phase,
    SessionSettings,
    format_resolution,
    parse_interval_minutes,
    parse_resolution,
    settings_from_persistable,
    settings_to_persistable,
)
from fixedcam.errors import CaptureError, InvalidSettingsError


class TestSessionSettings:
    """Tests for SessionSettings."""

    def test_defaults(self):
        settings = SessionSettings()
        assert settings.resolution == (640, 480)
        assert settings.interval_ms == 60_000
        assert settings.interval_minutes == 1

    def test_from_minutes(self):
        settings = SessionSettings.from_minutes((1280, 720), 5)
        assert settings.resolution == (1280, 720)
        assert settings.interval_ms == 300_000

    def test_frozen(self):
        settings = SessionSettings()
        with pytest.raises(AttributeError):
            settings.interval_ms = 10

    @pytest.mark.parametrize("resolution", SUPPORTED_RESOLUTIONS)
    def test_supported_resolutions_validate(self, resolution):
        SessionSettings(resolution=resolution, interval_ms=1000).validate()

    def test_unsupported_resolution_rejected(self):
        with pytest.raises(InvalidSettingsError, match="Unsupported resolution 800x600"):
            SessionSettings(resolution=(800, 600)).validate()

    @pytest.mark.parametrize("interval_ms", [0, -1])
    def test_non_positive_interval_rejected(self, interval_ms):
        with pytest.raises(InvalidSettingsError):
            SessionSettings(interval_ms=interval_ms).validate()

    def test_invalid_settings_error_hierarchy(self):
        assert issubclass(InvalidSettingsError, CaptureError)
        assert issubclass(InvalidSettingsError, ValueError)


class TestParsing:
    """Tests for the text parsers behind the window inputs."""

    def test_format_resolution(self):
        assert format_resolution((1920, 1080)) == "1920x1080"

    @pytest.mark.parametrize(
        "text,expected",
        [("640x480", (640, 480)), ("1280X720", (1280, 720)), ("1920x1080", (1920, 1080))],
    )
    def test_parse_resolution(self, text, expected):
        assert parse_resolution(text) == expected

    @pytest.mark.parametrize("text", ["", "640", "axb", "640x480x3"])
    def test_parse_resolution_invalid(self, text):
        with pytest.raises(InvalidSettingsError):
            parse_resolution(text)

    @pytest.mark.parametrize("text,expected", [("1", 1), (" 15 ", 15), ("60", 60)])
    def test_parse_interval(self, text, expected):
        assert parse_interval_minutes(text) == expected

    @pytest.mark.parametrize("text", ["0", "-5", "1.5", "abc", ""])
    def test_parse_interval_invalid(self, text):
        with pytest.raises(InvalidSettingsError):
            parse_interval_minutes(text)


class TestPersistence:
    """Tests for settings_to_persistable / settings_from_persistable."""

    def test_to_persistable(self):
        entries = settings_to_persistable(SessionSettings.from_minutes((1280, 720), 10))
        assert entries == {
            "resolution_width": "1280",
            "resolution_height": "720",
            "interval_minutes": "10",
        }

    def test_from_persistable(self):
        data = {"resolution_width": "1920", "resolution_height": "1080", "interval_minutes": "3"}
        settings = settings_from_persistable(data)
        assert settings.resolution == (1920, 1080)
        assert settings.interval_ms == 180_000

    def test_from_persistable_empty_uses_defaults(self):
        assert settings_from_persistable({}) == SessionSettings()

    def test_unsupported_resolution_falls_back(self):
        data = {"resolution_width": "800", "resolution_height": "600", "interval_minutes": "2"}
        settings = settings_from_persistable(data)
        assert settings.resolution == DEFAULT_RESOLUTION
        assert settings.interval_ms == 120_000

    @pytest.mark.parametrize("minutes", ["0", "-3", "often"])
    def test_bad_interval_falls_back(self, minutes):
        settings = settings_from_persistable({"interval_minutes": minutes})
        assert settings.interval_ms == SessionSettings().interval_ms


class TestCaptureState:
    """Tests for CaptureState and CapturedFrame."""

    def test_initial_state(self):
        state = CaptureState()
        assert state.phase == Phase.IDLE
        assert state.running is False
        assert state.counter == 0
        assert state.last_saved is None
        assert state.last_error == ""

    def test_running_property(self):
        assert CaptureState(phase=Phase.RUNNING).running is True

    def test_captured_frame_size(self):
        frame = CapturedFrame(
            data=np.zeros((720, 1280, 3), dtype=np.uint8),
            counter=4,
            captured_at=datetime(2024, 1, 1),
        )
        assert frame.size == (1280, 720)
        with pytest.raises(AttributeError):
            frame.counter = 5
