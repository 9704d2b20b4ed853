"""Unit tests for the window glue: status text, start/stop requests and CLI."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

pytest.importorskip("tkinter")

from fixedcam.app.main_app import CaptureApp, OPEN_FAILED_MESSAGE, cli_overrides, parse_args
from fixedcam.app.view import (
    STATUS_NOT_STARTED,
    STATUS_STARTED,
    STATUS_STOPPED,
    status_text,
)
from fixedcam.capture.state import CaptureState, Phase, SessionSettings
from fixedcam.config import AppConfig
from fixedcam.errors import DeviceOpenError, InvalidSettingsError


@pytest.fixture
def controller():
    mock = MagicMock()
    mock.start = AsyncMock()
    mock.stop = AsyncMock()
    return mock


@pytest.fixture
def view():
    return MagicMock()


class TestStatusText:
    """Tests for status_text()."""

    def test_not_started(self):
        assert status_text(CaptureState(), ever_started=False) == STATUS_NOT_STARTED

    def test_stopped_after_session(self):
        assert status_text(CaptureState(), ever_started=True) == STATUS_STOPPED

    def test_started(self):
        state = CaptureState(phase=Phase.RUNNING, counter=1)
        assert status_text(state, ever_started=True) == STATUS_STARTED

    def test_started_with_last_saved_and_error(self):
        state = CaptureState(
            phase=Phase.RUNNING,
            counter=4,
            last_saved=Path("captures/20240101_120000_3.jpg"),
            last_error="Camera 0 returned no frame",
        )
        assert status_text(state, ever_started=True) == (
            "Status: Started | Saved 20240101_120000_3.jpg | Camera 0 returned no frame"
        )


class TestCaptureApp:
    """Tests for CaptureApp start/stop handling."""

    @pytest.mark.asyncio
    async def test_start_success(self, controller, view):
        config = AppConfig()
        app = CaptureApp(config, controller, view)
        settings = SessionSettings.from_minutes((1280, 720), 2)

        assert await app.request_start(settings) is True

        controller.start.assert_awaited_once_with((1280, 720), 120_000)
        view.show_error.assert_not_called()
        assert config.capture.resolution == (1280, 720)
        assert config.capture.interval_minutes == 2

    @pytest.mark.asyncio
    async def test_open_failure_shows_dialog(self, controller, view):
        controller.start.side_effect = DeviceOpenError(0)
        config = AppConfig()
        app = CaptureApp(config, controller, view)

        assert await app.request_start(SessionSettings()) is False

        view.show_error.assert_called_once_with(OPEN_FAILED_MESSAGE)
        assert OPEN_FAILED_MESSAGE == "Failed to open camera."
        assert config.capture.interval_minutes == 1

    @pytest.mark.asyncio
    async def test_invalid_settings_reported(self, controller, view):
        controller.start.side_effect = InvalidSettingsError("Unsupported resolution 800x600")
        app = CaptureApp(AppConfig(), controller, view)

        assert await app.request_start(SessionSettings(resolution=(800, 600))) is False

        view.show_error.assert_called_once_with("Unsupported resolution 800x600")

    @pytest.mark.asyncio
    async def test_stop_and_shutdown(self, controller, view):
        app = CaptureApp(AppConfig(), controller, view)

        await app.request_stop()
        await app.shutdown()

        assert controller.stop.await_count == 2

    @pytest.mark.asyncio
    async def test_without_view_errors_only_logged(self, controller):
        controller.start.side_effect = DeviceOpenError(1)
        app = CaptureApp(AppConfig(), controller, None)

        assert await app.request_start(SessionSettings()) is False


class TestCommandLine:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = parse_args([])
        assert args.config is None
        assert args.output_dir is None
        assert args.device is None
        assert args.no_console is False

    def test_flags(self):
        args = parse_args(
            ["--config", "my.txt", "--output-dir", "shots", "--device", "2", "--log-level", "debug", "--no-console"]
        )
        assert args.config == Path("my.txt")
        assert args.output_dir == Path("shots")
        assert args.device == 2

        overrides = cli_overrides(args)
        assert overrides == {
            "output_dir": Path("shots"),
            "device_index": 2,
            "log_level": "debug",
            "log_file": None,
            "no_console": True,
        }
