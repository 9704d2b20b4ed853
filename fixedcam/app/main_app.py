"""fixedcam entry point: wires config, controller and window together."""

from __future__ import annotations

import argparse
import asyncio
import tkinter as tk
from pathlib import Path
from typing import Optional, Sequence

from async_tkinter_loop import async_handler, main_loop

from fixedcam.capture.controller import CaptureController
from fixedcam.capture.state import SessionSettings
from fixedcam.config import AppConfig, load_config, remember_session_settings
from fixedcam.core.logging_config import configure_logging
from fixedcam.core.logging_utils import LoggerLike, ensure_structured_logger, get_module_logger
from fixedcam.errors import DeviceOpenError, InvalidSettingsError

from .view import CaptureView

DISPLAY_NAME = "Fixed-Point Camera"
OPEN_FAILED_MESSAGE = "Failed to open camera."

logger = get_module_logger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=DISPLAY_NAME)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file path (default: the config.txt shipped with the package)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory captured JPEG files are written to",
    )
    parser.add_argument(
        "--device",
        type=int,
        default=None,
        help="Camera device index passed to OpenCV",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging verbosity (debug, info, warning, error)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Rotating log file path",
    )
    parser.add_argument(
        "--no-console",
        action="store_true",
        default=False,
        help="Disable console logging",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def cli_overrides(args: argparse.Namespace) -> dict:
    return {
        "output_dir": args.output_dir,
        "device_index": args.device,
        "log_level": args.log_level,
        "log_file": args.log_file,
        "no_console": args.no_console,
    }


class CaptureApp:
    """Glue between the window and the controller.

    Start requests that fail to open the camera end in a blocking error
    dialog; successful starts remember the chosen settings in the config.
    """

    def __init__(
        self,
        config: AppConfig,
        controller: CaptureController,
        view: Optional[CaptureView] = None,
        *,
        logger: LoggerLike = None,
    ) -> None:
        self.config = config
        self.controller = controller
        self.view = view
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)

    async def request_start(self, settings: SessionSettings) -> bool:
        try:
            await self.controller.start(settings.resolution, settings.interval_ms)
        except DeviceOpenError as e:
            self._logger.error("%s", e)
            self._report_error(OPEN_FAILED_MESSAGE)
            return False
        except InvalidSettingsError as e:
            self._report_error(str(e))
            return False

        if not await remember_session_settings(self.config, settings):
            self._logger.debug("Session settings not persisted")
        return True

    async def request_stop(self) -> None:
        await self.controller.stop()

    async def shutdown(self) -> None:
        await self.controller.stop()

    def _report_error(self, message: str) -> None:
        if self.view is not None:
            self.view.show_error(message)


def build_controller(config: AppConfig) -> CaptureController:
    return CaptureController(
        output_dir=config.storage.output_dir,
        device_index=config.camera.device_index,
        jpeg_quality=config.storage.jpeg_quality,
    )


async def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    config = load_config(args.config, cli_overrides(args))

    configure_logging(
        config.logging.level,
        console=config.logging.console,
        log_file=config.logging.file,
    )
    logger.info(
        "Starting %s: device=%d output=%s config=%s",
        DISPLAY_NAME,
        config.camera.device_index,
        config.storage.output_dir,
        config.source_path,
    )

    root = tk.Tk()
    root.resizable(False, False)

    controller = build_controller(config)
    view = CaptureView(
        root,
        initial_settings=config.capture.to_session(),
        preview_size=config.preview.size,
    )
    view.build()

    app = CaptureApp(config, controller, view)
    view.bind_handlers(start=app.request_start, stop=app.request_stop)
    controller.subscribe(view.render_state)
    controller.set_preview_sink(view.show_frame)

    @async_handler
    async def on_close() -> None:
        await app.shutdown()
        root.destroy()

    root.protocol("WM_DELETE_WINDOW", on_close)

    try:
        await main_loop(root)
    except tk.TclError:
        pass
    finally:
        await app.shutdown()
        logger.info("%s stopped", DISPLAY_NAME)


def run(argv: Optional[Sequence[str]] = None) -> None:
    try:
        asyncio.run(main(argv))
    except KeyboardInterrupt:
        pass


__all__ = ["CaptureApp", "build_controller", "cli_overrides", "main", "parse_args", "run"]
