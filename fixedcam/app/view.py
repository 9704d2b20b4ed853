"""Main window: preview pane, start/stop controls and status line.

The view never drives the camera itself. It renders :class:`CaptureState`
notifications from the controller and forwards button presses to the
handlers bound with :meth:`CaptureView.bind_handlers`.
"""

from __future__ import annotations

import tkinter as tk
from tkinter import messagebox, ttk
from typing import Awaitable, Callable, Optional

import numpy as np
from async_tkinter_loop import async_handler
from PIL import ImageTk

from fixedcam.capture.state import (
    SUPPORTED_RESOLUTIONS,
    CaptureState,
    Phase,
    SessionSettings,
    format_resolution,
    parse_interval_minutes,
    parse_resolution,
)
from fixedcam.core.logging_utils import LoggerLike, ensure_structured_logger
from fixedcam.errors import InvalidSettingsError
from fixedcam.imaging.preview import DEFAULT_PREVIEW_SIZE, frame_to_preview

WINDOW_TITLE = "Fixed-Point Camera"
STATUS_NOT_STARTED = "Status: Not Started"
STATUS_STARTED = "Status: Started"
STATUS_STOPPED = "Status: Stopped"

StartHandler = Callable[[SessionSettings], Awaitable[bool]]
StopHandler = Callable[[], Awaitable[None]]


def status_text(state: CaptureState, *, ever_started: bool) -> str:
    """Compose the status line for ``state``."""
    if state.phase == Phase.RUNNING:
        parts = [STATUS_STARTED]
        if state.last_saved is not None:
            parts.append(f"Saved {state.last_saved.name}")
        if state.last_error:
            parts.append(state.last_error)
        return " | ".join(parts)
    return STATUS_STOPPED if ever_started else STATUS_NOT_STARTED


class CaptureView:
    """Tk widgets for a single capture session."""

    def __init__(
        self,
        root: tk.Tk,
        *,
        initial_settings: Optional[SessionSettings] = None,
        preview_size: tuple[int, int] = DEFAULT_PREVIEW_SIZE,
        logger: LoggerLike = None,
    ) -> None:
        self._root = root
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)
        self._preview_size = tuple(preview_size)
        self._initial = initial_settings or SessionSettings()

        self._start_handler: Optional[StartHandler] = None
        self._stop_handler: Optional[StopHandler] = None

        self._photo: Optional[ImageTk.PhotoImage] = None
        self._image_item: Optional[int] = None
        self._ever_started = False
        self._busy = False

        self._canvas: Optional[tk.Canvas] = None
        self._start_button: Optional[ttk.Button] = None
        self._stop_button: Optional[ttk.Button] = None
        self._resolution_box: Optional[ttk.Combobox] = None
        self._interval_entry: Optional[ttk.Entry] = None
        self._resolution_var: Optional[tk.StringVar] = None
        self._interval_var: Optional[tk.StringVar] = None
        self._status_var: Optional[tk.StringVar] = None

    # ------------------------------------------------------------------
    # Construction

    def build(self) -> None:
        root = self._root
        root.title(WINDOW_TITLE)
        root.columnconfigure(0, weight=1)

        width, height = self._preview_size
        self._canvas = tk.Canvas(root, width=width, height=height, bg="black", highlightthickness=0)
        self._canvas.grid(row=0, column=0, columnspan=2, sticky="nsew")

        buttons = ttk.Frame(root, padding=6)
        buttons.grid(row=1, column=0, sticky="w")
        self._start_button = ttk.Button(buttons, text="Start", command=self._on_start_clicked)
        self._start_button.grid(row=0, column=0, padx=(0, 6))
        self._stop_button = ttk.Button(buttons, text="Stop", command=self._on_stop_clicked, state="disabled")
        self._stop_button.grid(row=0, column=1)

        settings = ttk.Frame(root, padding=6)
        settings.grid(row=1, column=1, sticky="e")
        ttk.Label(settings, text="Resolution:").grid(row=0, column=0, padx=(0, 4))
        self._resolution_var = tk.StringVar(master=root, value=format_resolution(self._initial.resolution))
        self._resolution_box = ttk.Combobox(
            settings,
            textvariable=self._resolution_var,
            values=[format_resolution(r) for r in SUPPORTED_RESOLUTIONS],
            state="readonly",
            width=10,
        )
        self._resolution_box.grid(row=0, column=1, padx=(0, 12))

        ttk.Label(settings, text="Interval (min):").grid(row=0, column=2, padx=(0, 4))
        self._interval_var = tk.StringVar(master=root, value=str(max(1, round(self._initial.interval_minutes))))
        self._interval_entry = ttk.Entry(settings, textvariable=self._interval_var, width=6)
        self._interval_entry.grid(row=0, column=3)

        self._status_var = tk.StringVar(master=root, value=STATUS_NOT_STARTED)
        ttk.Label(root, textvariable=self._status_var, anchor="w", padding=(6, 2)).grid(
            row=2, column=0, columnspan=2, sticky="ew"
        )

        self._logger.debug("Window built (preview %dx%d)", width, height)

    def bind_handlers(
        self,
        *,
        start: Optional[StartHandler] = None,
        stop: Optional[StopHandler] = None,
    ) -> None:
        self._start_handler = start
        self._stop_handler = stop

    # ------------------------------------------------------------------
    # Input

    def selected_settings(self) -> SessionSettings:
        """Settings currently entered in the window. Raises InvalidSettingsError."""
        resolution = parse_resolution(self._resolution_var.get())
        minutes = parse_interval_minutes(self._interval_var.get())
        return SessionSettings.from_minutes(resolution, minutes)

    @async_handler
    async def _on_start_clicked(self) -> None:
        if self._start_handler is None or self._busy:
            return
        try:
            settings = self.selected_settings()
        except InvalidSettingsError as e:
            self.show_error(str(e))
            return

        self._busy = True
        self._set_controls(running=True)
        try:
            started = await self._start_handler(settings)
        finally:
            self._busy = False
        if not started:
            self._set_controls(running=False)

    @async_handler
    async def _on_stop_clicked(self) -> None:
        if self._stop_handler is None or self._busy:
            return
        self._busy = True
        try:
            await self._stop_handler()
        finally:
            self._busy = False

    # ------------------------------------------------------------------
    # Output

    def render_state(self, state: CaptureState) -> None:
        """Controller subscription callback."""
        if state.phase == Phase.RUNNING:
            self._ever_started = True
        if self._status_var is None:
            return
        self._set_controls(running=state.running)
        self._status_var.set(status_text(state, ever_started=self._ever_started))

    def show_frame(self, frame: np.ndarray) -> None:
        """Preview sink: draw ``frame`` scaled to the fixed preview size."""
        if self._canvas is None:
            return
        image = frame_to_preview(frame, self._preview_size)
        self._photo = ImageTk.PhotoImage(image, master=self._root)
        if self._image_item is None:
            self._image_item = self._canvas.create_image(0, 0, image=self._photo, anchor="nw")
        else:
            self._canvas.itemconfigure(self._image_item, image=self._photo)

    def show_error(self, message: str, title: str = "Error") -> None:
        self._logger.warning("%s: %s", title, message)
        messagebox.showerror(title, message, parent=self._root)

    def _set_controls(self, *, running: bool) -> None:
        if self._start_button is None:
            return
        self._start_button.configure(state="disabled" if running else "normal")
        self._stop_button.configure(state="normal" if running else "disabled")
        self._resolution_box.configure(state="disabled" if running else "readonly")
        self._interval_entry.configure(state="disabled" if running else "normal")


__all__ = ["CaptureView", "status_text", "WINDOW_TITLE"]
