"""Capture controller - session lifecycle and the per-tick pipeline."""

import asyncio
import contextlib
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from fixedcam.core.logging_utils import LoggerLike, ensure_structured_logger
from fixedcam.core.periodic import PeriodicJob
from fixedcam.errors import DeviceOpenError, FrameReadError, FrameWriteError, InvalidSettingsError
from fixedcam.imaging.annotate import annotate, build_stamp_text, format_timestamp
from fixedcam.imaging.writer import DEFAULT_JPEG_QUALITY, save_async

from .camera import Camera
from .frame import CapturedFrame
from .state import CaptureState, Phase, Resolution, SessionSettings

CameraFactory = Callable[[int, Resolution], Camera]
PreviewSink = Callable[[np.ndarray], None]
StateCallback = Callable[[CaptureState], None]


class CaptureController:
    """Owns the camera and the periodic capture job.

    One session at a time: ``start`` opens the device and arms a
    :class:`PeriodicJob` that fires immediately and then every interval;
    ``stop`` disarms the job and releases the device. Each tick reads one
    frame, stamps ``<YYYYMMDD_HHMMSS>_<counter>`` on it, writes it as JPEG,
    hands it to the preview sink and advances the counter.

    Failures inside a tick are logged and reported through
    ``state.last_error``; they never end the session.
    """

    def __init__(
        self,
        *,
        output_dir: Path,
        device_index: int = 0,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
        camera_factory: CameraFactory = Camera,
        clock: Callable[[], datetime] = datetime.now,
        logger: LoggerLike = None,
    ) -> None:
        self._output_dir = Path(output_dir)
        self._device_index = device_index
        self._jpeg_quality = jpeg_quality
        self._camera_factory = camera_factory
        self._clock = clock
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)

        self._state = CaptureState()
        self._subscribers: list[StateCallback] = []
        self._preview_sink: Optional[PreviewSink] = None

        self._camera: Optional[Camera] = None
        self._job: Optional[PeriodicJob] = None
        self._lifecycle_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Observation

    def subscribe(self, callback: StateCallback) -> None:
        """Subscribe to state changes. The callback fires once immediately."""
        self._subscribers.append(callback)
        callback(self._state)

    def unsubscribe(self, callback: StateCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self) -> None:
        for sub in list(self._subscribers):
            try:
                sub(self._state)
            except Exception as e:
                self._logger.error("Subscriber error: %s", e)

    def set_preview_sink(self, sink: Optional[PreviewSink]) -> None:
        """Set the callable that receives each annotated frame."""
        self._preview_sink = sink

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    @property
    def device_index(self) -> int:
        return self._device_index

    @property
    def job(self) -> Optional[PeriodicJob]:
        return self._job

    # ------------------------------------------------------------------
    # Lifecycle

    async def start(self, resolution: Resolution, interval_ms: int) -> None:
        """Open the camera and begin capturing every ``interval_ms``.

        ``start`` and ``stop`` are serialized: a ``stop`` issued while the
        device is still opening waits for the open and then tears the new
        session down.

        Raises:
            InvalidSettingsError: resolution or interval rejected.
            DeviceOpenError: the camera could not be opened; nothing is armed.
        """
        async with self._lifecycle_lock:
            if self._state.phase != Phase.IDLE:
                self._logger.warning("Start ignored: capture already %s", self._state.phase.name.lower())
                return

            settings = SessionSettings(resolution=tuple(resolution), interval_ms=int(interval_ms))
            settings.validate()
            if self._device_index < 0:
                raise InvalidSettingsError(f"Invalid device index {self._device_index}")

            self._prepare_output_dir()

            camera = self._camera_factory(self._device_index, settings.resolution)
            self._logger.info("Opening camera %s at %dx%d", self._device_index, *settings.resolution)
            await self._open_camera(camera)

            self._camera = camera
            self._state = CaptureState(phase=Phase.RUNNING, settings=settings, counter=1)
            self._job = PeriodicJob(
                self._tick,
                settings.interval_ms / 1000.0,
                initial_delay_s=0.0,
                name="CaptureTick",
                logger=self._logger,
            )
            self._job.start()
            self._notify()

        self._logger.info(
            "Capture started: device=%s, resolution=%dx%d, interval=%d ms, output=%s",
            self._device_index,
            *settings.resolution,
            settings.interval_ms,
            self._output_dir,
        )

    async def _open_camera(self, camera: Camera) -> None:
        # The open runs to completion in its worker thread even when start()
        # is cancelled, so a cancelled start still has to release the device.
        open_task = asyncio.ensure_future(asyncio.to_thread(camera.open))
        try:
            opened = await asyncio.shield(open_task)
        except asyncio.CancelledError:
            with contextlib.suppress(Exception):
                await open_task
            await asyncio.to_thread(camera.close)
            self._logger.info("Start cancelled while opening camera %s", self._device_index)
            raise
        except Exception as e:
            self._logger.error("Camera %s raised while opening: %s", self._device_index, e, exc_info=True)
            await asyncio.to_thread(camera.close)
            raise DeviceOpenError(self._device_index, str(e)) from e
        if not opened:
            raise DeviceOpenError(self._device_index)

    async def stop(self) -> None:
        """Stop capturing and release the camera. Safe to call at any time.

        Waits for a start that is still opening the device. When this
        returns no tick is running and the device is closed.
        """
        async with self._lifecycle_lock:
            job, camera = self._job, self._camera
            self._job = None
            self._camera = None

            if job is not None:
                await job.stop()
            if camera is not None:
                await asyncio.to_thread(camera.close)

            if self._state.phase == Phase.IDLE:
                return

            self._state.phase = Phase.IDLE
            self._notify()
        self._logger.info("Capture stopped after %d frame(s)", self._state.counter - 1)

    def _prepare_output_dir(self) -> None:
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # Not fatal: every tick will report the write failure instead.
            self._logger.warning("Cannot create output directory %s: %s", self._output_dir, e)

    # ------------------------------------------------------------------
    # Tick

    async def _tick(self) -> None:
        camera = self._camera
        if camera is None:
            return

        try:
            data = await asyncio.to_thread(camera.read)
        except FrameReadError as e:
            self._logger.warning("Skipping tick: %s", e)
            self._state.last_error = str(e)
            self._notify()
            return

        frame = CapturedFrame(data=data, counter=self._state.counter, captured_at=self._clock())
        timestamp = format_timestamp(frame.captured_at)
        annotate(frame.data, build_stamp_text(timestamp, frame.counter))

        try:
            path = await save_async(
                frame.data,
                timestamp,
                frame.counter,
                self._output_dir,
                jpeg_quality=self._jpeg_quality,
            )
        except FrameWriteError as e:
            self._logger.error("Frame %d not saved: %s", frame.counter, e)
            self._state.last_error = str(e)
        else:
            self._logger.debug("Frame %d saved to %s", frame.counter, path)
            self._state.last_saved = path
            self._state.frames_saved += 1
            self._state.last_error = ""

        if self._preview_sink is not None:
            try:
                self._preview_sink(frame.data)
            except Exception as e:
                self._logger.error("Preview update failed: %s", e, exc_info=True)

        self._state.counter = frame.counter + 1
        self._state.last_capture_at = frame.captured_at
        self._notify()


__all__ = ["CaptureController", "CameraFactory", "PreviewSink"]
