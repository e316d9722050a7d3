"""Microphone capture and speaker playback on sounddevice."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from errors import DeviceError
from models import CaptureHandle, FinalizedAudio, PermissionStatus, PlaybackHandle

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[PlaybackHandle], None]


class SoundDeviceAudioService:
    def __init__(
        self,
        sample_rate: int = 44100,
        channels: int = 1,
        input_device: Optional[int | str] = None,
        volume: float = 1.0,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.input_device = input_device
        self.volume = volume
        self.capture_mode = False
        self._lock = threading.Lock()
        self._completions: dict[int, CompletionCallback] = {}

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------

    def request_capture_permission(self) -> PermissionStatus:
        self._require_backend()
        try:
            sd.query_devices(self.input_device, kind="input")
        except Exception as exc:
            logger.warning("no usable input device: %s", exc)
            return PermissionStatus.DENIED
        return PermissionStatus.GRANTED

    def set_capture_mode(self, enabled: bool) -> None:
        self.capture_mode = enabled
        logger.debug("capture mode %s", "on" if enabled else "off")

    def begin_capture(self) -> CaptureHandle:
        self._require_backend()
        handle = CaptureHandle(sample_rate=self.sample_rate, channels=self.channels)
        try:
            handle.stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                device=self.input_device,
                callback=lambda indata, frames, time_info, status: self._on_audio(
                    handle, indata, status
                ),
            )
            handle.stream.start()
        except Exception as exc:
            self._close_stream(handle.stream)
            handle.stream = None
            raise DeviceError(f"could not start capture: {exc}") from exc
        return handle

    def pause_capture(self, handle: CaptureHandle) -> None:
        if handle.stream is None:
            raise DeviceError("capture is not active")
        try:
            handle.stream.stop()
        except Exception as exc:
            raise DeviceError(f"could not pause capture: {exc}") from exc
        handle.paused = True

    def resume_capture(self, handle: CaptureHandle) -> None:
        if handle.stream is None:
            raise DeviceError("capture is not active")
        handle.paused = False
        try:
            handle.stream.start()
        except Exception as exc:
            handle.paused = True
            raise DeviceError(f"could not resume capture: {exc}") from exc

    def finalize_capture(self, handle: CaptureHandle) -> FinalizedAudio:
        self._require_backend()
        stream = handle.stream
        if stream is not None:
            try:
                stream.stop()
            except Exception as exc:
                raise DeviceError(f"could not finalize capture: {exc}") from exc
            handle.stream = None
            self._close_stream(stream)
        if handle.blocks:
            samples = np.concatenate(handle.blocks, axis=0)
        else:
            samples = np.zeros((0, handle.channels), dtype=np.int16)
        handle.blocks = []
        return FinalizedAudio(
            samples=samples,
            sample_rate=handle.sample_rate,
            channels=handle.channels,
        )

    def _on_audio(self, handle: CaptureHandle, indata: Any, status: Any) -> None:
        if status:
            logger.warning("input stream status: %s", status)
        if handle.paused or handle.stream is None or np is None:
            return
        handle.blocks.append(np.array(indata, dtype=np.int16, copy=True))

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def create_playable_handle(self, audio: FinalizedAudio) -> PlaybackHandle:
        self._require_backend()
        if audio.samples is None:
            raise DeviceError("recording has been released")
        handle = PlaybackHandle(audio=audio, volume=self.volume)
        try:
            handle.stream = sd.OutputStream(
                samplerate=audio.sample_rate,
                channels=audio.channels,
                dtype="int16",
                callback=lambda outdata, frames, time_info, status: self._fill_output(
                    handle, outdata, frames, status
                ),
                finished_callback=lambda: self._on_finished(handle),
            )
        except Exception as exc:
            raise DeviceError(f"could not open playback: {exc}") from exc
        return handle

    def play(self, handle: PlaybackHandle) -> None:
        if handle.stream is None:
            raise DeviceError("playback has been released")
        try:
            handle.stream.start()
        except Exception as exc:
            raise DeviceError(f"could not start playback: {exc}") from exc

    def stop(self, handle: PlaybackHandle) -> None:
        handle.stopped = True
        with self._lock:
            self._completions.pop(id(handle), None)
        if handle.stream is None:
            return
        try:
            handle.stream.abort()
        except Exception as exc:
            raise DeviceError(f"could not stop playback: {exc}") from exc

    def on_playback_complete(self, handle: PlaybackHandle, callback: CompletionCallback) -> None:
        with self._lock:
            self._completions[id(handle)] = callback

    def release(self, handle: CaptureHandle | PlaybackHandle | FinalizedAudio) -> None:
        if isinstance(handle, FinalizedAudio):
            handle.samples = None
            return
        if isinstance(handle, PlaybackHandle):
            handle.stopped = True
            with self._lock:
                self._completions.pop(id(handle), None)
        elif isinstance(handle, CaptureHandle):
            handle.blocks = []
        stream = handle.stream
        handle.stream = None
        self._close_stream(stream)

    def _fill_output(self, handle: PlaybackHandle, outdata: Any, frames: int, status: Any) -> None:
        if status:
            logger.warning("output stream status: %s", status)
        samples = handle.audio.samples
        if handle.stopped or samples is None:
            outdata.fill(0)
            raise sd.CallbackStop
        start = handle.position
        chunk = samples[start:start + frames]
        if handle.volume != 1.0:
            chunk = np.clip(chunk * handle.volume, -32768, 32767).astype(np.int16)
        outdata[: len(chunk)] = chunk
        handle.position = start + len(chunk)
        if len(chunk) < frames:
            outdata[len(chunk):] = 0
            raise sd.CallbackStop

    def _on_finished(self, handle: PlaybackHandle) -> None:
        if handle.stopped:
            return
        with self._lock:
            callback = self._completions.pop(id(handle), None)
        if callback is None:
            return
        # Leave the PortAudio thread before re-entering the controller.
        threading.Thread(target=callback, args=(handle,), daemon=True).start()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_backend(self) -> None:
        if sd is None or np is None:
            raise DeviceError("sounddevice is not installed")

    @staticmethod
    def _close_stream(stream: Any) -> None:
        if stream is None:
            return
        try:
            stream.close()
        except Exception:
            logger.warning("closing audio stream failed", exc_info=True)
