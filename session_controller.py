"""State-machine based recording and playback session orchestration."""

from __future__ import annotations

import itertools
import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from errors import DeviceError, InvalidArgument, PermissionDenied
from interfaces import AudioDevice, Ticker
from models import (
    CaptureHandle,
    Clip,
    FinalizedAudio,
    PermissionStatus,
    PlaybackHandle,
    PlaybackSlot,
    RecordingState,
    SessionSnapshot,
)

logger = logging.getLogger(__name__)

StateCallback = Callable[[RecordingState, RecordingState], None]
TickCallback = Callable[[int], None]
ClipsCallback = Callable[[tuple[Clip, ...]], None]
PlaybackCallback = Callable[[Optional[int]], None]


class SessionController:
    def __init__(
        self,
        device: AudioDevice,
        ticker: Ticker,
        clock: Callable[[], datetime] = datetime.now,
        on_state_change: Optional[StateCallback] = None,
        on_tick: Optional[TickCallback] = None,
        on_clips_change: Optional[ClipsCallback] = None,
        on_playback_change: Optional[PlaybackCallback] = None,
    ) -> None:
        self._device = device
        self._ticker = ticker
        self._clock = clock
        self._on_state_change = on_state_change
        self._on_tick = on_tick
        self._on_clips_change = on_clips_change
        self._on_playback_change = on_playback_change

        self._lock = threading.RLock()
        self._state = RecordingState.IDLE
        self._capture: Optional[CaptureHandle] = None
        self._pending: Optional[FinalizedAudio] = None
        self._clips: list[Clip] = []
        self._playback: Optional[PlaybackSlot] = None
        self._elapsed = 0
        self._tick_generation = 0
        self._clip_ids = itertools.count(1)

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed

    @property
    def clips(self) -> tuple[Clip, ...]:
        with self._lock:
            return tuple(self._clips)

    @property
    def playing_index(self) -> Optional[int]:
        playback = self._playback
        return playback.index if playback is not None else None

    @property
    def has_pending_clip(self) -> bool:
        return self._pending is not None

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                clips=tuple(self._clips),
                recording_state=self._state,
                elapsed_seconds=self._elapsed,
                playing_index=self.playing_index,
                has_pending_clip=self._pending is not None,
            )

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def start_recording(self) -> None:
        with self._lock:
            if self._state != RecordingState.IDLE:
                return
            if self._device.request_capture_permission() != PermissionStatus.GRANTED:
                raise PermissionDenied()
            self._device.set_capture_mode(True)
            try:
                capture = self._device.begin_capture()
            except Exception:
                self._restore_playback_mode()
                raise

            self.discard_clip()
            self._capture = capture
            self._elapsed = 0
            self._transition(RecordingState.RECORDING)
            self._start_ticker()

    def pause_recording(self) -> None:
        with self._lock:
            if self._state != RecordingState.RECORDING or self._capture is None:
                return
            self._device.pause_capture(self._capture)
            self._stop_ticker()
            self._transition(RecordingState.PAUSED)

    def resume_recording(self) -> None:
        with self._lock:
            if self._state != RecordingState.PAUSED or self._capture is None:
                return
            self._device.resume_capture(self._capture)
            self._transition(RecordingState.RECORDING)
            self._start_ticker()

    def toggle_pause(self) -> None:
        with self._lock:
            if self._state == RecordingState.PAUSED:
                self.resume_recording()
            else:
                self.pause_recording()

    def stop_recording(self) -> Optional[FinalizedAudio]:
        """Finalize the capture and hold it until committed or discarded."""
        with self._lock:
            if self._state == RecordingState.IDLE or self._capture is None:
                return None
            capture = self._capture
            audio = self._device.finalize_capture(capture)

            self._stop_ticker()
            self._capture = None
            self._safe_release(capture)
            self._restore_playback_mode()
            self._pending = audio
            self._elapsed = 0
            self._transition(RecordingState.IDLE)
            if self._on_tick:
                self._on_tick(0)
            logger.info("recording finalized: %.1fs pending save", audio.duration_s)
            return audio

    def commit_clip(self, name: str) -> Optional[Clip]:
        with self._lock:
            if not (name or "").strip() or self._pending is None:
                return None
            clip = Clip(
                clip_id=next(self._clip_ids),
                name=name,
                audio=self._pending,
                created_at=self._clock(),
            )
            self._pending = None
            self._clips.append(clip)
            logger.info("saved clip %r", clip.name)
            self._emit_clips()
            return clip

    def discard_clip(self) -> None:
        with self._lock:
            pending = self._pending
            if pending is None:
                return
            self._pending = None
            self._safe_release(pending)
            logger.info("discarded unsaved recording")

    def delete_clip(self, index: int) -> Clip:
        with self._lock:
            self._check_index(index)
            playback = self._playback
            if playback is not None and playback.index == index:
                self._stop_playback_locked()
            clip = self._clips.pop(index)
            self._safe_release(clip.audio)

            playback = self._playback
            if playback is not None and playback.index > index:
                self._playback = PlaybackSlot(index=playback.index - 1, handle=playback.handle)
                self._emit_playback()
            logger.info("deleted clip %r", clip.name)
            self._emit_clips()
            return clip

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def play_clip(self, index: int) -> PlaybackHandle:
        with self._lock:
            self._check_index(index)
            self._stop_playback_locked()

            clip = self._clips[index]
            handle = self._device.create_playable_handle(clip.audio)
            self._device.on_playback_complete(handle, self._handle_playback_complete)
            self._playback = PlaybackSlot(index=index, handle=handle)
            try:
                self._device.play(handle)
            except Exception:
                self._playback = None
                self._safe_release(handle)
                raise
            logger.info("playing clip %r", clip.name)
            self._emit_playback()
            return handle

    def stop_or_toggle_playback(self, index: int) -> None:
        with self._lock:
            playback = self._playback
            if playback is not None and playback.index == index:
                self._stop_playback_locked()
                return
            self.play_clip(index)

    def stop_playback(self) -> None:
        with self._lock:
            self._stop_playback_locked()

    def shutdown(self) -> None:
        """Release every device resource; used on application exit."""
        with self._lock:
            self._stop_ticker()
            self._stop_playback_locked()
            capture = self._capture
            if capture is not None:
                self._capture = None
                self._safe_release(capture)
                self._restore_playback_mode()
                self._elapsed = 0
                self._transition(RecordingState.IDLE)
            self.discard_clip()
            for clip in self._clips:
                self._safe_release(clip.audio)
            self._clips.clear()

    def _handle_playback_complete(self, handle: PlaybackHandle) -> None:
        with self._lock:
            playback = self._playback
            if playback is None or playback.handle is not handle:
                logger.debug("ignoring stale playback completion")
                return
            self._playback = None
            self._safe_release(handle)
            self._emit_playback()

    def _stop_playback_locked(self) -> None:
        playback = self._playback
        if playback is None:
            return
        self._playback = None
        try:
            self._device.stop(playback.handle)
        except DeviceError:
            logger.warning("stopping playback failed", exc_info=True)
        self._safe_release(playback.handle)
        self._emit_playback()

    # ------------------------------------------------------------------
    # Ticker
    # ------------------------------------------------------------------

    def _start_ticker(self) -> None:
        self._ticker.stop()
        self._tick_generation += 1
        generation = self._tick_generation
        self._ticker.start(lambda: self._handle_tick(generation))

    def _stop_ticker(self) -> None:
        self._tick_generation += 1
        self._ticker.stop()

    def _handle_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._tick_generation or self._state != RecordingState.RECORDING:
                return
            self._elapsed += 1
            logger.debug("elapsed %ss", self._elapsed)
            if self._on_tick:
                self._on_tick(self._elapsed)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._clips):
            raise InvalidArgument(f"clip index {index} out of range")

    def _restore_playback_mode(self) -> None:
        try:
            self._device.set_capture_mode(False)
        except DeviceError:
            logger.warning("restoring playback audio mode failed", exc_info=True)

    def _safe_release(self, handle: CaptureHandle | PlaybackHandle | FinalizedAudio) -> None:
        try:
            self._device.release(handle)
        except DeviceError:
            logger.warning("releasing %s failed", type(handle).__name__, exc_info=True)

    def _emit_clips(self) -> None:
        if self._on_clips_change:
            self._on_clips_change(tuple(self._clips))

    def _emit_playback(self) -> None:
        if self._on_playback_change:
            self._on_playback_change(self.playing_index)

    def _transition(self, to_state: RecordingState) -> None:
        from_state = self._state
        if from_state == to_state:
            return
        self._state = to_state
        logger.info("recording state %s -> %s", from_state.value, to_state.value)
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
