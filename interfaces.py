"""Protocol interfaces used by SessionController."""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from models import CaptureHandle, FinalizedAudio, PermissionStatus, PlaybackHandle


class AudioDevice(Protocol):
    def request_capture_permission(self) -> PermissionStatus: ...

    def set_capture_mode(self, enabled: bool) -> None: ...

    def begin_capture(self) -> CaptureHandle: ...

    def pause_capture(self, handle: CaptureHandle) -> None: ...

    def resume_capture(self, handle: CaptureHandle) -> None: ...

    def finalize_capture(self, handle: CaptureHandle) -> FinalizedAudio: ...

    def create_playable_handle(self, audio: FinalizedAudio) -> PlaybackHandle: ...

    def play(self, handle: PlaybackHandle) -> None: ...

    def stop(self, handle: PlaybackHandle) -> None: ...

    def release(self, handle: CaptureHandle | PlaybackHandle | FinalizedAudio) -> None: ...

    def on_playback_complete(
        self,
        handle: PlaybackHandle,
        callback: Callable[[PlaybackHandle], None],
    ) -> None: ...


class Ticker(Protocol):
    def start(self, callback: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...


class ConfigStore(Protocol):
    def get_sample_rate(self) -> int: ...

    def get_channels(self) -> int: ...

    def get_input_device(self) -> Optional[int | str]: ...

    def get_volume(self) -> float: ...

    def set_volume(self, volume: float) -> None: ...

    def get_log_level(self) -> str: ...
