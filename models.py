"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class RecordingState(str, Enum):
    IDLE = "IDLE"
    RECORDING = "RECORDING"
    PAUSED = "PAUSED"


class PermissionStatus(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(eq=False)
class CaptureHandle:
    """Live microphone capture. Compared by identity."""

    sample_rate: int
    channels: int
    stream: Any = None
    blocks: list = field(default_factory=list)
    paused: bool = False


@dataclass(eq=False)
class FinalizedAudio:
    """Captured samples of a stopped recording, frames x channels int16."""

    samples: Any
    sample_rate: int
    channels: int = 1

    @property
    def frame_count(self) -> int:
        if self.samples is None:
            return 0
        return len(self.samples)

    @property
    def duration_s(self) -> float:
        if not self.sample_rate:
            return 0.0
        return self.frame_count / float(self.sample_rate)


@dataclass(eq=False)
class PlaybackHandle:
    """Live playback of one finalized clip. Compared by identity."""

    audio: FinalizedAudio
    volume: float = 1.0
    stream: Any = None
    position: int = 0
    stopped: bool = False


@dataclass(frozen=True)
class Clip:
    clip_id: int
    name: str
    audio: FinalizedAudio
    created_at: datetime


@dataclass(frozen=True)
class PlaybackSlot:
    index: int
    handle: PlaybackHandle


@dataclass(frozen=True)
class SessionSnapshot:
    clips: tuple[Clip, ...]
    recording_state: RecordingState
    elapsed_seconds: int
    playing_index: Optional[int]
    has_pending_clip: bool
