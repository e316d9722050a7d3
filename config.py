"""Simple JSON-based config store and logging setup."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_SAMPLE_RATE = 44100
DEFAULT_CHANNELS = 1
DEFAULT_VOLUME = 1.0
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "voice_memos" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_sample_rate(self) -> int:
        return self._get_int("sample_rate", DEFAULT_SAMPLE_RATE)

    def get_channels(self) -> int:
        return self._get_int("channels", DEFAULT_CHANNELS)

    def get_input_device(self) -> Optional[int | str]:
        value = self._read_all().get("input_device")
        if isinstance(value, (int, str)) and not isinstance(value, bool):
            return value
        return None

    def get_volume(self) -> float:
        value = self._read_all().get("volume", DEFAULT_VOLUME)
        try:
            volume = float(value)
        except (TypeError, ValueError):
            return DEFAULT_VOLUME
        return min(max(volume, 0.0), 1.0)

    def set_volume(self, volume: float) -> None:
        data = self._read_all()
        data["volume"] = min(max(float(volume), 0.0), 1.0)
        self._write_all(data)

    def get_log_level(self) -> str:
        return str(self._read_all().get("log_level", DEFAULT_LOG_LEVEL))

    def _get_int(self, key: str, default: int) -> int:
        value = self._read_all().get(key, default)
        try:
            number = int(value)
        except (TypeError, ValueError):
            return default
        return number if number > 0 else default

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Install a single stdout handler on the root logger; safe to call twice."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    while root_logger.handlers:
        root_logger.handlers.pop()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
