"""Application entrypoint."""

from __future__ import annotations

import logging
import sys
from typing import Callable, Optional

from audio_device import SoundDeviceAudioService
from config import JsonConfigStore, configure_logging
from errors import VoiceMemoError
from formatting import format_elapsed, format_timestamp
from interfaces import ConfigStore
from models import Clip, RecordingState
from session_controller import SessionController
from ticker import ThreadingTicker

try:
    from PySide6.QtCore import QObject, Qt, Signal
    from PySide6.QtWidgets import (
        QApplication,
        QHBoxLayout,
        QInputDialog,
        QLabel,
        QListWidget,
        QListWidgetItem,
        QMessageBox,
        QPushButton,
        QVBoxLayout,
        QWidget,
    )
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)

WINDOW_STYLE = """
QWidget { background: #1a1a2e; color: #ffffff; }
QListWidget { background: #1a1a2e; border: none; }
QListWidget::item { background: #2e2e3d; border-radius: 8px; padding: 12px; margin-bottom: 8px; }
QPushButton { background: #e63946; border-radius: 8px; padding: 10px 16px; font-size: 15px; }
QPushButton:disabled { background: #555555; }
"""

PLAY_MARK = "▶"
STOP_MARK = "■"


class UIBridge(QObject):
    state_signal = Signal(str, str)  # from_state, to_state
    tick_signal = Signal(int)
    clips_signal = Signal()
    playback_signal = Signal()


class RecorderWindow(QWidget):
    def __init__(self, controller: SessionController) -> None:
        super().__init__()
        self.controller = controller
        self.setWindowTitle("Voice Recorder")
        self.setMinimumSize(360, 520)
        self.setStyleSheet(WINDOW_STYLE)

        heading = QLabel("Voice Recorder")
        heading.setAlignment(Qt.AlignCenter)
        heading.setStyleSheet("font-size: 24px; font-weight: bold;")

        self.clip_list = QListWidget()
        self.clip_list.itemActivated.connect(self._on_clip_activated)

        self.timer_label = QLabel(format_elapsed(0))
        self.timer_label.setAlignment(Qt.AlignCenter)
        self.timer_label.setStyleSheet("font-size: 18px;")
        self.timer_label.hide()

        self.record_button = QPushButton("Record")
        self.record_button.clicked.connect(self._on_record_clicked)
        self.pause_button = QPushButton("Pause")
        self.pause_button.clicked.connect(self._on_pause_clicked)
        self.pause_button.setEnabled(False)
        self.delete_button = QPushButton("Delete")
        self.delete_button.clicked.connect(self._on_delete_clicked)

        footer = QHBoxLayout()
        footer.addWidget(self.delete_button)
        footer.addStretch(1)
        footer.addWidget(self.pause_button)
        footer.addWidget(self.record_button)

        layout = QVBoxLayout()
        layout.addWidget(heading)
        layout.addWidget(self.clip_list, 1)
        layout.addWidget(self.timer_label)
        layout.addLayout(footer)
        self.setLayout(layout)

    # ------------------------------------------------------------------
    # Rendering (UI thread only)
    # ------------------------------------------------------------------

    def render_state(self, to_state: str) -> None:
        recording = to_state != RecordingState.IDLE.value
        self.record_button.setText("Stop" if recording else "Record")
        self.pause_button.setEnabled(recording)
        self.pause_button.setText("Resume" if to_state == RecordingState.PAUSED.value else "Pause")
        self.timer_label.setVisible(recording)

    def render_elapsed(self, seconds: int) -> None:
        self.timer_label.setText(format_elapsed(seconds))

    def render_clips(self) -> None:
        snapshot = self.controller.snapshot()
        selected = self.clip_list.currentRow()
        self.clip_list.clear()
        for index, clip in enumerate(snapshot.clips):
            mark = STOP_MARK if snapshot.playing_index == index else PLAY_MARK
            self.clip_list.addItem(QListWidgetItem(self._clip_label(mark, clip)))
        if 0 <= selected < self.clip_list.count():
            self.clip_list.setCurrentRow(selected)

    @staticmethod
    def _clip_label(mark: str, clip: Clip) -> str:
        return f"{mark}  {clip.name}    {format_timestamp(clip.created_at)}"

    # ------------------------------------------------------------------
    # User gestures
    # ------------------------------------------------------------------

    def _on_record_clicked(self) -> None:
        if self.controller.state == RecordingState.IDLE:
            self._run(self.controller.start_recording)
            return
        if self._run(self.controller.stop_recording):
            self._prompt_for_name()

    def _on_pause_clicked(self) -> None:
        self._run(self.controller.toggle_pause)

    def _on_clip_activated(self, item: QListWidgetItem) -> None:
        self._run(self.controller.stop_or_toggle_playback, self.clip_list.row(item))

    def _on_delete_clicked(self) -> None:
        row = self.clip_list.currentRow()
        if row < 0:
            return
        self._run(self.controller.delete_clip, row)

    def _prompt_for_name(self) -> None:
        while self.controller.has_pending_clip:
            name, ok = QInputDialog.getText(self, "Save Recording", "Enter Recording Name:")
            if not ok:
                self.controller.discard_clip()
                return
            self.controller.commit_clip(name)

    def _run(self, action: Callable[..., object], *args: object) -> bool:
        try:
            action(*args)
        except VoiceMemoError as exc:
            logger.warning("%s failed: %s", action.__name__, exc.message)
            QMessageBox.warning(self, "Voice Recorder", exc.user_message)
            return False
        return True


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.config_store: ConfigStore = JsonConfigStore()
        configure_logging(self.config_store.get_log_level())
        self.ui = UIBridge()

        device = SoundDeviceAudioService(
            sample_rate=self.config_store.get_sample_rate(),
            channels=self.config_store.get_channels(),
            input_device=self.config_store.get_input_device(),
            volume=self.config_store.get_volume(),
        )
        self.controller = SessionController(
            device=device,
            ticker=ThreadingTicker(),
            on_state_change=self._on_state_change,
            on_tick=self._on_tick,
            on_clips_change=self._on_clips_change,
            on_playback_change=self._on_playback_change,
        )
        self.window = RecorderWindow(self.controller)
        self.ui.state_signal.connect(self._on_state_change_ui)
        self.ui.tick_signal.connect(self.window.render_elapsed)
        self.ui.clips_signal.connect(self.window.render_clips)
        self.ui.playback_signal.connect(self.window.render_clips)
        self.app.aboutToQuit.connect(self.controller.shutdown)

    # ------------------------------------------------------------------
    # Callbacks (may run on ticker or audio threads -> emit signals)
    # ------------------------------------------------------------------

    def _on_state_change(self, from_state: RecordingState, to_state: RecordingState) -> None:
        self.ui.state_signal.emit(from_state.value, to_state.value)

    def _on_tick(self, elapsed: int) -> None:
        self.ui.tick_signal.emit(elapsed)

    def _on_clips_change(self, clips: tuple[Clip, ...]) -> None:
        self.ui.clips_signal.emit()

    def _on_playback_change(self, index: Optional[int]) -> None:
        self.ui.playback_signal.emit()

    # ------------------------------------------------------------------
    # UI thread handlers
    # ------------------------------------------------------------------

    def _on_state_change_ui(self, from_state: str, to_state: str) -> None:
        self.window.render_state(to_state)

    def run(self) -> int:
        self.window.show()
        return self.app.exec()


def main() -> int:
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
