"""Stone-placement sound cue using Qt multimedia."""

from __future__ import annotations

from pathlib import Path

from PyQt6.QtCore import QUrl
from PyQt6.QtMultimedia import QSoundEffect

STONE_SOUND = Path(__file__).resolve().parents[3] / "assets" / "sounds" / "stone.wav"


class SoundPlayer:
    """Plays a short click whenever a stone lands on the board.

    The effect is pre-loaded so playback starts immediately.  Without the
    WAV file the player stays silent.
    """

    def __init__(self, path: Path = STONE_SOUND, volume: int = 80) -> None:
        self._enabled = True
        self._volume = max(0, min(100, volume)) / 100.0
        self._effect: QSoundEffect | None = None

        if path.exists():
            effect = QSoundEffect()
            effect.setSource(QUrl.fromLocalFile(str(path)))
            effect.setVolume(self._volume)
            self._effect = effect

    @property
    def available(self) -> bool:
        return self._effect is not None

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def set_volume(self, volume: int) -> None:
        """Set volume in range 0–100."""
        self._volume = max(0, min(100, volume)) / 100.0
        if self._effect is not None:
            self._effect.setVolume(self._volume)

    def play_stone(self, _snapshot: object = None) -> None:
        if not self._enabled or self._effect is None:
            return
        if self._effect.isPlaying():
            self._effect.stop()
        self._effect.play()
