"""
trackerlog - Audio Feedback Controller
Plays a clip while the tracker moves, with volume following instantaneous speed.

The sink is any object exposing ``is_playing``, ``play(clip, volume)``,
``set_volume(volume)`` and ``stop()`` (see audio_output.SoundDeviceAudioSink).
"""

from enum import Enum
from typing import Any, Optional

from config import MOVEMENT_THRESHOLD, VOLUME_MULTIPLIER_RANGE
from logging_utils import LogOnce


class AudioFeedbackState(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"


def target_volume(velocity_magnitude: float, max_velocity_for_volume: float,
                  volume_multiplier: float) -> float:
    """clamp(v / max_v, 0, 1) * multiplier"""
    normalized = max(0.0, min(1.0, velocity_magnitude / max_velocity_for_volume))
    return normalized * volume_multiplier


class AudioFeedbackController:
    def __init__(
        self,
        sink: Optional[Any],
        clip: Optional[Any],
        volume_multiplier: float = 1.0,
        max_velocity_for_volume: float = 3.0,
    ):
        low, high = VOLUME_MULTIPLIER_RANGE
        if not low <= volume_multiplier <= high:
            raise ValueError(f"volume_multiplier must be within [{low}, {high}], got {volume_multiplier}")
        if not 0.0 < max_velocity_for_volume <= 5.0:
            raise ValueError(f"max_velocity_for_volume must be within (0, 5], got {max_velocity_for_volume}")

        self.sink = sink
        self.clip = clip
        self.volume_multiplier = float(volume_multiplier)
        self.max_velocity_for_volume = float(max_velocity_for_volume)
        self.threshold = MOVEMENT_THRESHOLD

        self.state = AudioFeedbackState.STOPPED
        self.current_volume = 0.0
        self.sink_error: Exception | None = None

        self._log_once = LogOnce()
        if sink is None:
            self._log_once("no-sink", "WARN", "AudioFeedback", "Audio sink is not assigned, audio feedback disabled")
        elif clip is None:
            self._log_once("no-clip", "WARN", "AudioFeedback", "Velocity sound clip is not assigned, audio feedback disabled")

    @property
    def enabled(self) -> bool:
        return self.sink is not None and self.clip is not None and self.sink_error is None

    @property
    def playing(self) -> bool:
        return self.state is AudioFeedbackState.PLAYING

    def update(self, velocity_magnitude: float) -> AudioFeedbackState:
        """Advance the state machine for one tick of (undecimated) speed."""
        if not self.enabled:
            return self.state

        try:
            if velocity_magnitude > self.threshold:
                volume = target_volume(velocity_magnitude, self.max_velocity_for_volume, self.volume_multiplier)
                if not self.sink.is_playing:
                    # Also restarts a one-shot clip that ran out while still moving
                    self.sink.play(self.clip, volume)
                else:
                    self.sink.set_volume(volume)
                self.state = AudioFeedbackState.PLAYING
                self.current_volume = max(0.0, min(1.0, volume))
                return self.state

            if self.sink.is_playing:
                self.sink.stop()
        except Exception as e:
            self._disable(e)
        self._reset()
        return self.state

    def shutdown(self) -> None:
        """Stop any playback; used on quit."""
        if self.enabled:
            try:
                if self.sink.is_playing:
                    self.sink.stop()
            except Exception as e:
                self._disable(e)
        self._reset()

    def _disable(self, error: Exception) -> None:
        # A failing output device stays off for the rest of the session
        self.sink_error = error
        self._log_once("sink-error", "ERROR", "AudioFeedback",
                       "Audio sink failed, audio feedback disabled", error=error)

    def _reset(self) -> None:
        self.state = AudioFeedbackState.STOPPED
        self.current_volume = 0.0
