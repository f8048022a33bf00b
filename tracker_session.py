"""
trackerlog - Tracker Session
Owns the per-session pipeline state and runs it once per host tick:
Sampler -> Decimator -> Record Buffer, and Sampler -> Audio Feedback every tick.
"""

from pathlib import Path
from typing import Any, Optional

from audio_feedback import AudioFeedbackController
from config import Config
from decimator import Decimator
from logging_utils import log_event
from motion_model import PoseReading, Sample, Vec3, ZERO_VECTOR
from persistence_gateway import PersistenceGateway
from record_buffer import RecordBuffer
from sampler import Sampler


class TrackerSession:
    def __init__(
        self,
        csv_path: Path,
        logging_interval: float = 0.1,
        audio: Optional[AudioFeedbackController] = None,
        start_time: float = 0.0,
        status_log_every_frames: int = 100,
    ):
        """
        Args:
            csv_path: Where flushes write the recording (overwritten each time)
            logging_interval: Seconds between recorded rows
            audio: Audio feedback controller, None disables audio feedback
            start_time: Session clock value at start; first row is due one interval later
            status_log_every_frames: Log live velocity every N tracked ticks (0 = off)
        """
        self.sampler = Sampler()
        self.decimator = Decimator(logging_interval, start_time=start_time)
        self.buffer = RecordBuffer()
        self.persistence = PersistenceGateway(self.buffer, csv_path)
        self.audio = audio
        self.status_log_every_frames = status_log_every_frames

        self.frame_count = 0
        self.last_sample: Optional[Sample] = None

        if audio is None:
            log_event("WARN", "Session", "No audio feedback controller, audio disabled")
        log_event("INFO", "Session", "CSV logging initialized", path=self.persistence.csv_path)

    @classmethod
    def from_config(
        cls,
        config: Config,
        csv_path: Path,
        sink: Optional[Any] = None,
        clip: Optional[Any] = None,
        start_time: float = 0.0,
    ) -> "TrackerSession":
        audio = None
        if config.audio.enabled:
            audio = AudioFeedbackController(
                sink,
                clip,
                volume_multiplier=config.audio.volume_multiplier,
                max_velocity_for_volume=config.audio.max_velocity_for_volume,
            )
        return cls(
            csv_path,
            logging_interval=config.tracking.logging_interval,
            audio=audio,
            start_time=start_time,
            status_log_every_frames=config.tracking.status_log_every_frames,
        )

    def tick(self, now: float, pose: Optional[PoseReading]) -> Optional[Sample]:
        """Run the pipeline for one host frame. No pose means an inert tick."""
        sample = self.sampler.capture(now, pose)
        if sample is None:
            return None

        self.frame_count += 1
        self.last_sample = sample

        # The logging slot is consumed even when the due sample is untracked
        if self.decimator.is_due(now) and sample.is_tracking:
            self.buffer.append(sample)

        if self.audio is not None:
            self.audio.update(sample.velocity_magnitude)

        every = self.status_log_every_frames
        if every and sample.is_tracking and self.frame_count % every == 0:
            log_event(
                "INFO", "Session", "Live motion",
                velocity=f"{sample.velocity_magnitude:.3f}m/s",
                angular=f"{sample.angular_velocity_magnitude:.3f}rad/s",
                rows=len(self.buffer),
            )
        return sample

    # Lifecycle / operator requests

    def save_data_manually(self) -> bool:
        return self.persistence.flush()

    def clear_logged_data(self) -> None:
        self.buffer.clear()
        log_event("INFO", "Session", "CSV data cleared")

    def on_pause(self, paused: bool) -> bool:
        return self.persistence.on_pause(paused)

    def on_quit(self) -> bool:
        saved = self.persistence.on_quit()
        if self.audio is not None:
            self.audio.shutdown()
        return saved

    # Accessors

    @property
    def current_velocity(self) -> Vec3:
        return self.last_sample.velocity if self.last_sample else ZERO_VECTOR

    @property
    def current_angular_velocity(self) -> Vec3:
        return self.last_sample.angular_velocity if self.last_sample else ZERO_VECTOR

    @property
    def is_tracking(self) -> bool:
        return self.sampler.tracking

    @property
    def csv_file_path(self) -> Path:
        return self.persistence.csv_path
