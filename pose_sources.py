"""
trackerlog - Pose Sources
Host-side stand-ins for a tracked device: CSV replay and synthetic orbit.
Both expose poll(now) -> PoseReading.
"""

import bisect
import csv
import math
from pathlib import Path

from logging_utils import log_event
from motion_model import PoseReading, Sample, ZERO_VECTOR
from record_buffer import CSV_COLUMNS, parse_sample_row


class ReplayPoseSource:
    """Replays a recording written by the persistence gateway.

    ``poll(now)`` returns the latest row with timestamp <= now. Before the
    first row and after the last one the device reports inactive.
    """

    def __init__(self, samples: list[Sample], time_offset: float = 0.0):
        self.samples = sorted(samples, key=lambda s: s.timestamp)
        self._times = [s.timestamp for s in self.samples]
        self.time_offset = time_offset

    @classmethod
    def from_csv(cls, path: Path, time_offset: float = 0.0) -> "ReplayPoseSource":
        path = Path(path)
        with open(path, 'r', encoding='utf-8', newline='') as f:
            reader = csv.reader(f)
            header = next(reader, None)
            if header != CSV_COLUMNS:
                raise ValueError(f"{path.name}: unexpected CSV header")
            samples = [parse_sample_row(row) for row in reader if row]
        log_event("INFO", "Replay", "Recording loaded", path=path, rows=len(samples))
        return cls(samples, time_offset=time_offset)

    @property
    def duration_s(self) -> float:
        if not self.samples:
            return 0.0
        return self._times[-1] - self.time_offset

    def poll(self, now: float) -> PoseReading:
        t = now + self.time_offset
        idx = bisect.bisect_right(self._times, t) - 1
        if idx < 0:
            return PoseReading(False, False, ZERO_VECTOR, ZERO_VECTOR, ZERO_VECTOR)

        sample = self.samples[idx]
        finished = idx == len(self.samples) - 1 and t > self._times[-1]
        return PoseReading(
            is_valid=True,
            is_active=sample.is_tracking and not finished,
            position=sample.position,
            linear_velocity=sample.velocity,
            angular_velocity=sample.angular_velocity,
        )


class OrbitPoseSource:
    """Synthetic tracker moving on a horizontal circle.

    Speed is radius * angular speed. ``dropouts`` is a list of (start, end)
    windows in seconds during which the device is out of tracking range.
    """

    def __init__(self, radius: float = 0.5, angular_speed: float = 2.0,
                 height: float = 1.2, dropouts: list[tuple[float, float]] | None = None):
        self.radius = radius
        self.angular_speed = angular_speed
        self.height = height
        self.dropouts = list(dropouts or [])

    def poll(self, now: float) -> PoseReading:
        angle = self.angular_speed * now
        r, w = self.radius, self.angular_speed
        position = (r * math.cos(angle), self.height, r * math.sin(angle))
        velocity = (-r * w * math.sin(angle), 0.0, r * w * math.cos(angle))
        angular_velocity = (0.0, w, 0.0)
        active = not any(start <= now < end for start, end in self.dropouts)
        return PoseReading(True, active, position, velocity, angular_velocity)
