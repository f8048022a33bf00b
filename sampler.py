"""
trackerlog - Sampler
Turns a raw pose read into a Sample, zeroing motion when tracking is lost.
"""

from typing import Optional

from logging_utils import LogOnce, log_event
from motion_model import PoseReading, Sample, Vec3, ZERO_VECTOR, as_vec3


class Sampler:
    def __init__(self):
        self.tracking = False
        self.last_position = ZERO_VECTOR
        self._log_once = LogOnce()

    def capture(self, now: float, pose: Optional[PoseReading]) -> Optional[Sample]:
        """Build the Sample for this tick, or None when no pose source is present."""
        if pose is None:
            self._log_once("missing-source", "ERROR", "Sampler", "Pose source is not assigned, pipeline inert")
            return None

        tracking = bool(pose.is_valid) and bool(pose.is_active)
        if tracking != self.tracking:
            log_event("INFO", "Sampler", "Tracking acquired" if tracking else "Tracking lost", t=f"{now:.3f}")
        self.tracking = tracking

        if tracking:
            position = as_vec3(pose.position)
            velocity = as_vec3(pose.linear_velocity)
            angular_velocity = as_vec3(pose.angular_velocity)
            self.last_position = position
        else:
            # Untracked devices can report garbage; never forward it
            position = self._untracked_position(pose.position)
            velocity = ZERO_VECTOR
            angular_velocity = ZERO_VECTOR

        return Sample(
            timestamp=now,
            position=position,
            velocity=velocity,
            angular_velocity=angular_velocity,
            is_tracking=tracking,
        )

    def _untracked_position(self, value) -> Vec3:
        """Reported position if usable, otherwise the last tracked one."""
        try:
            return as_vec3(value)
        except (TypeError, ValueError):
            return self.last_position
