# motion_model.py
from dataclasses import dataclass

import numpy as np

Vec3 = tuple[float, float, float]

ZERO_VECTOR: Vec3 = (0.0, 0.0, 0.0)


def as_vec3(value) -> Vec3:
    """Coerce any 3-element sequence/array into a float tuple."""
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.size != 3:
        raise ValueError(f"expected 3 components, got {arr.size}")
    return (float(arr[0]), float(arr[1]), float(arr[2]))


def magnitude(vec: Vec3) -> float:
    return float(np.linalg.norm(vec))


@dataclass(frozen=True)
class PoseReading:
    """One raw read from a pose source (device-side view)."""
    is_valid: bool          # runtime recognizes the device
    is_active: bool         # device currently in tracking range
    position: Vec3          # world-space meters
    linear_velocity: Vec3   # m/s
    angular_velocity: Vec3  # rad/s


@dataclass(frozen=True)
class Sample:
    timestamp: float            # seconds since session start
    position: Vec3              # world-space meters
    velocity: Vec3              # m/s, zero when not tracking
    angular_velocity: Vec3      # rad/s, zero when not tracking
    is_tracking: bool

    @property
    def velocity_magnitude(self) -> float:
        return magnitude(self.velocity)

    @property
    def angular_velocity_magnitude(self) -> float:
        return magnitude(self.angular_velocity)
