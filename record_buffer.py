"""
trackerlog - Record Buffer
Append-only, session-scoped log of decimated samples rendered as CSV on demand.
"""

import csv
import io
import threading
from typing import Sequence

from config import CSV_HEADER
from motion_model import Sample

CSV_COLUMNS = CSV_HEADER.split(",")


def format_sample_row(sample: Sample) -> list[str]:
    """Render one sample as CSV fields (timestamp F3, floats F6, True/False)."""
    px, py, pz = sample.position
    vx, vy, vz = sample.velocity
    ax, ay, az = sample.angular_velocity
    return [
        f"{sample.timestamp:.3f}",
        f"{px:.6f}", f"{py:.6f}", f"{pz:.6f}",
        f"{vx:.6f}", f"{vy:.6f}", f"{vz:.6f}", f"{sample.velocity_magnitude:.6f}",
        f"{ax:.6f}", f"{ay:.6f}", f"{az:.6f}", f"{sample.angular_velocity_magnitude:.6f}",
        "True" if sample.is_tracking else "False",
    ]


def parse_sample_row(row: Sequence[str]) -> Sample:
    """Parse CSV fields written by format_sample_row back into a Sample.

    The magnitude columns are derived values and are not read back.
    """
    if len(row) != len(CSV_COLUMNS):
        raise ValueError(f"expected {len(CSV_COLUMNS)} fields, got {len(row)}")
    tracking_text = row[12].strip()
    if tracking_text not in ("True", "False"):
        raise ValueError(f"IsTracking must be True or False, got {tracking_text!r}")
    values = [float(v) for v in row[:12]]
    return Sample(
        timestamp=values[0],
        position=(values[1], values[2], values[3]),
        velocity=(values[4], values[5], values[6]),
        angular_velocity=(values[8], values[9], values[10]),
        is_tracking=tracking_text == "True",
    )


class RecordBuffer:
    """Unbounded in-memory recording; cleared only on explicit request.

    append/clear/snapshot share one lock so lifecycle and manual save/clear
    requests from another thread can interleave with the tick safely.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._samples: list[Sample] = []

    def append(self, sample: Sample) -> None:
        with self._lock:
            self._samples.append(sample)

    def snapshot(self) -> str:
        """CSV text with header plus every sample, newest last."""
        with self._lock:
            rows = [format_sample_row(s) for s in self._samples]
        out = io.StringIO()
        writer = csv.writer(out, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        writer.writerows(rows)
        return out.getvalue()

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()

    def samples(self) -> list[Sample]:
        with self._lock:
            return list(self._samples)

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)
