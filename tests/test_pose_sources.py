import math
import tempfile
import unittest
from pathlib import Path

from motion_model import Sample
from persistence_gateway import PersistenceGateway
from pose_sources import OrbitPoseSource, ReplayPoseSource
from record_buffer import RecordBuffer


class TestReplayPoseSource(unittest.TestCase):
    def _write_recording(self, path):
        buf = RecordBuffer()
        buf.append(Sample(0.1, (0.0, 1.0, 0.0), (0.5, 0.0, 0.0), (0.0, 0.0, 0.0), True))
        buf.append(Sample(0.2, (0.05, 1.0, 0.0), (1.5, 0.0, 0.0), (0.0, 1.0, 0.0), True))
        PersistenceGateway(buf, path).flush()

    def test_replays_latest_row_at_or_before_now(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "rec.csv"
            self._write_recording(path)
            source = ReplayPoseSource.from_csv(path)

        before = source.poll(0.05)
        self.assertFalse(before.is_active)

        first = source.poll(0.15)
        self.assertTrue(first.is_valid and first.is_active)
        self.assertEqual(first.linear_velocity, (0.5, 0.0, 0.0))

        second = source.poll(0.2)
        self.assertTrue(second.is_active)
        self.assertEqual(second.linear_velocity, (1.5, 0.0, 0.0))

        after = source.poll(5.0)
        self.assertFalse(after.is_active)
        self.assertAlmostEqual(source.duration_s, 0.2)

    def test_rejects_foreign_csv(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "other.csv"
            path.write_text("a,b,c\n1,2,3\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                ReplayPoseSource.from_csv(path)


class TestOrbitPoseSource(unittest.TestCase):
    def test_speed_is_radius_times_angular_speed(self):
        source = OrbitPoseSource(radius=0.5, angular_speed=2.0)
        pose = source.poll(0.7)
        speed = math.sqrt(sum(v * v for v in pose.linear_velocity))
        self.assertAlmostEqual(speed, 1.0)
        self.assertTrue(pose.is_active)

    def test_dropout_window_marks_inactive(self):
        source = OrbitPoseSource(dropouts=[(1.0, 2.0)])
        self.assertFalse(source.poll(1.5).is_active)
        self.assertTrue(source.poll(2.0).is_active)


if __name__ == "__main__":
    unittest.main()
