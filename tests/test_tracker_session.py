import tempfile
import unittest
from pathlib import Path
from unittest import mock

from audio_feedback import AudioFeedbackController
from config import Config, CSV_HEADER
from motion_model import PoseReading, ZERO_VECTOR
from tracker_session import TrackerSession
from stubs import DummySink, FailingSink


def _pose(speed, tracking=True):
    return PoseReading(tracking, tracking, (0.0, 1.0, 0.0), (speed, 0.0, 0.0), (0.0, 0.5, 0.0))


class TestTrackerSession(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.csv_path = Path(self._tmp.name) / "session.csv"
        self.sink = DummySink()
        self.audio = AudioFeedbackController(self.sink, object())
        self.session = TrackerSession(self.csv_path, logging_interval=0.1, audio=self.audio)

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, poses, dt=0.02, start=0.02):
        t = start
        for pose in poses:
            self.session.tick(t, pose)
            t += dt
        return t

    def test_decimated_rows_recorded(self):
        self._run([_pose(1.0)] * 50)  # ~1 s at 50 Hz
        rows = len(self.session.buffer)
        self.assertGreaterEqual(rows, 8)
        self.assertLessEqual(rows, 10)

    def test_untracked_ticks_never_recorded(self):
        self._run([_pose(1.0, tracking=False)] * 50)
        self.assertEqual(len(self.session.buffer), 0)
        self.assertEqual(self.session.current_velocity, ZERO_VECTOR)
        self.assertFalse(self.session.is_tracking)

    def test_tracking_loss_stops_audio(self):
        self._run([_pose(2.0)] * 5)
        self.assertTrue(self.sink.is_playing)

        self.session.tick(1.0, _pose(2.0, tracking=False))

        self.assertFalse(self.sink.is_playing)
        self.assertEqual(self.session.current_angular_velocity, ZERO_VECTOR)

    def test_audio_reacts_every_tick_between_log_slots(self):
        self.session.tick(0.01, _pose(0.0))
        self.session.tick(0.02, _pose(1.5))  # not a logging slot
        self.assertEqual(len(self.session.buffer), 0)
        self.assertTrue(self.sink.is_playing)
        self.assertAlmostEqual(self.sink.volume, 0.5)

    def test_absent_pose_source_is_inert(self):
        self.assertIsNone(self.session.tick(0.5, None))
        self.assertEqual(self.session.frame_count, 0)
        self.assertEqual(len(self.session.buffer), 0)
        self.assertEqual(self.sink.play_calls, 0)

    def test_recorded_timestamps_strictly_increase(self):
        poses = [_pose(1.0), _pose(1.0, tracking=False)] * 40
        self._run(poses, dt=0.013)
        stamps = [s.timestamp for s in self.session.buffer.samples()]
        self.assertTrue(all(b > a for a, b in zip(stamps, stamps[1:])))
        self.assertTrue(all(s.is_tracking for s in self.session.buffer.samples()))

    def test_manual_save_and_clear(self):
        self._run([_pose(1.0)] * 30)
        n = len(self.session.buffer)
        self.assertTrue(self.session.save_data_manually())
        self.assertEqual(len(self.csv_path.read_text(encoding="utf-8").splitlines()), n + 1)

        self.session.clear_logged_data()
        self.assertEqual(self.session.buffer.snapshot(), CSV_HEADER + "\n")

    def test_quit_flushes_and_stops_audio(self):
        self._run([_pose(2.0)] * 10)
        self.assertTrue(self.session.on_quit())
        self.assertTrue(self.csv_path.exists())
        self.assertFalse(self.sink.is_playing)

    def test_failing_audio_sink_does_not_break_recording(self):
        audio = AudioFeedbackController(FailingSink(), object())
        session = TrackerSession(self.csv_path, logging_interval=0.1, audio=audio)
        with mock.patch("logging_utils.log_event"):
            t = 0.02
            for _ in range(30):
                session.tick(t, _pose(1.0))
                t += 0.02
            self.assertTrue(session.on_quit())
        self.assertGreater(len(session.buffer), 0)
        self.assertEqual(len(self.csv_path.read_text(encoding="utf-8").splitlines()), len(session.buffer) + 1)

    def test_untracked_pose_without_position_is_tolerated(self):
        self.session.tick(0.05, _pose(1.0))
        self.session.tick(0.5, PoseReading(False, False, None, None, None))
        self.assertFalse(self.session.is_tracking)
        self.assertEqual(self.session.current_velocity, ZERO_VECTOR)

    def test_status_log_cadence(self):
        session = TrackerSession(self.csv_path, audio=None, status_log_every_frames=10)
        with mock.patch("tracker_session.log_event") as log_mock:
            for i in range(1, 31):
                session.tick(i * 0.01, _pose(1.0))
        self.assertEqual(log_mock.call_count, 3)

    def test_from_config(self):
        cfg = Config()
        cfg.tracking.logging_interval = 0.25
        cfg.audio.volume_multiplier = 0.5
        session = TrackerSession.from_config(cfg, self.csv_path, sink=DummySink(), clip=object())
        self.assertEqual(session.decimator.logging_interval, 0.25)
        self.assertEqual(session.audio.volume_multiplier, 0.5)
        self.assertEqual(session.csv_file_path, self.csv_path)

    def test_from_config_audio_disabled(self):
        cfg = Config()
        cfg.audio.enabled = False
        session = TrackerSession.from_config(cfg, self.csv_path)
        self.assertIsNone(session.audio)


if __name__ == "__main__":
    unittest.main()
