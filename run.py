#!/usr/bin/env python3
"""
trackerlog - Tracker motion logger with velocity audio feedback

Polls a pose source at frame rate, records decimated samples to CSV and
plays a sound whose volume follows the tracker's speed.
"""

import argparse
import cProfile
import signal
import sys
from pathlib import Path

from PyQt6.QtCore import QCoreApplication, QTimer
from PyQt6.QtGui import QGuiApplication

from audio_output import SoundDeviceAudioSink, list_output_devices, load_wav_clip
from config import Config, migrate_config
from config_persistence import load_config, resolve_csv_path, save_config
from host_driver import TickDriver
from logging_utils import add_file_log, log_event, set_log_level
from pose_sources import OrbitPoseSource, ReplayPoseSource
from tracker_session import TrackerSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run trackerlog")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--replay", type=Path, help="Replay a previously recorded tracker CSV")
    source.add_argument("--orbit", action="store_true", help="Use a synthetic orbiting tracker")
    parser.add_argument("--sound", type=Path, help="WAV clip for velocity feedback")
    parser.add_argument("--no-audio", action="store_true", help="Disable audio feedback")
    parser.add_argument("--device", type=int, help="Output device index (see --list-devices)")
    parser.add_argument("--interval", type=float, help="Logging interval in seconds")
    parser.add_argument("--volume-multiplier", type=float, help="Volume gain (0.0-2.0)")
    parser.add_argument("--max-velocity", type=float, help="Speed (m/s) at which volume saturates")
    parser.add_argument("--tick-rate", type=float, help="Host frame rate in Hz")
    parser.add_argument("--output", type=Path, help="CSV output path")
    parser.add_argument("--duration", type=float, help="Stop after this many seconds")
    parser.add_argument("--log-level", help="DEBUG/INFO/WARNING/ERROR")
    parser.add_argument("--log-file", type=Path, help="Also write the log to this file")
    parser.add_argument("--watch-app-state", action="store_true",
                        help="Use a GUI application so suspend/hide flushes the recording")
    parser.add_argument("--save-config", action="store_true", help="Persist command-line overrides")
    parser.add_argument("--list-devices", action="store_true", help="List audio output devices and exit")
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Enable cProfile and save stats to --profile-out",
    )
    parser.add_argument(
        "--profile-out",
        default="profile.prof",
        help="Path to save cProfile stats (default: profile.prof)",
    )
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Copy command-line overrides into config, then re-clamp safety ranges."""
    if args.sound is not None:
        config.audio.sound_file = str(args.sound)
    if args.no_audio:
        config.audio.enabled = False
    if args.device is not None:
        config.audio.device_index = args.device
    if args.interval is not None:
        config.tracking.logging_interval = args.interval
    if args.volume_multiplier is not None:
        config.audio.volume_multiplier = args.volume_multiplier
    if args.max_velocity is not None:
        config.audio.max_velocity_for_volume = args.max_velocity
    if args.tick_rate is not None:
        config.tracking.tick_rate_hz = args.tick_rate
    if args.output is not None:
        config.recording.output_dir = str(args.output.parent)
        config.recording.csv_file_name = args.output.name
    if args.log_level:
        config.log_level = args.log_level.upper()
    migrate_config(config, config.version)
    return config


def build_pose_source(args: argparse.Namespace):
    if args.replay is not None:
        return ReplayPoseSource.from_csv(args.replay)
    if args.orbit:
        return OrbitPoseSource(dropouts=[(5.0, 6.0)])
    return None


def build_audio(config: Config):
    """Return (sink, clip); either may be None, which disables feedback."""
    if not config.audio.enabled or not config.audio.sound_file:
        return None, None
    try:
        clip = load_wav_clip(Path(config.audio.sound_file))
    except (OSError, EOFError, ValueError) as e:
        log_event("ERROR", "AudioOutput", "Could not load sound clip", path=config.audio.sound_file, error=e)
        return None, None
    return SoundDeviceAudioSink(device=config.audio.device_index), clip


def run_app(args: argparse.Namespace, app_argv: list[str]) -> int:
    config = apply_overrides(load_config(), args)
    set_log_level(config.log_level)
    if args.log_file is not None:
        add_file_log(args.log_file)

    app_cls = QGuiApplication if args.watch_app_state else QCoreApplication
    app = app_cls(app_argv)

    sink, clip = build_audio(config)
    session = TrackerSession.from_config(config, resolve_csv_path(config), sink=sink, clip=clip)
    driver = TickDriver(session, build_pose_source(args), tick_rate_hz=config.tracking.tick_rate_hz)
    driver.attach_lifecycle(app)

    # Let Ctrl+C reach Python while the Qt loop runs
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    keepalive = QTimer()
    keepalive.timeout.connect(lambda: None)
    keepalive.start(200)

    if args.duration is not None:
        QTimer.singleShot(int(args.duration * 1000), app.quit)

    driver.start()
    exit_code = app.exec()

    if sink is not None:
        sink.close()
    if args.save_config:
        save_config(config)
    return exit_code


def main() -> None:
    args = build_parser().parse_args()

    if args.list_devices:
        for index, name in list_output_devices():
            print(f"[{index}] {name}")
        sys.exit(0)

    # Keep Qt argument list clean; avoid passing our flags downstream
    app_argv = [sys.argv[0]]

    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        exit_code = run_app(args, app_argv)
        profiler.disable()
        profiler.dump_stats(args.profile_out)
    else:
        exit_code = run_app(args, app_argv)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
