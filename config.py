# trackerlog Configuration
# All default values and constants

from dataclasses import dataclass, field, is_dataclass

from logging_utils import log_event


CURRENT_CONFIG_VERSION = 1

# Speeds at or below this are treated as noise, not intent (m/s)
MOVEMENT_THRESHOLD = 0.1

VOLUME_MULTIPLIER_RANGE = (0.0, 2.0)
MAX_VELOCITY_FOR_VOLUME_RANGE = (0.01, 5.0)
MIN_LOGGING_INTERVAL = 0.001

CSV_HEADER = (
    "Timestamp,PositionX,PositionY,PositionZ,"
    "VelocityX,VelocityY,VelocityZ,VelocityMagnitude,"
    "AngularVelocityX,AngularVelocityY,AngularVelocityZ,AngularVelocityMagnitude,"
    "IsTracking"
)


@dataclass
class TrackingConfig:
    """Sampling and decimation parameters"""
    logging_interval: float = 0.1       # Seconds between recorded rows (0.1 = 10 Hz)
    tick_rate_hz: float = 90.0          # Host frame rate driving the pipeline
    status_log_every_frames: int = 100  # Periodic velocity log cadence (0 = disabled)


@dataclass
class AudioFeedbackConfig:
    """Velocity-driven audio feedback"""
    enabled: bool = True
    sound_file: str = ""                 # WAV clip played while moving ("" = no clip)
    volume_multiplier: float = 1.0       # Gain on normalized speed (0.0-2.0)
    max_velocity_for_volume: float = 3.0 # Speed (m/s) at which volume saturates (0-5]
    device_index: int | None = None      # Output device, None = system default


@dataclass
class RecordingConfig:
    """CSV output location"""
    csv_file_name: str = "vive_tracker_data.csv"
    output_dir: str = ""                 # "" = persistent data folder


@dataclass
class Config:
    """Master configuration"""
    version: int = 1                  # Schema version for persisted configs
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    audio: AudioFeedbackConfig = field(default_factory=AudioFeedbackConfig)
    recording: RecordingConfig = field(default_factory=RecordingConfig)
    log_level: str = "INFO"           # Logging level (DEBUG/INFO/WARNING/ERROR)


def apply_dict_to_dataclass(target, data) -> None:
    """Recursively apply values from a dict onto a dataclass instance.
    Unknown keys are ignored."""
    if not isinstance(data, dict):
        return

    for key, value in data.items():
        if not hasattr(target, key):
            continue

        current = getattr(target, key)

        if is_dataclass(current):
            if isinstance(value, dict):
                apply_dict_to_dataclass(current, value)
            else:
                log_event("WARN", "Config", "Ignoring non-object value for section", key=key)
            continue

        setattr(target, key, value)


def _clamped_float(value, default: float, low: float, high: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        value = default
    return max(low, min(high, value))


_STRING_FIELDS = (
    (None, "log_level", "INFO"),
    ("recording", "csv_file_name", RecordingConfig.csv_file_name),
    ("recording", "output_dir", ""),
    ("audio", "sound_file", ""),
)


def migrate_config(config: Config, loaded_version) -> None:
    """Upgrade older config structures to the current schema.
    Resets missing or mistyped fields to defaults, clamps safety ranges and bumps version."""
    if loaded_version != CURRENT_CONFIG_VERSION:
        log_event("INFO", "Config", "Migrating config", from_version=loaded_version, to_version=CURRENT_CONFIG_VERSION)

    # Hand-edited files can carry any JSON type; reset non-string fields
    for section, name, default in _STRING_FIELDS:
        target = config if section is None else getattr(config, section)
        if not isinstance(getattr(target, name, None), str):
            setattr(target, name, default)
    if not config.recording.csv_file_name:
        config.recording.csv_file_name = RecordingConfig.csv_file_name
    if not isinstance(config.audio.enabled, bool):
        config.audio.enabled = True
    if not isinstance(config.audio.device_index, int) or isinstance(config.audio.device_index, bool):
        config.audio.device_index = None

    # Always clamp safety ranges
    config.audio.volume_multiplier = _clamped_float(
        getattr(config.audio, 'volume_multiplier', 1.0), 1.0, *VOLUME_MULTIPLIER_RANGE
    )
    config.audio.max_velocity_for_volume = _clamped_float(
        getattr(config.audio, 'max_velocity_for_volume', 3.0), 3.0, *MAX_VELOCITY_FOR_VOLUME_RANGE
    )
    config.tracking.logging_interval = _clamped_float(
        getattr(config.tracking, 'logging_interval', 0.1), 0.1, MIN_LOGGING_INTERVAL, 3600.0
    )
    config.tracking.tick_rate_hz = _clamped_float(
        getattr(config.tracking, 'tick_rate_hz', 90.0), 90.0, 1.0, 1000.0
    )

    try:
        every = int(getattr(config.tracking, 'status_log_every_frames', 100))
    except (TypeError, ValueError, OverflowError):
        every = 100
    config.tracking.status_log_every_frames = max(0, every)

    config.version = CURRENT_CONFIG_VERSION


# Default config instance
DEFAULT_CONFIG = Config()
