"""
trackerlog - Audio Output
One-shot clip playback on a sounddevice OutputStream with live volume.
"""

import threading
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import numpy as np
import sounddevice as sd

from logging_utils import log_event


@dataclass
class AudioClip:
    """Decoded PCM clip, float32 samples shaped (frames, channels)"""
    samples: np.ndarray
    sample_rate: int
    name: str = ""

    @property
    def channels(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration_s(self) -> float:
        return len(self.samples) / float(self.sample_rate)


def load_wav_clip(path: Path) -> AudioClip:
    """Read an 8/16/32-bit PCM WAV file into an AudioClip."""
    path = Path(path)
    try:
        with wave.open(str(path), 'rb') as wf:
            channels = wf.getnchannels()
            width = wf.getsampwidth()
            sample_rate = wf.getframerate()
            raw = wf.readframes(wf.getnframes())
    except wave.Error as e:
        # Not RIFF, or a non-PCM format such as float or extensible
        raise ValueError(f"Unreadable WAV file {path.name}: {e}") from e

    if width == 1:
        data = (np.frombuffer(raw, dtype=np.uint8).astype(np.float32) - 128.0) / 128.0
    elif width == 2:
        data = np.frombuffer(raw, dtype='<i2').astype(np.float32) / 32768.0
    elif width == 4:
        data = np.frombuffer(raw, dtype='<i4').astype(np.float32) / 2147483648.0
    else:
        raise ValueError(f"Unsupported WAV sample width: {width * 8} bits")

    samples = data.reshape(-1, channels)
    log_event("INFO", "AudioOutput", "Clip loaded", name=path.name,
              channels=channels, sample_rate=sample_rate, seconds=f"{len(samples) / sample_rate:.2f}")
    return AudioClip(samples=samples, sample_rate=sample_rate, name=path.name)


def list_output_devices() -> list[tuple[int, str]]:
    """(index, name) for every device with output channels."""
    devices = sd.query_devices()
    return [(i, d['name']) for i, d in enumerate(devices) if d['max_output_channels'] > 0]


class SoundDeviceAudioSink:
    """Audio sink that plays a clip once (no loop) at an adjustable volume.

    ``is_playing`` turns False by itself once the clip has been fully
    rendered, so a caller polling it can retrigger playback.
    """

    def __init__(self, device: Optional[int] = None,
                 stream_factory: Callable[..., sd.OutputStream] = sd.OutputStream):
        self.device = device
        self._stream_factory = stream_factory
        self._stream: Optional[sd.OutputStream] = None
        self._stream_format: tuple[int, int] | None = None
        self._lock = threading.Lock()
        self._clip: Optional[AudioClip] = None
        self._position = 0
        self._volume = 0.0
        self._playing = False

    @property
    def is_playing(self) -> bool:
        with self._lock:
            return self._playing

    @property
    def volume(self) -> float:
        with self._lock:
            return self._volume

    def play(self, clip: AudioClip, volume: float) -> None:
        self._ensure_stream(clip)
        with self._lock:
            self._clip = clip
            self._position = 0
            self._volume = self._clamp(volume)
            self._playing = True

    def set_volume(self, volume: float) -> None:
        with self._lock:
            self._volume = self._clamp(volume)

    def stop(self) -> None:
        with self._lock:
            self._playing = False
            self._position = 0

    def close(self) -> None:
        self.stop()
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        finally:
            self._stream = None
            self._stream_format = None
        log_event("INFO", "AudioOutput", "Stream closed")

    @staticmethod
    def _clamp(volume: float) -> float:
        return max(0.0, min(1.0, float(volume)))

    def _ensure_stream(self, clip: AudioClip) -> None:
        fmt = (clip.sample_rate, clip.channels)
        if self._stream is not None and self._stream_format == fmt:
            return
        if self._stream is not None:
            self.close()
        self._stream = self._stream_factory(
            samplerate=clip.sample_rate,
            channels=clip.channels,
            dtype='float32',
            device=self.device,
            callback=self._callback,
            blocksize=0,
        )
        self._stream_format = fmt
        self._stream.start()
        log_event("INFO", "AudioOutput", "Stream started", sample_rate=clip.sample_rate, channels=clip.channels)

    def _callback(self, outdata, frames, time_info, status) -> None:
        if status:
            log_event("DEBUG", "AudioOutput", "Stream status", status=status)
        outdata.fill(0)
        with self._lock:
            if not self._playing or self._clip is None:
                return
            clip = self._clip.samples
            start = self._position
            n = min(frames, len(clip) - start)
            if n > 0:
                outdata[:n] = clip[start:start + n] * self._volume
            self._position = start + max(n, 0)
            if self._position >= len(clip):
                self._playing = False
