class DummySink:
    """Audio sink stand-in recording every call."""

    def __init__(self):
        self.is_playing = False
        self.volume = None
        self.play_calls = 0
        self.stop_calls = 0
        self.set_volume_calls = 0
        self.last_clip = None

    def play(self, clip, volume):
        self.play_calls += 1
        self.is_playing = True
        self.volume = volume
        self.last_clip = clip

    def set_volume(self, volume):
        self.set_volume_calls += 1
        self.volume = volume

    def stop(self):
        self.stop_calls += 1
        self.is_playing = False


class DummyPoseSource:
    def __init__(self, pose):
        self.pose = pose
        self.polled = []

    def poll(self, now):
        self.polled.append(now)
        return self.pose


class FailingSink(DummySink):
    """Sink whose output device is gone; every playback call raises."""

    def __init__(self, error=None):
        super().__init__()
        self.error = error or OSError("PortAudio: device unavailable")

    def play(self, clip, volume):
        self.play_calls += 1
        raise self.error

    def set_volume(self, volume):
        raise self.error

    def stop(self):
        raise self.error
