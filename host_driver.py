"""
trackerlog - Host Driver
Qt timer loop that feeds the tracker session at frame rate and forwards
application lifecycle (pause/quit) to the persistence gateway.
"""

import time
from typing import Callable, Optional

from PyQt6.QtCore import QObject, QTimer, Qt, pyqtSignal

from logging_utils import log_event
from tracker_session import TrackerSession

PAUSE_STATES = (
    Qt.ApplicationState.ApplicationSuspended,
    Qt.ApplicationState.ApplicationHidden,
)


class TickDriver(QObject):
    """Calls ``session.tick(now, pose_source.poll(now))`` on every timer timeout.

    ``now`` is seconds since :meth:`start`. A missing pose source still ticks
    the session with ``None`` so it can report the inert state.
    """

    ticked = pyqtSignal(float)
    saved = pyqtSignal(bool)

    def __init__(self, session: TrackerSession, pose_source=None, tick_rate_hz: float = 90.0,
                 clock: Callable[[], float] = time.perf_counter, parent: Optional[QObject] = None):
        super().__init__(parent)
        if tick_rate_hz <= 0:
            raise ValueError(f"tick_rate_hz must be positive, got {tick_rate_hz}")
        self.session = session
        self.pose_source = pose_source
        self.tick_rate_hz = tick_rate_hz
        self._clock = clock
        self._t0: float | None = None
        self._paused = False
        self._quit_handled = False

        self.timer = QTimer(self)
        self.timer.setTimerType(Qt.TimerType.PreciseTimer)
        self.timer.timeout.connect(self._on_timeout)

    @property
    def running(self) -> bool:
        return self.timer.isActive()

    def elapsed(self) -> float:
        if self._t0 is None:
            return 0.0
        return self._clock() - self._t0

    def start(self) -> None:
        if self.running:
            return
        self._t0 = self._clock()
        interval_ms = max(1, int(round(1000.0 / self.tick_rate_hz)))
        self.timer.start(interval_ms)
        log_event("INFO", "Driver", "Started", tick_rate=f"{self.tick_rate_hz:.0f}Hz", interval_ms=interval_ms)

    def stop(self) -> None:
        self.timer.stop()
        log_event("INFO", "Driver", "Stopped", frames=self.session.frame_count)

    def attach_lifecycle(self, app) -> None:
        """Wire pause (app state) and quit (aboutToQuit) signals of a Qt application."""
        app.aboutToQuit.connect(self._on_about_to_quit)
        state_changed = getattr(app, "applicationStateChanged", None)
        if state_changed is not None:
            state_changed.connect(self._on_application_state_changed)

    def request_save(self) -> bool:
        ok = self.session.save_data_manually()
        self.saved.emit(ok)
        return ok

    def request_clear(self) -> None:
        self.session.clear_logged_data()

    def _on_timeout(self) -> None:
        if self._paused:
            return
        now = self.elapsed()
        pose = self.pose_source.poll(now) if self.pose_source is not None else None
        self.session.tick(now, pose)
        self.ticked.emit(now)

    def _on_application_state_changed(self, state) -> None:
        paused = state in PAUSE_STATES
        if paused == self._paused:
            return
        self._paused = paused
        log_event("INFO", "Driver", "Paused" if paused else "Resumed")
        if paused:
            self.saved.emit(self.session.on_pause(True))

    def _on_about_to_quit(self) -> None:
        if self._quit_handled:
            return
        self._quit_handled = True
        self.stop()
        self.saved.emit(self.session.on_quit())
