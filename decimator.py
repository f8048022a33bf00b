class Decimator:
    """Fixed-rate gate between tick-rate samples and the logging cadence.

    A tick is due when at least ``logging_interval`` seconds have passed since
    the last due tick. Slow frame rates simply record fewer rows; nothing is
    backfilled or interpolated.
    """

    def __init__(self, logging_interval: float = 0.1, start_time: float = 0.0):
        if logging_interval <= 0:
            raise ValueError(f"logging_interval must be positive, got {logging_interval}")
        self.logging_interval = float(logging_interval)
        self.last_log_time = float(start_time)

    def is_due(self, now: float) -> bool:
        """Return True (and consume the slot) when a row should be logged at ``now``."""
        if now - self.last_log_time >= self.logging_interval:
            self.last_log_time = now
            return True
        return False

    def reset(self, start_time: float = 0.0) -> None:
        self.last_log_time = float(start_time)
