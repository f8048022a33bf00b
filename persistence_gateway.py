import contextlib
import os
from pathlib import Path

from logging_utils import log_event
from record_buffer import RecordBuffer


class PersistenceGateway:
    """Writes the record buffer snapshot to disk, replacing the previous file.

    Flushes happen only on manual request or pause/quit; a failed write is
    logged and leaves the buffer untouched for a later attempt. The snapshot
    goes to a sibling temp file first, so a failed write never truncates the
    last good CSV.
    """

    def __init__(self, buffer: RecordBuffer, csv_path: Path):
        self.buffer = buffer
        self.csv_path = Path(csv_path)
        self.flush_count = 0
        self.last_error: Exception | None = None

    @property
    def temp_path(self) -> Path:
        return self.csv_path.with_name(self.csv_path.name + '.tmp')

    def flush(self) -> bool:
        """Persist the current snapshot. Returns True on success."""
        content = self.buffer.snapshot()
        rows = content.count('\n') - 1
        tmp_path = self.temp_path
        try:
            self.csv_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
            os.replace(tmp_path, self.csv_path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            self.last_error = e
            log_event("ERROR", "Persistence", "Failed to save CSV data", path=self.csv_path, error=e)
            return False

        self.last_error = None
        self.flush_count += 1
        log_event("INFO", "Persistence", "CSV data saved", path=self.csv_path, rows=rows)
        return True

    def on_pause(self, paused: bool) -> bool:
        """Host pause signal; only entering pause flushes."""
        if not paused:
            return False
        return self.flush()

    def on_quit(self) -> bool:
        return self.flush()
