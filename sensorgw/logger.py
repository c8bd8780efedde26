"""Sequenced, timestamped gateway log file shared by every worker thread."""

from __future__ import annotations

import os
import threading
from datetime import datetime
from typing import IO, Optional, Union

TIME_FORMAT = "%a %b %d %H:%M:%S %Y"
# A log line, newline included, never exceeds this many characters.
MAX_LINE_LENGTH = 99


def format_log_line(sequence: int, when: datetime, msg: str) -> str:
    """Build one log line: '<sequence> - <timestamp> - <message>' plus newline.

    Overlong lines are cut so that the whole line, newline included, is at
    most MAX_LINE_LENGTH characters.
    """
    line = f"{sequence} - {when.strftime(TIME_FORMAT)} - {msg}"
    return line[: MAX_LINE_LENGTH - 1] + "\n"


class GatewayLogger:
    """Writes numbered log lines to a file; safe to share between threads."""

    def __init__(self, path: Union[str, "os.PathLike[str]"] = "gateway.log") -> None:
        self._file: Optional[IO[str]] = open(path, "w", encoding="utf-8")
        self._lock = threading.Lock()
        self._sequence = 0

    @property
    def closed(self) -> bool:
        """Whether the log file has been closed."""
        return self._file is None

    def write(self, msg: str) -> int:
        """Append msg as the next log line and return its sequence number."""
        with self._lock:
            if self._file is None:
                raise ValueError("logger is closed")
            sequence = self._sequence
            self._file.write(format_log_line(sequence, datetime.now(), msg))
            self._file.flush()
            self._sequence += 1
        return sequence

    def close(self) -> None:
        """Close the log file; further writes raise ValueError."""
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    def __enter__(self) -> "GatewayLogger":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()