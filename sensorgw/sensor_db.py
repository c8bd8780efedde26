"""Storage manager: appends sensor measurements to a CSV file."""

from __future__ import annotations

import os
import sys
import threading
from typing import IO, Callable, Optional, Union

from .sbuffer import SharedBuffer

DB_FILE = "data.csv"

PathLike = Union[str, "os.PathLike[str]"]


class StorageError(Exception):
    """The CSV file could not be opened, written or closed."""


def format_record(sensor_id: int, value: float, ts: int) -> str:
    """One CSV line: '<id>, <value with two decimals>, <timestamp>'."""
    return f"{sensor_id}, {value:.2f}, {ts}\n"


class StorageManager:
    """Writes measurements to a CSV file and reports each step to a log."""

    def __init__(self, log: Optional[Callable[[str], object]] = None) -> None:
        self._log: Callable[[str], object] = log if log is not None else (lambda msg: None)
        self._file: Optional[IO[str]] = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        """Whether a CSV file is currently open."""
        return self._file is not None

    def open(self, filename: PathLike = DB_FILE, append: bool = False) -> None:
        """Open filename for appending, or create/truncate it when append is false."""
        with self._lock:
            try:
                handle = open(filename, "a" if append else "w", encoding="utf-8")
            except OSError as exc:
                print(f"Error: Could not open the file {os.fspath(filename)}", file=sys.stderr)
                raise StorageError(f"cannot open {os.fspath(filename)}: {exc}") from exc
            if self._file is not None:
                self._file.close()
            self._file = handle
            if not append:
                self._log("A new data.csv file has been created.")
            self._log(f"Database file {os.fspath(filename)} opened.")

    def insert_sensor(self, sensor_id: int, value: float, ts: int) -> None:
        """Append one measurement; id 0 and a closed file are refused."""
        with self._lock:
            if sensor_id == 0:
                raise StorageError("sensor id 0 is reserved for the end of the stream")
            if self._file is None:
                raise StorageError("database file is not open")
            self._file.write(format_record(sensor_id, value, ts))
            self._file.flush()
            self._log(f"Data insertion from sensor {sensor_id} succeeded.")

    def close(self) -> None:
        """Close the CSV file."""
        with self._lock:
            if self._file is None:
                raise StorageError("database file is not open")
            self._file.close()
            self._file = None
            self._log("The data.csv file has been closed.")

    def run(self, buffer: SharedBuffer, filename: PathLike = DB_FILE) -> None:
        """Store records from buffer in a fresh file until the stream ends."""
        try:
            self.open(filename, False)
        except StorageError:
            print(
                "Error: Failed to open database. Exiting storage manager thread.",
                file=sys.stderr,
            )
            return
        while True:
            data = buffer.remove()
            if data is None:
                print("[StorageMgr] No more data to consume. Exiting...")
                break
            if data.is_end_marker():
                print("[StorageMgr] Termination signal received. Exiting...")
                break
            try:
                self.insert_sensor(data.id, data.value, data.ts)
            except StorageError:
                print("[StorageMgr] Error: Failed to insert sensor data.", file=sys.stderr)
        try:
            self.close()
        except StorageError:
            print("[StorageMgr] Error: Failed to close database file.", file=sys.stderr)
        else:
            print("[StorageMgr] Database file successfully closed.")