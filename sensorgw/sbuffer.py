"""Thread-safe FIFO buffer shared between the gateway's workers."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Optional

from .config import SensorData


class SharedBuffer:
    """A blocking FIFO of SensorData records with an end-of-stream flag."""

    def __init__(self) -> None:
        self._items: Deque[SensorData] = deque()
        self._cond = threading.Condition()
        self._end_of_stream = False

    def insert(self, data: SensorData) -> None:
        """Append data at the tail and wake one waiting reader."""
        if data is None:
            raise ValueError("cannot insert None into the buffer")
        with self._cond:
            self._items.append(data)
            self._cond.notify()

    def remove(self) -> Optional[SensorData]:
        """Take the record at the head, waiting while the buffer is empty.

        Returns None once the buffer is empty and the stream has ended.
        """
        with self._cond:
            while not self._items and not self._end_of_stream:
                self._cond.wait()
            if not self._items:
                return None
            return self._items.popleft()

    def end_stream(self) -> None:
        """Mark the stream as ended and wake every waiting reader."""
        with self._cond:
            self._end_of_stream = True
            self._cond.notify_all()

    def is_stream_ended(self) -> bool:
        """Whether end_stream has been called."""
        with self._cond:
            return self._end_of_stream

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)