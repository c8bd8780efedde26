"""Room/sensor map and running-average temperature monitoring."""

from __future__ import annotations

import os
import re
import sys
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Iterable, Iterator, Optional, Tuple, Union

from .config import SensorData
from .sbuffer import SharedBuffer

RUN_AVG_LENGTH = 5
SET_MIN_TEMP = 10
SET_MAX_TEMP = 20
MAP_FILE = "room_sensor.map"

_ROOM_PART = re.compile(r"\s*(\d+) ")
_SENSOR_PART = re.compile(r"\s*(\d+)\n?")


class InvalidSensorError(LookupError):
    """The sensor id is not in the room/sensor map."""


@dataclass
class SensorRecord:
    """State kept for one mapped sensor."""

    sensor_id: int
    room_id: int
    window_length: int = RUN_AVG_LENGTH
    running_avg: float = 0.0
    last_modified: int = 0
    count: int = 0
    window: Deque[float] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.window = deque(maxlen=self.window_length)


def parse_room_sensor_map(lines: Iterable[str]) -> Iterator[Tuple[int, int]]:
    """Yield (room_id, sensor_id) pairs from lines of the form 'room sensor'.

    Malformed lines are reported on stderr and skipped.
    """
    for line in lines:
        shown = line.rstrip("\n")
        room = _ROOM_PART.match(line)
        if room is None:
            print(f"Error parsing roomID in line: {shown}", file=sys.stderr)
            continue
        sensor = _SENSOR_PART.fullmatch(line, room.end())
        if sensor is None:
            print(f"Error parsing sensorID in line: {shown}", file=sys.stderr)
            continue
        yield int(room.group(1)) & 0xFFFF, int(sensor.group(1)) & 0xFFFF


class DataManager:
    """Tracks a running average per sensor and logs temperature alarms."""

    def __init__(
        self,
        log: Optional[Callable[[str], object]] = None,
        min_temp: float = SET_MIN_TEMP,
        max_temp: float = SET_MAX_TEMP,
        run_avg_length: int = RUN_AVG_LENGTH,
    ) -> None:
        if run_avg_length < 1:
            raise ValueError("run_avg_length must be at least 1")
        self._log: Callable[[str], object] = log if log is not None else (lambda msg: None)
        self.min_temp = min_temp
        self.max_temp = max_temp
        self.run_avg_length = run_avg_length
        self._sensors: Dict[int, SensorRecord] = {}

    def load_map(self, lines: Iterable[str]) -> int:
        """Replace the room/sensor map; return the number of sensors mapped."""
        self.clear()
        for room_id, sensor_id in parse_room_sensor_map(lines):
            if sensor_id not in self._sensors:
                self._sensors[sensor_id] = SensorRecord(
                    sensor_id, room_id, window_length=self.run_avg_length
                )
        return len(self._sensors)

    def process(self, data: SensorData) -> Optional[SensorRecord]:
        """Add a measurement to its sensor's window.

        Returns the updated record, or None (after logging) for an unmapped id.
        """
        record = self._sensors.get(data.id)
        if record is None:
            self._log(f"Received sensor data with invalid sensor node ID {data.id}")
            return None
        record.window.append(data.value)
        record.last_modified = data.ts
        record.count += 1
        print(
            f"Room {record.room_id} (Sensor {record.sensor_id}): "
            f"Temperature {data.value:.2f}, Timestamp {data.ts}"
        )
        if record.count >= self.run_avg_length:
            record.running_avg = sum(record.window) / self.run_avg_length
            if record.running_avg > self.max_temp:
                self._log(
                    f"Sensor node {record.sensor_id} reports it's too hot "
                    f"(avg temp = {record.running_avg:.2f})"
                )
            elif record.running_avg < self.min_temp:
                self._log(
                    f"Sensor node {record.sensor_id} reports it's too cold "
                    f"(avg temp = {record.running_avg:.2f})"
                )
        return record

    def _record(self, sensor_id: int) -> SensorRecord:
        try:
            return self._sensors[sensor_id]
        except KeyError:
            raise InvalidSensorError(f"unknown sensor id {sensor_id}") from None

    def room_id(self, sensor_id: int) -> int:
        """Room the sensor is in."""
        return self._record(sensor_id).room_id

    def average(self, sensor_id: int) -> float:
        """Running average; 0 until a full window of readings has arrived."""
        return self._record(sensor_id).running_avg

    def last_modified(self, sensor_id: int) -> int:
        """Timestamp of the sensor's latest reading."""
        return self._record(sensor_id).last_modified

    def total_sensors(self) -> int:
        """Number of sensors in the map."""
        return len(self._sensors)

    def clear(self) -> None:
        """Forget the map and every sensor's state."""
        self._sensors.clear()

    def run(
        self,
        buffer: SharedBuffer,
        map_path: Union[str, "os.PathLike[str]"] = MAP_FILE,
    ) -> None:
        """Load the map, then process records from buffer until the stream ends."""
        try:
            with open(map_path, encoding="utf-8") as fp:
                self.load_map(fp)
        except OSError:
            print(f"Error: Could not open {os.fspath(map_path)}", file=sys.stderr)
            return
        try:
            while True:
                data = buffer.remove()
                if data is None or data.is_end_marker():
                    break
                self.process(data)
        finally:
            self.clear()