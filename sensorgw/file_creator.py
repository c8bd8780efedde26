"""Generates a room/sensor map and a binary file of simulated measurements."""

from __future__ import annotations

import os
import random
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .config import SensorData

NUM_MEASUREMENTS = 100
SLEEP_TIME = 30
# Largest change between two readings, in tenths of a degree.
TEMP_DEV = 5

ROOM_IDS = (1, 2, 3, 4, 11, 12, 13, 14)
SENSOR_IDS = (15, 21, 37, 49, 112, 129, 132, 142)
START_TEMPERATURES = (15.0, 17.0, 18.0, 19.0, 20.0, 23.0, 24.0, 25.0)

MAP_FILE = "room_sensor.map"
DATA_FILE = "sensor_data"

PathLike = Union[str, "os.PathLike[str]"]


def write_room_map(path: PathLike = MAP_FILE) -> None:
    """Write one 'room sensor' line per sensor."""
    with open(path, "w", encoding="ascii") as fp:
        for room_id, sensor_id in zip(ROOM_IDS, SENSOR_IDS):
            fp.write(f"{room_id} {sensor_id}\n")


def write_sensor_data(
    path: PathLike = DATA_FILE,
    start: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[SensorData]:
    """Write NUM_MEASUREMENTS rounds of readings for every sensor; return them."""
    timestamp = int(time.time()) if start is None else int(start)
    rng = rng if rng is not None else random.Random()
    temperatures = list(START_TEMPERATURES)
    records: List[SensorData] = []
    with open(path, "wb") as fp:
        for _ in range(NUM_MEASUREMENTS):
            for slot, sensor_id in enumerate(SENSOR_IDS):
                record = SensorData(sensor_id, temperatures[slot], timestamp)
                fp.write(record.to_bytes())
                records.append(record)
                temperatures[slot] += TEMP_DEV * ((rng.random() - 0.5) / 10)
            timestamp += SLEEP_TIME
    return records


def create_files(
    directory: PathLike = ".",
    start: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> Tuple[Path, Path]:
    """Write both files into directory and return their paths."""
    base = Path(directory)
    map_path = base / MAP_FILE
    data_path = base / DATA_FILE
    write_room_map(map_path)
    write_sensor_data(data_path, start, rng)
    return map_path, data_path


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point: create both files in the current directory."""
    try:
        write_room_map(MAP_FILE)
    except OSError:
        print(f"Couldn't create {MAP_FILE}")
        return 1
    try:
        write_sensor_data(DATA_FILE)
    except OSError:
        print(f"Couldn't create {DATA_FILE}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())