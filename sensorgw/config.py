"""Sensor measurement record and its wire format."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

SENSOR_ID_MAX = 0xFFFF

# <sensor id: uint16><temperature: double><timestamp: int64>, sent back to back.
WIRE_FORMAT = struct.Struct("<Hdq")
WIRE_SIZE = WIRE_FORMAT.size


@dataclass(frozen=True)
class SensorData:
    """One measurement: sensor id, temperature value and UTC timestamp."""

    id: int
    value: float = 0.0
    ts: int = 0

    WIRE_SIZE: ClassVar[int] = WIRE_SIZE

    def __post_init__(self) -> None:
        if not 0 <= self.id <= SENSOR_ID_MAX:
            raise ValueError(f"sensor id out of range: {self.id}")
        object.__setattr__(self, "value", float(self.value))
        object.__setattr__(self, "ts", int(self.ts))

    def to_bytes(self) -> bytes:
        """Encode the record in its wire form."""
        return WIRE_FORMAT.pack(self.id, self.value, self.ts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "SensorData":
        """Decode a record from exactly WIRE_SIZE bytes."""
        if len(data) != WIRE_SIZE:
            raise ValueError(f"expected {WIRE_SIZE} bytes, got {len(data)}")
        sensor_id, value, ts = WIRE_FORMAT.unpack(data)
        return cls(sensor_id, value, ts)

    def is_end_marker(self) -> bool:
        """True for the id-0 record that signals the end of the stream."""
        return self.id == 0


END_OF_STREAM = SensorData(0, 0.0, 0)