"""Simulated sensor node that streams temperature readings to a gateway."""

from __future__ import annotations

import itertools
import random
import re
import sys
import time
from typing import List, Optional, Sequence

from .config import SensorData
from .tcpsock import TcpError, TcpSocket

INITIAL_TEMPERATURE = 20
# Largest change between two readings, in tenths of a degree.
TEMP_DEV = 5
MAX_IP_LENGTH = 15

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def print_help() -> None:
    """Print how to start a sensor node."""
    print("Use this program with 4 command line options: ")
    print("\t%-15s : a unique sensor node ID" % "'ID'")
    print("\t%-15s : node sleep time (in sec) between two measurements" % "'sleep time'")
    print("\t%-15s : TCP server IP address" % "'server IP'")
    print("\t%-15s : TCP server port number" % "'server port'")


def next_temperature(current: float, rng: random.Random) -> float:
    """Drift current by a random amount of at most TEMP_DEV / 20 degrees."""
    return current + TEMP_DEV * ((rng.random() - 0.5) / 10)


def _send_all(client: TcpSocket, payload: bytes) -> None:
    while payload:
        payload = payload[client.send(payload):]


def run_node(
    sensor_id: int,
    sleep_time: float,
    server_ip: str,
    server_port: int,
    loops: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[SensorData]:
    """Send loops readings (forever when loops is None) and return those sent."""
    if loops is not None and loops < 1:
        raise ValueError("loops must be at least 1")
    rng = rng if rng is not None else random.Random()
    sent: List[SensorData] = []
    with TcpSocket.active_open(server_port, server_ip[:MAX_IP_LENGTH]) as client:
        value = float(INITIAL_TEMPERATURE)
        rounds = itertools.count() if loops is None else range(loops)
        for _ in rounds:
            value = next_temperature(value, rng)
            data = SensorData(sensor_id, value, int(time.time()))
            _send_all(client, data.to_bytes())
            if loops is not None:
                sent.append(data)
            time.sleep(max(0.0, sleep_time))
    return sent


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point: sensor_node <ID> <sleep time> <server IP> <port>."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 4:
        print_help()
        return 0
    sensor_id = _atoi(args[0]) & 0xFFFF
    sleep_time = _atoi(args[1])
    server_ip = args[2]
    server_port = _atoi(args[3])
    try:
        run_node(sensor_id, sleep_time, server_ip, server_port)
    except TcpError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())