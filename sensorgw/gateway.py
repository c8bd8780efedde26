"""Sensor gateway: connection, data and storage managers sharing one buffer."""

from __future__ import annotations

import re
import sys
import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .connmgr import TIMEOUT, ConnectionManager
from .datamgr import MAP_FILE, DataManager
from .logger import GatewayLogger
from .sbuffer import SharedBuffer
from .sensor_db import DB_FILE, StorageManager

LOG_FILE = "gateway.log"

_INTEGER = re.compile(r"\s*[+-]?\d+")


@dataclass(frozen=True)
class GatewayConfig:
    """Settings of one gateway run."""

    port: int
    max_conn: int
    log_path: str = LOG_FILE
    map_path: str = MAP_FILE
    db_path: str = DB_FILE
    timeout: float = TIMEOUT


def _parse_int(text: str) -> Optional[int]:
    if _INTEGER.fullmatch(text) is None:
        return None
    return int(text)


def parse_args(argv: Sequence[str]) -> GatewayConfig:
    """Build a config from '<PORT> <MAX_CONN>'; raise ValueError when invalid."""
    if len(argv) < 2:
        raise ValueError("Usage: gateway <PORT> <MAX_CONN>")
    port = _parse_int(argv[0])
    if port is None or port <= 0 or port > 65535:
        raise ValueError(f"Error: Invalid port number '{argv[0]}'")
    max_conn = _parse_int(argv[1])
    if max_conn is None or max_conn <= 0:
        raise ValueError(f"Error: Invalid number of connections '{argv[1]}'")
    return GatewayConfig(port, max_conn)


def run_gateway(config: GatewayConfig) -> None:
    """Run the three managers until every client has come and gone."""
    buffer = SharedBuffer()
    with GatewayLogger(config.log_path) as logger:
        connmgr = ConnectionManager(
            config.port, config.max_conn, buffer, logger.write, timeout=config.timeout
        )
        datamgr = DataManager(log=logger.write)
        storagemgr = StorageManager(log=logger.write)

        conn_thread = threading.Thread(target=connmgr.listen, name="connmgr")
        data_thread = threading.Thread(
            target=datamgr.run, args=(buffer, config.map_path), name="datamgr"
        )
        storage_thread = threading.Thread(
            target=storagemgr.run, args=(buffer, config.db_path), name="storagemgr"
        )
        threads: List[threading.Thread] = [conn_thread, data_thread, storage_thread]
        for thread in threads:
            thread.start()

        conn_thread.join()
        # Readers must not wait forever if the server never got going.
        buffer.end_stream()
        data_thread.join()
        storage_thread.join()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point: gateway <PORT> <MAX_CONN>."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        config = parse_args(args)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    run_gateway(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())