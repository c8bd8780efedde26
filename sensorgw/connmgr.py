"""Connection manager: accepts sensor nodes and feeds their data into the buffer."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .config import END_OF_STREAM, WIRE_SIZE, SensorData
from .sbuffer import SharedBuffer
from .tcpsock import TcpError, TcpSocket, TcpSocketError, TcpSockOpError

TIMEOUT = 5


def _receive_exact(client: TcpSocket, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = client.receive(remaining)
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


@dataclass
class _Connection:
    client: TcpSocket
    receive_msg: bool = False
    timeout: bool = False
    sensor_id: int = 0
    stop: threading.Event = field(default_factory=threading.Event)


class ConnectionManager:
    """Accepts up to max_conn sensor nodes, one thread per node."""

    def __init__(
        self,
        port: int,
        max_conn: int,
        buffer: SharedBuffer,
        log: Optional[Callable[[str], object]] = None,
        timeout: float = TIMEOUT,
    ) -> None:
        self.port = port
        self.max_conn = max_conn
        self.buffer = buffer
        self.timeout = timeout
        self._log: Callable[[str], object] = log if log is not None else (lambda msg: None)
        self._lock = threading.Lock()
        self.active_connections = 0
        self.connections_closed = 0
        self.listening = threading.Event()

    def _monitor(self, conn: _Connection) -> None:
        if conn.stop.wait(self.timeout):
            return
        with self._lock:
            if conn.receive_msg:
                return
            conn.timeout = True
            try:
                conn.client.close()
            except TcpSocketError:
                pass
            self._log(f"Sensor node {conn.sensor_id} connection closed due to TIMEOUT")

    def serve_client(self, client: TcpSocket) -> int:
        """Read records from client until it disconnects; return its sensor id.

        The connection is closed if nothing arrives within the timeout.
        """
        conn = _Connection(client)
        monitor = threading.Thread(target=self._monitor, args=(conn,), daemon=True)
        monitor.start()
        try:
            while True:
                try:
                    payload = _receive_exact(client, WIRE_SIZE)
                except TcpError:
                    break
                data = SensorData.from_bytes(payload)
                with self._lock:
                    conn.receive_msg = True
                if conn.sensor_id == 0:
                    conn.sensor_id = data.id
                    self._log(f"Sensor node {conn.sensor_id} has opened a new connection.")
                self.buffer.insert(data)
        finally:
            conn.stop.set()
            monitor.join()

        if not conn.timeout:
            self._log(f"Sensor node {conn.sensor_id} has closed the connection.")
            try:
                client.close()
            except TcpSocketError:
                pass

        with self._lock:
            self.active_connections -= 1
            self.connections_closed += 1
        return conn.sensor_id

    def send_end_of_stream(self) -> None:
        """Put the end marker in the buffer and mark the stream as ended."""
        print("Sending end-of-stream signal")
        self.buffer.insert(END_OF_STREAM)
        self.buffer.end_stream()

    def listen(self) -> None:
        """Serve max_conn clients, wait for all of them, then end the stream."""
        print("Server is starting.")
        self._log("Server started.")
        try:
            server = TcpSocket.passive_open(self.port)
        except TcpError:
            self._log("Error: Unable to open server socket on port.")
            return
        self.listening.set()

        threads: List[threading.Thread] = []
        with server:
            while len(threads) < self.max_conn:
                try:
                    client = server.wait_for_connection()
                except TcpSockOpError:
                    self._log("Error: Failed to accept connection.")
                    continue
                except TcpError:
                    self._log("Error: Failed to accept connection.")
                    break
                worker = threading.Thread(target=self.serve_client, args=(client,), daemon=True)
                try:
                    worker.start()
                except RuntimeError:
                    self._log("Failed to create thread for new client.")
                    client.close()
                    break
                with self._lock:
                    self.active_connections += 1
                threads.append(worker)
                print(f"Incoming client connection: {len(threads)}, MAX_CONN: {self.max_conn}")

            for number, worker in enumerate(threads):
                worker.join()
                print(f"Client thread {number} has finished.")

            self.send_end_of_stream()

        print("Server is shutting down.")
        self._log("Server shut down.")