"""Blocking IPv4 TCP sockets with typed errors."""

from __future__ import annotations

import errno
import socket
import threading
from typing import Optional

MIN_PORT = 1024
MAX_PORT = 65536
MAX_PENDING = 10

_SEND_FLAGS = getattr(socket, "MSG_NOSIGNAL", 0)


class TcpError(Exception):
    """Base class of every TCP socket error."""


class TcpSocketError(TcpError):
    """The socket is closed or was never opened."""


class TcpAddressError(TcpError):
    """The port or IP address is invalid."""


class TcpSockOpError(TcpError):
    """A socket operation (socket, bind, listen, accept, connect, ...) failed."""


class TcpConnectionClosed(TcpError):
    """The peer has closed the connection."""


def _check_port(port: int) -> None:
    if port < MIN_PORT or port > MAX_PORT:
        raise TcpAddressError(f"port {port} not in [{MIN_PORT}, {MAX_PORT}]")


class TcpSocket:
    """An open IPv4 stream socket: a listening server or a connected peer.

    Instances come from passive_open, active_open or wait_for_connection.
    """

    def __init__(self, sock: socket.socket, ip_addr: Optional[str], port: int) -> None:
        self._sock: Optional[socket.socket] = sock
        self._ip_addr = ip_addr
        self._port = port
        self._lock = threading.Lock()

    @classmethod
    def passive_open(cls, port: int) -> "TcpSocket":
        """Listen on port on every local interface."""
        _check_port(port)
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
        except OSError as exc:
            raise TcpSockOpError(f"socket() failed: {exc}") from exc
        try:
            sock.bind(("", port))
            sock.listen(MAX_PENDING)
        except (OSError, OverflowError) as exc:
            sock.close()
            raise TcpSockOpError(f"cannot listen on port {port}: {exc}") from exc
        return cls(sock, None, port)

    @classmethod
    def active_open(cls, remote_port: int, remote_ip: Optional[str]) -> "TcpSocket":
        """Connect to remote_ip:remote_port; the result carries the local address."""
        _check_port(remote_port)
        if remote_ip is None:
            raise TcpAddressError("no remote IP address given")
        try:
            address = socket.inet_ntoa(socket.inet_aton(remote_ip))
        except OSError as exc:
            raise TcpAddressError(f"invalid IP address {remote_ip!r}") from exc
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
        except OSError as exc:
            raise TcpSockOpError(f"socket() failed: {exc}") from exc
        try:
            sock.connect((address, remote_port))
            local_ip, local_port = sock.getsockname()[:2]
        except (OSError, OverflowError) as exc:
            sock.close()
            raise TcpSockOpError(f"cannot connect to {address}:{remote_port}: {exc}") from exc
        return cls(sock, local_ip, local_port)

    def _require_open(self) -> socket.socket:
        sock = self._sock
        if sock is None:
            raise TcpSocketError("socket is closed")
        return sock

    @property
    def closed(self) -> bool:
        """Whether close has been called."""
        return self._sock is None

    @property
    def ip_addr(self) -> Optional[str]:
        """The socket's IP address; None for a listening socket."""
        self._require_open()
        return self._ip_addr

    @property
    def port(self) -> int:
        """The socket's port number."""
        self._require_open()
        return self._port

    @property
    def sd(self) -> int:
        """The underlying socket descriptor."""
        return self._require_open().fileno()

    def wait_for_connection(self) -> "TcpSocket":
        """Block until a client connects and return a socket for it."""
        sock = self._require_open()
        try:
            conn, peer = sock.accept()
        except OSError as exc:
            raise TcpSockOpError(f"accept failed: {exc}") from exc
        peer_ip, peer_port = peer[:2]
        return TcpSocket(conn, peer_ip, peer_port)

    def send(self, data: bytes) -> int:
        """Send data and return the number of bytes actually sent."""
        sock = self._require_open()
        if not data:
            return 0
        try:
            sent = sock.send(data, _SEND_FLAGS)
        except OSError as exc:
            if exc.errno in (errno.EPIPE, errno.ENOTCONN):
                raise TcpConnectionClosed("no connection to peer") from exc
            raise TcpSockOpError(f"send failed: {exc}") from exc
        if sent == 0:
            raise TcpConnectionClosed("no connection to peer")
        return sent

    def receive(self, size: int) -> bytes:
        """Receive at most size bytes; the result may be shorter."""
        sock = self._require_open()
        if size <= 0:
            return b""
        try:
            data = sock.recv(size)
        except OSError as exc:
            if exc.errno == errno.ENOTCONN:
                raise TcpConnectionClosed("no connection to peer") from exc
            raise TcpSockOpError(f"recv failed: {exc}") from exc
        if not data:
            raise TcpConnectionClosed("no connection to peer")
        return data

    def close(self) -> None:
        """Shut down any connection and release the socket."""
        with self._lock:
            sock = self._sock
            if sock is None:
                raise TcpSocketError("socket is already closed")
            self._sock = None
            self._ip_addr = None
            self._port = -1
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        sock.close()

    def __enter__(self) -> "TcpSocket":
        return self

    def __exit__(self, *args: object) -> None:
        if not self.closed:
            self.close()

    def __repr__(self) -> str:
        if self.closed:
            return "TcpSocket(closed)"
        return f"TcpSocket(ip_addr={self._ip_addr!r}, port={self._port})"