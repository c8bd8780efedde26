import socket
import threading

from sensorgw.config import END_OF_STREAM, SensorData
from sensorgw.connmgr import ConnectionManager
from sensorgw.sbuffer import SharedBuffer
from sensorgw.tcpsock import TcpSocket


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def _drain(buffer):
    items = []
    while True:
        item = buffer.remove()
        if item is None:
            return items
        items.append(item)


def _send_all(client, payload):
    while payload:
        sent = client.send(payload)
        payload = payload[sent:]


def test_serve_client_reads_all_records():
    a, b = socket.socketpair()
    buffer = SharedBuffer()
    log = []
    mgr = ConnectionManager(0, 1, buffer, log.append, timeout=5)
    records = [SensorData(15, 20.5, 100), SensorData(15, 21.0, 130)]
    b.sendall(b"".join(r.to_bytes() for r in records))
    b.close()
    client = TcpSocket(a, None, 0)
    assert mgr.serve_client(client) == 15
    assert client.closed
    buffer.end_stream()
    assert _drain(buffer) == records
    assert "Sensor node 15 has opened a new connection." in log
    assert "Sensor node 15 has closed the connection." in log
    assert mgr.connections_closed == 1


def test_serve_client_times_out_without_data():
    a, b = socket.socketpair()
    buffer = SharedBuffer()
    log = []
    mgr = ConnectionManager(0, 1, buffer, log.append, timeout=0.2)
    client = TcpSocket(a, None, 0)
    worker = threading.Thread(target=mgr.serve_client, args=(client,))
    worker.start()
    worker.join(5)
    b.close()
    assert not worker.is_alive()
    assert client.closed
    assert len(buffer) == 0
    assert "Sensor node 0 connection closed due to TIMEOUT" in log
    assert not any("has closed the connection" in m for m in log)


def test_send_end_of_stream_inserts_marker_and_ends():
    buffer = SharedBuffer()
    mgr = ConnectionManager(0, 1, buffer)
    mgr.send_end_of_stream()
    assert buffer.remove() == END_OF_STREAM
    assert buffer.remove() is None
    assert buffer.is_stream_ended()


def test_listen_with_invalid_port_logs_error():
    buffer = SharedBuffer()
    log = []
    mgr = ConnectionManager(80, 1, buffer, log.append)
    mgr.listen()
    assert "Error: Unable to open server socket on port." in log
    assert not mgr.listening.is_set()
    assert len(buffer) == 0


def test_listen_serves_clients_and_ends_stream():
    port = _free_port()
    buffer = SharedBuffer()
    log = []
    mgr = ConnectionManager(port, 2, buffer, log.append, timeout=5)
    server = threading.Thread(target=mgr.listen)
    server.start()
    assert mgr.listening.wait(5)

    sent = []
    for sensor_id in (21, 37):
        records = [SensorData(sensor_id, 18.0 + i, 1000 + i) for i in range(3)]
        with TcpSocket.active_open(port, "127.0.0.1") as client:
            _send_all(client, b"".join(r.to_bytes() for r in records))
        sent.extend(records)

    server.join(10)
    assert not server.is_alive()
    received = _drain(buffer)
    assert received[-1] == END_OF_STREAM
    assert sorted(received[:-1], key=lambda r: (r.id, r.ts)) == sent
    assert log[0] == "Server started."
    assert log[-1] == "Server shut down."
    assert "Sensor node 21 has opened a new connection." in log
    assert mgr.connections_closed == 2