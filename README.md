# sensorgw

A small sensor gateway. Sensor nodes connect over TCP and send
temperature readings. The gateway puts every reading into a shared
buffer that two workers read from:

- a **data manager** that maps each sensor to its room, keeps a running
  average over the last five readings of each sensor, and logs when that
  average is above 20 or below 10 degrees;
- a **storage manager** that writes every reading to `data.csv`.

Events from all parts of the gateway (server start and stop, nodes
connecting and disconnecting, invalid sensor ids, temperature alerts,
database activity) are written to `gateway.log`, one line each, in the
form `<sequence> - <timestamp> - <message>`.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Commands

### Running the gateway

```
sensorgw-gateway <PORT> <MAX_CONN>
```

`PORT` is the TCP port to listen on (1–65535), `MAX_CONN` the number of
sensor node connections to accept (at least 1). Invalid arguments are
reported on stderr and the command exits with status 1.

The gateway accepts exactly `MAX_CONN` connections, one thread per node.
A node that sends nothing within 5 seconds of connecting is disconnected.
Once every accepted node has disconnected, the gateway puts an
end-of-stream marker in the buffer, both workers finish, and the gateway
shuts down.

The data manager reads the room/sensor map from `room_sensor.map` in the
current directory. Each line holds a room id and a sensor id separated
by a single space:

```
1 15
2 21
3 37
```

Malformed lines are reported on stderr and skipped. Readings from
sensors that are not in the map are logged as invalid and not averaged.
If the map file cannot be opened, the data manager reports this on
stderr and does not run; the storage manager still records readings.

Each reading is written to `data.csv` as `<id>, <value>, <timestamp>`,
with the value to two decimals. The file is created anew on every run.

### Running a sensor node

```
sensorgw-node <ID> <SLEEP_TIME> <SERVER_IP> <SERVER_PORT>
```

The node connects to the gateway and, until it is stopped, sends a
simulated temperature reading every `SLEEP_TIME` seconds, starting near
20 degrees and drifting a little with each reading. Run it with any
other number of arguments to see the usage help.

Each reading goes over the wire as three little-endian fields, in this
order: the sensor id (unsigned 16-bit integer), the temperature (64-bit
float) and the timestamp (seconds since the epoch, signed 64-bit
integer).

### Creating sample files

```
sensorgw-files
```

Writes `room_sensor.map` (eight rooms, one sensor each) and a binary
`sensor_data` file with 100 rounds of simulated readings for those
sensors, 30 seconds apart, in the same record layout the nodes send.
The gateway uses `room_sensor.map`; nothing in the package reads
`sensor_data` back, it is there for your own tools and tests.

## Using the library

The parts can also be used on their own:

```python
from sensorgw.config import SensorData
from sensorgw.datamgr import DataManager

messages = []
manager = DataManager(messages.append, 10, 20, 5)
manager.load_map(["1 15", "2 21"])

for ts, value in enumerate([21.0, 22.0, 23.0, 24.0, 25.0], start=1):
    manager.process(SensorData(15, value, ts))

print(manager.average(15))   # 23.0
print(manager.room_id(15))   # 1
print(messages)              # ends with a "too hot" alert for sensor 15
```

`process` also prints each reading to stdout. Asking about a sensor that
is not in the map raises `InvalidSensorError`.

- `sensorgw.config.SensorData` – one reading; `to_bytes()` /
  `from_bytes()` give the wire form, and `is_end_marker()` is true for
  the id-0 record that ends the stream.
- `sensorgw.sbuffer.SharedBuffer` – thread-safe FIFO; `remove()` waits
  for data and returns `None` once the buffer is empty and
  `end_stream()` has been called.
- `sensorgw.dplist.DoublyLinkedList` – doubly linked list whose indices
  are clamped to the ends of the list.
- `sensorgw.tcpsock.TcpSocket` – IPv4 TCP sockets (`passive_open`,
  `active_open`, `wait_for_connection`, `send`, `receive`, `close`);
  errors are raised as subclasses of `TcpError`.
- `sensorgw.logger.GatewayLogger` – writes numbered, timestamped lines
  to a log file; safe to share between threads.
- `sensorgw.datamgr.DataManager` – room map, running averages and
  temperature alerts.
- `sensorgw.sensor_db.StorageManager` – writes readings to a CSV file;
  failures raise `StorageError`.
- `sensorgw.connmgr.ConnectionManager` – accepts sensor nodes and feeds
  the buffer.
- `sensorgw.gateway.run_gateway` – runs all three managers with a
  `GatewayConfig`.