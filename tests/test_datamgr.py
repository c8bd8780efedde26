import pytest

from sensorgw.config import END_OF_STREAM, SensorData
from sensorgw.datamgr import (
    DataManager,
    InvalidSensorError,
    parse_room_sensor_map,
)
from sensorgw.sbuffer import SharedBuffer


@pytest.fixture
def messages():
    return []


@pytest.fixture
def manager(messages):
    mgr = DataManager(log=messages.append)
    mgr.load_map(["1 15\n", "2 21\n", "11 112\n"])
    return mgr


def test_parse_room_sensor_map_valid_lines():
    pairs = list(parse_room_sensor_map(["1 15\n", "11 112"]))
    assert pairs == [(1, 15), (11, 112)]


def test_parse_room_sensor_map_skips_bad_lines(capsys):
    pairs = list(parse_room_sensor_map(["x 1\n", "3 y\n", "3 37\n"]))
    assert pairs == [(3, 37)]
    err = capsys.readouterr().err
    assert "Error parsing roomID" in err
    assert "Error parsing sensorID" in err


def test_load_map_counts_sensors(manager):
    assert manager.total_sensors() == 3
    assert manager.room_id(15) == 1
    assert manager.room_id(112) == 11


def test_load_map_replaces_previous_map(manager):
    assert manager.load_map(["4 49\n"]) == 1
    with pytest.raises(InvalidSensorError):
        manager.room_id(15)


def test_unknown_sensor_queries_raise(manager):
    for query in (manager.room_id, manager.average, manager.last_modified):
        with pytest.raises(InvalidSensorError):
            query(999)


def test_invalid_sensor_is_logged(manager, messages):
    assert manager.process(SensorData(99, 20.0, 1)) is None
    assert messages == ["Received sensor data with invalid sensor node ID 99"]


def test_average_zero_until_window_full(manager, messages):
    for ts in range(4):
        manager.process(SensorData(15, 25.0, ts))
    assert manager.average(15) == 0.0
    assert messages == []


def test_too_hot_alarm(manager, messages):
    for ts in range(5):
        manager.process(SensorData(15, 25.0, 100 + ts))
    assert manager.average(15) == 25.0
    assert manager.last_modified(15) == 104
    assert len(messages) == 1
    assert messages[0].startswith("Sensor node 15 reports it's too hot")


def test_too_cold_alarm(manager, messages):
    for ts in range(5):
        manager.process(SensorData(21, 5.0, ts))
    assert manager.average(21) == 5.0
    assert messages[-1].startswith("Sensor node 21 reports it's too cold")


def test_no_alarm_within_limits(manager, messages):
    for ts in range(5):
        manager.process(SensorData(112, 15.0, ts))
    assert manager.average(112) == 15.0
    assert messages == []


def test_window_rolls_over(manager):
    for ts in range(5):
        manager.process(SensorData(15, 12.0, ts))
    for ts in range(5, 10):
        manager.process(SensorData(15, 18.0, ts))
    assert manager.average(15) == 18.0
    assert manager.last_modified(15) == 9


def test_custom_limits_and_window(messages):
    mgr = DataManager(log=messages.append, min_temp=0, max_temp=5, run_avg_length=2)
    mgr.load_map(["1 15\n"])
    mgr.process(SensorData(15, 6.0, 1))
    assert messages == []
    mgr.process(SensorData(15, 6.0, 2))
    assert mgr.average(15) == 6.0
    assert messages[0].startswith("Sensor node 15 reports it's too hot")


def test_bad_window_length_rejected():
    with pytest.raises(ValueError):
        DataManager(run_avg_length=0)


def test_clear_forgets_sensors(manager):
    manager.clear()
    assert manager.total_sensors() == 0


def test_run_consumes_until_end_marker(tmp_path, messages):
    map_path = tmp_path / "room_sensor.map"
    map_path.write_text("1 15\n2 21\n", encoding="utf-8")
    buffer = SharedBuffer()
    for ts in range(5):
        buffer.insert(SensorData(15, 30.0, ts))
    buffer.insert(SensorData(77, 20.0, 9))
    buffer.insert(END_OF_STREAM)
    buffer.insert(SensorData(21, 30.0, 10))
    mgr = DataManager(log=messages.append)
    mgr.run(buffer, map_path)
    assert messages[0].startswith("Sensor node 15 reports it's too hot")
    assert messages[1] == "Received sensor data with invalid sensor node ID 77"
    assert len(messages) == 2
    assert len(buffer) == 1
    assert mgr.total_sensors() == 0


def test_run_stops_when_stream_ends(tmp_path, messages):
    map_path = tmp_path / "room_sensor.map"
    map_path.write_text("1 15\n", encoding="utf-8")
    buffer = SharedBuffer()
    buffer.insert(SensorData(99, 20.0, 1))
    buffer.end_stream()
    DataManager(log=messages.append).run(buffer, map_path)
    assert messages == ["Received sensor data with invalid sensor node ID 99"]
    assert len(buffer) == 0


def test_run_without_map_file(tmp_path, messages, capsys):
    buffer = SharedBuffer()
    buffer.insert(SensorData(15, 20.0, 1))
    DataManager(log=messages.append).run(buffer, tmp_path / "missing.map")
    assert messages == []
    assert len(buffer) == 1
    assert "Could not open" in capsys.readouterr().err