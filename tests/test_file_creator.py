import random

from sensorgw.config import WIRE_SIZE, SensorData
from sensorgw.datamgr import DataManager
from sensorgw.file_creator import (
    NUM_MEASUREMENTS,
    SENSOR_IDS,
    SLEEP_TIME,
    TEMP_DEV,
    create_files,
    main,
    write_room_map,
    write_sensor_data,
)


def test_room_map_content(tmp_path):
    path = tmp_path / "room_sensor.map"
    write_room_map(path)
    assert path.read_text() == "1 15\n2 21\n3 37\n4 49\n11 112\n12 129\n13 132\n14 142\n"


def test_room_map_loads_into_data_manager(tmp_path):
    path = tmp_path / "room_sensor.map"
    write_room_map(path)
    manager = DataManager()
    with open(path) as fp:
        assert manager.load_map(fp) == len(SENSOR_IDS)
    assert manager.room_id(142) == 14


def test_sensor_data_file_round_trip(tmp_path):
    path = tmp_path / "sensor_data"
    records = write_sensor_data(path, 1000, random.Random(0))
    raw = path.read_bytes()
    assert len(records) == NUM_MEASUREMENTS * len(SENSOR_IDS)
    assert len(raw) == len(records) * WIRE_SIZE
    decoded = [
        SensorData.from_bytes(raw[i:i + WIRE_SIZE]) for i in range(0, len(raw), WIRE_SIZE)
    ]
    assert decoded == records


def test_sensor_data_order_and_timestamps(tmp_path):
    records = write_sensor_data(tmp_path / "sensor_data", 1000, random.Random(3))
    assert records[0] == SensorData(15, 15.0, 1000)
    per_round = len(SENSOR_IDS)
    for index, record in enumerate(records):
        assert record.id == SENSOR_IDS[index % per_round]
        assert record.ts == 1000 + (index // per_round) * SLEEP_TIME


def test_sensor_temperatures_drift_within_bounds(tmp_path):
    records = write_sensor_data(tmp_path / "sensor_data", 0, random.Random(5))
    per_round = len(SENSOR_IDS)
    for before, after in zip(records, records[per_round:]):
        assert before.id == after.id
        assert abs(after.value - before.value) <= TEMP_DEV / 20 + 1e-12


def test_create_files_writes_both(tmp_path):
    map_path, data_path = create_files(tmp_path, 42, random.Random(1))
    assert map_path.read_text().startswith("1 15\n")
    first = SensorData.from_bytes(data_path.read_bytes()[:WIRE_SIZE])
    assert first == SensorData(15, 15.0, 42)


def test_main_creates_files_in_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main([]) == 0
    assert (tmp_path / "room_sensor.map").exists()
    assert (tmp_path / "sensor_data").stat().st_size == NUM_MEASUREMENTS * len(SENSOR_IDS) * WIRE_SIZE