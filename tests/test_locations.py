import json

import pytest

from services.locations import JsonFileStore, LocationError, LocationStore, MemoryStore


def test_save_persists_whole_mapping(location_store):
    location_store.save("SMAAWA_001", "Canal", "19.43", -99.13)
    location_store.save("SMAAWA_002", "", 20, "-98.5")

    raw = location_store.store.get("smaawa_device_locations")
    assert json.loads(raw) == {
        "SMAAWA_001": {"name": "Canal", "lat": 19.43, "lng": -99.13},
        "SMAAWA_002": {"name": "", "lat": 20.0, "lng": -98.5},
    }


def test_load_reads_existing_blob():
    store = MemoryStore({"smaawa_device_locations": '{"A": {"name": "x", "lat": 1, "lng": 2}}'})
    locations = LocationStore(store)
    assert locations.load() == {"A": {"name": "x", "lat": 1, "lng": 2}}
    assert locations.get("A")["lat"] == 1
    assert locations.get("B") is None


def test_load_tolerates_corrupt_blob():
    locations = LocationStore(MemoryStore({"smaawa_device_locations": "{not json"}))
    assert locations.load() == {}


@pytest.mark.parametrize("device,lat,lng,message", [
    ("", 1, 2, "Please select a device"),
    (None, 1, 2, "Please select a device"),
    ("A", "north", 2, "Please enter valid latitude and longitude"),
    ("A", 1, None, "Please enter valid latitude and longitude"),
    ("A", "nan", 2, "Please enter valid latitude and longitude"),
])
def test_invalid_input_is_rejected_before_persisting(location_store, device, lat, lng, message):
    with pytest.raises(LocationError, match=message):
        location_store.save(device, "name", lat, lng)
    assert location_store.store.get("smaawa_device_locations") is None
    assert location_store.all() == {}


def test_json_file_store_roundtrip(tmp_path):
    path = tmp_path / "data" / "locations.json"
    first = LocationStore(JsonFileStore(str(path)))
    first.load()
    first.save("A", "Dock", 1.5, 2.5)

    second = LocationStore(JsonFileStore(str(path)))
    assert second.load() == {"A": {"name": "Dock", "lat": 1.5, "lng": 2.5}}


def test_json_file_store_missing_file(tmp_path):
    store = JsonFileStore(str(tmp_path / "nope.json"))
    assert store.get("anything") is None


def test_save_without_load_keeps_existing_pins(tmp_path):
    path = str(tmp_path / "locations.json")
    LocationStore(JsonFileStore(path)).save("A", "Dock", 1.0, 2.0)

    fresh = LocationStore(JsonFileStore(path))
    fresh.save("B", "Weir", 3.0, 4.0)

    assert set(LocationStore(JsonFileStore(path)).load()) == {"A", "B"}


def test_get_and_all_read_store_on_first_use():
    store = MemoryStore({"smaawa_device_locations": '{"A": {"name": "x", "lat": 1, "lng": 2}}'})
    locations = LocationStore(store)
    assert locations.get("A") == {"name": "x", "lat": 1, "lng": 2}
    assert list(locations.all()) == ["A"]


@pytest.mark.parametrize("blob", ["[]", "5", '"text"', "null"])
def test_load_ignores_non_object_blob(blob):
    locations = LocationStore(MemoryStore({"smaawa_device_locations": blob}))
    assert locations.load() == {}
    assert locations.get("A") is None
    assert locations.all() == {}
