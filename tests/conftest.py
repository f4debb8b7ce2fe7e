import os
import sys

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from services.api import ApiError  # noqa: E402
from services.locations import LocationStore, MemoryStore  # noqa: E402


class FakeClient:
    """Подменяет DataApiClient: отдаёт заготовленные ответы и пишет вызовы."""

    def __init__(self, devices=None, latest=None, history=None, hourly=None):
        self._devices = devices if devices is not None else []
        self._latest = latest or {}
        self._history = history or []
        self._hourly = hourly or []
        self.calls = []
        self.fail = set()

    def _check(self, name):
        self.calls.append(name)
        if name in self.fail:
            raise ApiError(f"{name} failed")

    def devices(self):
        self._check("devices")
        return self._devices

    def latest(self, device_id):
        self._check("latest")
        return self._latest

    def history(self, device_id, hours=1, limit=None):
        self._check("history")
        return self._history

    def hourly_history(self, device_id, days=1):
        self._check("hourly_history")
        return self._hourly

    def fetch_chart(self, device_id, chart_request):
        if chart_request.action == "hourly_history":
            return self.hourly_history(device_id, chart_request.days)
        return self.history(device_id, chart_request.hours, chart_request.limit)


class ManualScheduler:
    def __init__(self):
        self.countdown = 10
        self.started = 0
        self.stopped = 0

    def start(self):
        self.started += 1

    def stop(self):
        self.stopped += 1

    def reset(self):
        self.countdown = 10


@pytest.fixture
def devices():
    return [
        {"deviceID": "SMAAWA_001", "last_seen_seconds": 120},
        {"deviceID": "SMAAWA_002", "last_seen_seconds": 7200},
    ]


@pytest.fixture
def raw_history():
    return [
        {"receivedAt": 1700001300, "distance": "15", "rate": 3},
        {"receivedAt": 1700000000, "distance": 10, "rate": 10},
        {"receivedAt": 1700000300, "distance": 12, "rate": "n/a"},
    ]


@pytest.fixture
def fake_client(devices, raw_history):
    return FakeClient(
        devices=devices,
        latest={"deviceID": "SMAAWA_001", "distance": "42.34", "rate": 10, "battery": 81.6,
                "last_seen_seconds": 75, "receivedAt": 1700001300},
        history=raw_history,
        hourly=[{"hour_timestamp_utc": 1700000000, "avg_distance": 40.0}],
    )


@pytest.fixture
def location_store():
    store = LocationStore(MemoryStore())
    store.load()
    return store
