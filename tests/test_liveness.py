import pytest

from services.liveness import classify, time_ago, device_label, summarize_devices


def test_classify_boundary():
    assert classify(599) == "online"
    assert classify(600) == "offline"
    assert classify(0) == "online"
    assert classify(None) == "offline"
    assert classify("bogus") == "offline"


@pytest.mark.parametrize("seconds,expected", [
    (0, "Just now"),
    (59, "Just now"),
    (60, "1 min ago"),
    (120, "2 mins ago"),
    (3599, "59 mins ago"),
    (3600, "1 hour ago"),
    (7200, "2 hours ago"),
    (86399, "23 hours ago"),
    (86400, "1 day ago"),
    (604799, "6 days ago"),
    (604800, "1 week ago"),
    (2591999, "4 weeks ago"),
    (2592000, "1 month ago"),
    (2592000 * 5, "5 months ago"),
])
def test_time_ago_table(seconds, expected):
    assert time_ago(seconds) == expected


def test_device_label(devices):
    assert device_label(devices[0]) == "🟢 SMAAWA_001"
    assert device_label(devices[1]) == "🟡 SMAAWA_002 (2 hours ago)"
    assert device_label({"deviceID": "X"}) == "🟡 X"


def test_summarize_devices(devices):
    assert summarize_devices(devices) == {"total": 2, "online": 1, "offline": 1}
    assert summarize_devices([]) == {"total": 0, "online": 0, "offline": 0}


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), "NaN"])
def test_non_finite_elapsed_is_treated_as_missing(value):
    assert time_ago(value) == "Just now"
    assert classify(value) == "offline"
    assert device_label({"deviceID": "X", "last_seen_seconds": value}) == "🟡 X"
