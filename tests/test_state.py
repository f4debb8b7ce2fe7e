import pytest

from services import state as st


def test_apply_devices_selects_first_device(devices):
    s = st.apply_devices(st.AppState(), devices)
    assert s.current_device == "SMAAWA_001"
    assert len(s.devices) == 2


def test_apply_devices_keeps_selection_and_ignores_empty(devices):
    s = st.AppState(current_device="SMAAWA_002")
    assert st.apply_devices(s, devices).current_device == "SMAAWA_002"
    assert st.apply_devices(s, []) is s


def test_updates_do_not_mutate_input():
    s = st.AppState()
    s2 = st.set_chart_range(s, "hourly", 24)
    assert (s.chart_mode, s.chart_hours) == ("realtime", 3)
    assert (s2.chart_mode, s2.chart_hours) == ("hourly", 24)
    assert st.toggle_auto_refresh(s).auto_refresh is False
    assert s.auto_refresh is True


def test_set_chart_range_validation():
    with pytest.raises(ValueError):
        st.set_chart_range(st.AppState(), "monthly", 3)
    with pytest.raises(ValueError):
        st.set_chart_range(st.AppState(), "hourly", 0)


def test_select_device_clears_readings():
    s = st.AppState(current_device="A", reading={"water_level": 1}, chart={"labels": []})
    s2 = st.select_device(s, "B")
    assert s2.current_device == "B"
    assert s2.reading is None and s2.chart is None
    assert st.select_device(s, "A") is s
    assert st.select_device(s, "") is s


def test_error_keeps_prior_reading():
    s = st.apply_latest(st.AppState(), {"water_level": 5}, now=100.0)
    assert (s.status, s.status_text, s.last_update) == ("online", "Connected", 100.0)
    err = st.mark_error(s, "Error")
    assert err.status == "error"
    assert err.reading == {"water_level": 5}
