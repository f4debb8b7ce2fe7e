import time
import logging
import threading

import config
from .api import ApiError, DataApiClient
from .liveness import device_label, summarize_devices, classify
from .locations import JsonFileStore, LocationStore
from .metrics import current_reading, window_stats
from .scheduler import RefreshScheduler
from .timeseries import normalize_series, chart_request_for_range, chart_type
from . import state as st

logger = logging.getLogger("app.dashboard")


class Dashboard:
    """Связывает клиент Data API, состояние, хранилище точек и таймер."""

    def __init__(self, client=None, locations=None, clock=time.time, scheduler=None):
        self.client = client or DataApiClient()
        self.locations = locations or LocationStore(JsonFileStore(config.LOCATIONS_FILE))
        self.locations.load()
        self.clock = clock
        self._lock = threading.Lock()
        self._state = st.initial_state()
        self.scheduler = scheduler or RefreshScheduler(config.REFRESH_INTERVAL, self.refresh)

    @property
    def state(self):
        return self._state

    def _update(self, fn, *args):
        with self._lock:
            self._state = fn(self._state, *args)
            return self._state

    # --- Запуск ---

    def startup(self):
        self.refresh_devices()
        if self._state.current_device:
            self.refresh()
        if self._state.auto_refresh:
            self.scheduler.start()

    def shutdown(self):
        self.scheduler.stop()

    # --- Опрос Data API ---

    def refresh_devices(self):
        try:
            devices = self.client.devices()
        except ApiError:
            logger.exception("Error fetching devices")
            return self._update(st.mark_error, "Connection Error")
        logger.debug("Devices loaded: %d", len(devices))
        return self._update(st.apply_devices, devices)

    def refresh(self):
        """Текущее показание, сводка за час и данные графика."""
        device_id = self._state.current_device
        if not device_id:
            return self._state

        try:
            latest = self.client.latest(device_id)
        except ApiError:
            logger.exception("Error fetching latest data for %s", device_id)
            return self._update(st.mark_error, "Error")
        self._update(st.apply_latest, current_reading(latest), self.clock())

        try:
            window = self.client.history(device_id, hours=1, limit=config.MAX_HISTORY_POINTS)
            self._update(st.apply_window_stats, window_stats(window))
        except ApiError:
            logger.exception("Error calculating additional metrics for %s", device_id)

        return self.refresh_chart()

    def refresh_chart(self):
        s = self._state
        if not s.current_device:
            return s
        req = chart_request_for_range(s.chart_mode, s.chart_hours)
        try:
            records = self.client.fetch_chart(s.current_device, req)
        except ApiError:
            logger.exception("Error updating chart data for %s", s.current_device)
            return s
        if not records:
            logger.warning("No chart data returned for %s", s.current_device)
        series = normalize_series(records, s.chart_mode)
        chart = {
            "device": s.current_device,
            "mode": s.chart_mode,
            "hours": s.chart_hours,
            "type": chart_type(s.chart_mode, s.chart_hours),
            "labels": series.labels,
            "levels": series.levels,
            "rates": series.rates,
        }
        return self._update(st.apply_chart, chart)

    # --- Действия оператора ---

    def select_device(self, device_id):
        if device_id not in {d["deviceID"] for d in self._state.devices}:
            raise KeyError(device_id)
        self._update(st.select_device, device_id)
        self.scheduler.reset()
        return self.refresh()

    def set_chart_range(self, mode, hours):
        self._update(st.set_chart_range, mode, hours)
        return self.refresh_chart()

    def toggle_auto_refresh(self):
        s = self._update(st.toggle_auto_refresh)
        if s.auto_refresh:
            self.scheduler.start()
        else:
            self.scheduler.stop()
        return s

    def save_location(self, device_id, name, lat, lng):
        return self.locations.save(device_id, name, lat, lng)

    # --- Данные для шаблонов ---

    def device_options(self):
        return [
            {"id": d["deviceID"], "label": device_label(d),
             "status": classify(d.get("last_seen_seconds"))}
            for d in self._state.devices
        ]

    def snapshot(self):
        s = self._state
        return {
            "current_device": s.current_device,
            "chart_mode": s.chart_mode,
            "chart_hours": s.chart_hours,
            "auto_refresh": s.auto_refresh,
            "countdown": self.scheduler.countdown,
            "devices": self.device_options(),
            "summary": summarize_devices(s.devices),
            "reading": s.reading,
            "window": s.window,
            "status": s.status,
            "status_text": s.status_text,
            "last_update": s.last_update,
        }

    def map_context(self, device_id):
        location = self.locations.get(device_id)
        if not location:
            return None
        try:
            reading = current_reading(self.client.latest(device_id))
        except ApiError:
            logger.exception("Error fetching device data for map")
            reading = None
        return {"device_id": device_id, "location": location, "reading": reading}
