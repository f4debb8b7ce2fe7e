"""Состояние дашборда и чистые функции его обновления.

Каждая функция принимает ``AppState`` и возвращает новый экземпляр;
исходный объект не меняется.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

import config
from .timeseries import REALTIME, HOURLY

STATUS_ONLINE = "online"
STATUS_OFFLINE = "offline"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class AppState:
    current_device: Optional[str] = None
    chart_mode: str = REALTIME
    chart_hours: int = 3
    auto_refresh: bool = True
    devices: Tuple[dict, ...] = ()
    reading: Optional[dict] = None
    window: Optional[dict] = None
    chart: Optional[dict] = None
    status: str = STATUS_OFFLINE
    status_text: str = "Connecting"
    last_update: Optional[float] = None


def initial_state() -> AppState:
    return AppState(
        current_device=None,
        chart_mode=config.DEFAULT_TIME_RANGE,
        chart_hours=config.DEFAULT_CHART_HOURS,
        auto_refresh=config.AUTO_REFRESH_ENABLED,
    )


def select_device(state: AppState, device_id: str) -> AppState:
    if not device_id or device_id == state.current_device:
        return state
    return replace(state, current_device=device_id, reading=None, window=None, chart=None)


def set_chart_range(state: AppState, mode: str, hours: int) -> AppState:
    if mode not in (REALTIME, HOURLY):
        raise ValueError(f"Unknown chart mode: {mode}")
    if int(hours) < 1:
        raise ValueError("hours must be positive")
    return replace(state, chart_mode=mode, chart_hours=int(hours))


def toggle_auto_refresh(state: AppState) -> AppState:
    return replace(state, auto_refresh=not state.auto_refresh)


def apply_devices(state: AppState, devices) -> AppState:
    devices = tuple(d for d in devices or [] if isinstance(d, dict) and d.get("deviceID"))
    if not devices:
        return state
    current = state.current_device
    if current is None:
        current = devices[0]["deviceID"]
    return replace(state, devices=devices, current_device=current)


def apply_latest(state: AppState, reading: dict, now: float) -> AppState:
    return replace(state, reading=reading, last_update=now,
                   status=STATUS_ONLINE, status_text="Connected")


def apply_window_stats(state: AppState, window: dict) -> AppState:
    return replace(state, window=window)


def apply_chart(state: AppState, chart: dict) -> AppState:
    return replace(state, chart=chart)


def mark_error(state: AppState, text: str = "Error") -> AppState:
    # Прежние показания остаются на экране
    return replace(state, status=STATUS_ERROR, status_text=text)
