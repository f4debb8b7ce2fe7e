import math

import config
from .liveness import classify, time_ago

# Номинальный интервал отчёта устройства, с
CYCLE_SECONDS = 278
UPTIME_ONLINE_SECONDS = 300


def coerce_number(value, default=0.0):
    if value is None or isinstance(value, bool):
        return default
    try:
        f = float(value)
    except (TypeError, ValueError):
        return default
    return f if math.isfinite(f) else default


def cycle_rate_to_hourly(value) -> float:
    """Скорость за цикл устройства -> см/ч. Нечисловое значение даёт 0."""
    return coerce_number(value) / CYCLE_SECONDS * 3600


def format_rate(rate_per_hour: float) -> str:
    return f"{rate_per_hour:.2f}"


def rate_status(rate_per_hour: float) -> str:
    if rate_per_hour > 0:
        return "Charging"
    if rate_per_hour < 0:
        return "Discharging"
    return "Stable"


def battery_level(percent: float) -> str:
    if percent >= config.BATTERY_HIGH:
        return "high"
    if percent >= config.BATTERY_LOW:
        return "medium"
    return "low"


def water_level_alert(level: float) -> str:
    if level >= config.WATER_LEVEL_HIGH:
        return "high"
    if level <= config.WATER_LEVEL_LOW:
        return "low"
    return "normal"


def uptime_percent(last_seen) -> float:
    # Грубая оценка: на связи последние 5 минут - 100%
    seconds = coerce_number(last_seen)
    if seconds < UPTIME_ONLINE_SECONDS:
        return 100.0
    return max(0.0, 100 - (seconds / 864) * 10)


def window_stats(records) -> dict:
    """Сводка по окну сырых показаний (обычно последний час).

    Уровни с нечисловым значением считаются нулём, как на карточке текущего
    показания; нечисловые скорости в среднее не попадают.
    """

    records = [r for r in records or [] if isinstance(r, dict)]
    levels = [coerce_number(r.get("distance")) for r in records]
    rates = [
        cycle_rate_to_hourly(r.get("rate"))
        for r in records
        if coerce_number(r.get("rate"), None) is not None
    ]
    return {
        "min_level": round(min(levels), 1) if levels else 0.0,
        "max_level": round(max(levels), 1) if levels else 0.0,
        "avg_rate": round(sum(rates) / len(rates), 2) if rates else 0.0,
        "data_points": len(records),
    }


def current_reading(data) -> dict:
    """Карточка текущего показания из ответа ``action=latest``."""
    level = coerce_number(data.get("distance"))
    rate = cycle_rate_to_hourly(data.get("rate"))
    battery = coerce_number(data.get("battery"))
    last_seen = data.get("last_seen_seconds")
    return {
        "water_level": round(level, 1),
        "water_level_alert": water_level_alert(level),
        "rate": round(rate, 2),
        "rate_display": format_rate(rate),
        "rate_status": rate_status(rate),
        "battery": int(round(battery)),
        "battery_level": battery_level(battery),
        "last_seen_seconds": last_seen,
        "last_seen_text": time_ago(last_seen),
        "liveness": classify(last_seen),
        "uptime": round(uptime_percent(last_seen), 1),
        "received_at": coerce_number(data.get("receivedAt") or data.get("timestamp"), None),
    }
