import math

ONLINE = "online"
OFFLINE = "offline"
OFFLINE_AFTER_SECONDS = 600

# (верхняя граница, делитель, единица); последняя строка без границы
TIME_AGO_UNITS = [
    (3600, 60, "min"),
    (86400, 3600, "hour"),
    (604800, 86400, "day"),
    (2592000, 604800, "week"),
    (None, 2592000, "month"),
]


def _seconds(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def classify(elapsed) -> str:
    """online, если устройство выходило на связь менее 10 минут назад."""
    seconds = _seconds(elapsed)
    if seconds is None:
        return OFFLINE
    return ONLINE if seconds < OFFLINE_AFTER_SECONDS else OFFLINE


def time_ago(elapsed) -> str:
    seconds = _seconds(elapsed) or 0
    if seconds < 60:
        return "Just now"
    for limit, divisor, unit in TIME_AGO_UNITS:
        if limit is None or seconds < limit:
            n = int(seconds // divisor)
            return f"{n} {unit if n == 1 else unit + 's'} ago"


def device_label(device) -> str:
    """Подпись устройства для выпадающего списка."""
    device_id = device.get("deviceID", "")
    last_seen = _seconds(device.get("last_seen_seconds"))
    status = classify(last_seen)
    dot = "🟢" if status == ONLINE else "🟡"
    if status == OFFLINE and last_seen is not None:
        return f"{dot} {device_id} ({time_ago(last_seen)})"
    return f"{dot} {device_id}"


def summarize_devices(devices) -> dict:
    total = len(devices)
    online = sum(1 for d in devices if classify(d.get("last_seen_seconds")) == ONLINE)
    return {"total": total, "online": online, "offline": total - online}
