"""Подготовка временных рядов уровня воды для графиков.

Модуль превращает неупорядоченный набор записей Data API (сырые показания
``receivedAt``/``distance`` или часовые агрегаты
``hour_timestamp_utc``/``avg_distance``) в три параллельных списка: подписи,
уровни и скорости изменения уровня. Между точками, разделёнными слишком
большим промежутком, вставляется пустая точка ``OFFLINE (...)``, чтобы
график разрывал линию.
"""

import math
import logging
from collections import namedtuple
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import config

logger = logging.getLogger("app.timeseries")

REALTIME = "realtime"
HOURLY = "hourly"

RAW_CADENCE_SECONDS = 278
HOURLY_CADENCE_SECONDS = 3600
RAW_GAP_THRESHOLD = 900       # ~1.5 интервала устройства, с запасом
HOURLY_GAP_THRESHOLD = 5400   # 1.5 часа

RAW_LABEL_FORMAT = "%I:%M:%S %p"
HOURLY_LABEL_FORMAT = "%m/%d, %I:%M %p"

ChartSeries = namedtuple("ChartSeries", ["labels", "levels", "rates"])
ChartRequest = namedtuple("ChartRequest", ["action", "hours", "days", "limit"])


def _to_float(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(f) or math.isinf(f) else f


def _is_hourly(record) -> bool:
    return record.get("hour_timestamp_utc") is not None


def _time_key(record):
    """Возвращает время записи в секундах эпохи или ``None``.

    Часовая метка ``hour_timestamp_utc`` приоритетнее ``receivedAt``, даже если
    в записи присутствуют обе.
    """

    if _is_hourly(record):
        return _to_float(record.get("hour_timestamp_utc"))
    return _to_float(record.get("receivedAt"))


def _value(record):
    if _is_hourly(record):
        return _to_float(record.get("avg_distance"))
    return _to_float(record.get("distance"))


def format_label(seconds: float, hourly: bool, tz_name: str = None) -> str:
    """Форматирует метку оси X в фиксированном часовом поясе.

    Args:
        seconds: Время в секундах эпохи (UTC).
        hourly: ``True`` для часовых агрегатов (дата + часы:минуты),
            ``False`` для сырых показаний (часы:минуты:секунды).
        tz_name: Имя зоны IANA; по умолчанию ``config.DISPLAY_TIMEZONE``.

    Returns:
        Строку вида ``"03/15, 02:00 PM"`` или ``"02:05:09 PM"`` независимо от
        локали сервера.
    """

    tz = ZoneInfo(tz_name or config.DISPLAY_TIMEZONE)
    dt = datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone(tz)
    return dt.strftime(HOURLY_LABEL_FORMAT if hourly else RAW_LABEL_FORMAT)


def format_gap_duration(seconds: float) -> str:
    """Длительность разрыва: минуты до часа, часы до суток, далее дни."""
    if seconds < 3600:
        return f"{int(seconds // 60)}m"
    if seconds < 86400:
        return f"{seconds / 3600:.1f}h"
    return f"{seconds / 86400:.1f} days"


def gap_threshold(hourly: bool) -> int:
    return HOURLY_GAP_THRESHOLD if hourly else RAW_GAP_THRESHOLD


def normalize_series(records, mode: str = REALTIME, tz_name: str = None) -> ChartSeries:
    """Сортирует записи, считает скорость и размечает разрывы.

    Алгоритм:

    1. Для каждой записи берётся время (``hour_timestamp_utc`` или
       ``receivedAt``); записи без времени или со временем, которое нельзя
       перевести в дату, отбрасываются.
    2. Записи стабильно сортируются по возрастанию времени.
    3. За один проход формируются подпись, уровень (``None``, если значение
       не числовое) и скорость ``(v[i] - v[i-1]) / (t[i] - t[i-1]) * 3600``
       в см/ч. Для первой точки, при нулевом или отрицательном шаге времени и
       при отсутствии одного из значений скорость равна 0.
    4. Если до следующей записи больше порога (900 с для сырых данных,
       5400 с для часовых), добавляется точка ``OFFLINE (<длительность>)`` с
       уровнем и скоростью ``None``. Цепочка разностей при этом не
       прерывается: следующая точка считается относительно предыдущей
       реальной.

    Args:
        records: Итерируемая коллекция словарей из ответа Data API.
        mode: ``"realtime"`` или ``"hourly"``. Тип записи определяется по её
            полям, режим только попадает в лог.
        tz_name: Часовой пояс подписей.

    Returns:
        ``ChartSeries(labels, levels, rates)`` — три списка одинаковой длины.
    """

    keyed = []
    dropped = 0
    for rec in records or []:
        if not isinstance(rec, dict):
            dropped += 1
            continue
        t = _time_key(rec)
        if t is None:
            dropped += 1
            continue
        try:
            label = format_label(t, _is_hourly(rec), tz_name)
        except (ValueError, OverflowError, OSError):
            # например, метка в миллисекундах
            dropped += 1
            continue
        keyed.append((t, rec, label))
    if dropped:
        logger.debug("Dropped %d records without a usable timestamp (mode=%s)", dropped, mode)

    keyed.sort(key=lambda item: item[0])

    labels, levels, rates = [], [], []
    prev_t = prev_v = None

    for i, (t, rec, label) in enumerate(keyed):
        hourly = _is_hourly(rec)
        v = _value(rec)

        rate = 0.0
        if prev_t is not None:
            dt = t - prev_t
            if dt > 0 and v is not None and prev_v is not None:
                rate = (v - prev_v) / dt * 3600

        labels.append(label)
        levels.append(v)
        rates.append(rate)

        if i < len(keyed) - 1:
            gap = keyed[i + 1][0] - t
            if gap > gap_threshold(hourly):
                labels.append(f"OFFLINE ({format_gap_duration(gap)})")
                levels.append(None)
                rates.append(None)

        prev_t, prev_v = t, v

    return ChartSeries(labels, levels, rates)


# --- Выбор окна данных для графика ---

def chart_request_for_range(mode: str, hours: int) -> ChartRequest:
    """Какой запрос к Data API обслуживает выбранный диапазон графика."""
    if mode == REALTIME:
        return ChartRequest("history", 3, None, config.MAX_HISTORY_POINTS)
    if mode == HOURLY and hours == 1:
        return ChartRequest("history", 1, None, config.MAX_HISTORY_POINTS)
    if mode == HOURLY:
        days = max(1, math.ceil(hours / 24))
        return ChartRequest("hourly_history", None, days, None)
    raise ValueError(f"Unknown chart mode: {mode}")


def chart_type(mode: str, hours: int) -> str:
    return "bar" if mode == HOURLY and hours >= 1 else "line"
