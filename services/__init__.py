# services/__init__.py

from .api import (
    ApiError,
    DataApiClient
)

from .timeseries import (
    ChartSeries,
    ChartRequest,
    normalize_series,
    format_gap_duration,
    format_label,
    chart_request_for_range,
    chart_type
)

from .liveness import (
    classify,
    time_ago,
    device_label,
    summarize_devices
)

from .metrics import (
    CYCLE_SECONDS,
    cycle_rate_to_hourly,
    current_reading,
    window_stats
)

from .locations import (
    KeyValueStore,
    MemoryStore,
    JsonFileStore,
    LocationStore,
    LocationError
)

from .scheduler import RefreshScheduler
from .dashboard import Dashboard
