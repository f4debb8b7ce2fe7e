# config.py
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name, default=None):
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    return float(raw)


# Настройки Flask
CACHE_TYPE = "null"
DEBUG = _env_bool("DEBUG", True)
PORT = int(os.getenv("PORT", "8080"))

# --- Data API ---
API_BASE = os.getenv(
    "API_BASE",
    "https://imrnh5ugn0.execute-api.us-east-1.amazonaws.com/default/getData"
)
# None = таймаут транспорта по умолчанию
REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT")

# --- Обновление ---
REFRESH_INTERVAL = int(os.getenv("REFRESH_INTERVAL", "10"))  # секунды
AUTO_REFRESH_ENABLED = _env_bool("AUTO_REFRESH_ENABLED", True)

# --- Графики ---
MAX_HISTORY_POINTS = int(os.getenv("MAX_HISTORY_POINTS", "100"))
DEFAULT_TIME_RANGE = os.getenv("DEFAULT_TIME_RANGE", "realtime")
DEFAULT_CHART_HOURS = int(os.getenv("DEFAULT_CHART_HOURS", "3"))
DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "America/Mexico_City")

# --- Устройства ---
DEFAULT_DEVICE = os.getenv("DEFAULT_DEVICE", "SMAAWA_001")

# --- Хранилище точек на карте ---
LOCATIONS_FILE = os.getenv("LOCATIONS_FILE", "device_locations.json")
LOCATIONS_KEY = "smaawa_device_locations"

# --- Пороги ---
BATTERY_HIGH = 70  # >= 70% норма
BATTERY_LOW = 30   # < 30% критично
WATER_LEVEL_HIGH = 200  # см
WATER_LEVEL_LOW = 20    # см

# --- Карта ---
MAP_DEFAULT_ZOOM = 15
MAP_DEFAULT_CENTER = (19.4326, -99.1332)  # Mexico City
MAP_TILES = "OpenStreetMap"

# --- Константы интерфейса ---
COLORS = {
    "primary": "#3b82f6",
    "secondary": "#f97316",
    "success": "#10b981",
    "warning": "#fbbf24",
    "danger": "#ef4444",
    "muted": "#9ca3af",
    "water_level": "#3b82f6",
    "rate": "#f97316",
    "battery": "#10b981",
}
