import os
import json
import logging

import config

logger = logging.getLogger("app.locations")


class LocationError(ValueError):
    """Некорректный ввод формы местоположения."""


class KeyValueStore:
    """Хранилище строк по строковому ключу (аналог localStorage)."""

    def get(self, key):
        raise NotImplementedError

    def set(self, key, value):
        raise NotImplementedError


class MemoryStore(KeyValueStore):

    def __init__(self, initial=None):
        self._data = dict(initial or {})

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value


class JsonFileStore(KeyValueStore):
    """Ключи и строковые значения в одном JSON-файле на диске."""

    def __init__(self, path):
        self.path = path

    def _read_all(self):
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def get(self, key):
        return self._read_all().get(key)

    def set(self, key, value):
        data = self._read_all()
        data[key] = value
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=4, ensure_ascii=False)


def _parse_coord(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(str(value).strip())
    except ValueError:
        return None
    return f if f == f else None


class LocationStore:
    """Карта ``deviceID -> {name, lat, lng}`` под одним ключом хранилища."""

    def __init__(self, store, key=None):
        self.store = store
        self.key = key or config.LOCATIONS_KEY
        self.locations = {}
        self._loaded = False

    def load(self):
        try:
            raw = self.store.get(self.key)
            data = json.loads(raw) if raw else {}
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            self.locations = data
        except (OSError, ValueError) as e:
            logger.error(f"Error loading saved locations: {e}")
            self.locations = {}
        self._loaded = True
        logger.debug("Loaded saved locations: %s", self.locations)
        return self.locations

    def _ensure_loaded(self):
        if not self._loaded:
            self.load()

    def get(self, device_id):
        self._ensure_loaded()
        return self.locations.get(device_id)

    def all(self):
        self._ensure_loaded()
        return dict(self.locations)

    def save(self, device_id, name, lat, lng):
        if not device_id:
            raise LocationError("Please select a device")
        lat_f, lng_f = _parse_coord(lat), _parse_coord(lng)
        if lat_f is None or lng_f is None:
            raise LocationError("Please enter valid latitude and longitude")

        # Пишется вся карта целиком, поэтому сначала читаем сохранённое
        self._ensure_loaded()
        entry = {"name": name or "", "lat": lat_f, "lng": lng_f}
        self.locations[device_id] = entry
        self.store.set(self.key, json.dumps(self.locations))
        logger.info("Saved location for %s: %s", device_id, entry)
        return entry
