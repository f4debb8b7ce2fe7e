import logging

import requests

import config

logger = logging.getLogger("app.api")


class ApiError(Exception):
    """Ошибка обращения к Data API (сеть, HTTP-статус или разбор JSON)."""


class DataApiClient:
    """Клиент единственной точки Data API (параметр ``action``).

    Повторов нет: следующий плановый опрос и есть повтор.
    """

    def __init__(self, base_url=None, timeout=None, session=None):
        self.base_url = base_url or config.API_BASE
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _get(self, action, **params):
        params = {k: v for k, v in params.items() if v is not None}
        params["action"] = action
        logger.debug("GET %s %s", self.base_url, params)
        try:
            r = self.session.get(self.base_url, params=params, timeout=self.timeout)
            r.raise_for_status()
            payload = r.json()
        except requests.RequestException as e:
            raise ApiError(f"{action} request failed: {e}") from e
        except ValueError as e:
            raise ApiError(f"{action} returned invalid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise ApiError(f"{action} returned unexpected payload: {type(payload).__name__}")
        return payload

    def devices(self):
        return self._get("devices").get("devices") or []

    def latest(self, device_id):
        payload = self._get("latest", deviceID=device_id)
        data = payload.get("data")
        return data if isinstance(data, dict) else payload

    def history(self, device_id, hours=1, limit=None):
        payload = self._get("history", deviceID=device_id, hours=hours,
                            limit=limit or config.MAX_HISTORY_POINTS)
        return payload.get("data") or []

    def hourly_history(self, device_id, days=1):
        payload = self._get("hourly_history", deviceID=device_id, days=days)
        return payload.get("data") or []

    def fetch_chart(self, device_id, chart_request):
        if chart_request.action == "hourly_history":
            return self.hourly_history(device_id, days=chart_request.days)
        return self.history(device_id, hours=chart_request.hours, limit=chart_request.limit)
