import logging
import threading

logger = logging.getLogger("app.scheduler")


class RefreshScheduler:
    """Обратный отсчёт раз в секунду и вызов ``on_refresh`` на нуле.

    ``tick()`` можно вызывать вручную (тесты); ``start()`` запускает
    фоновый поток, который тикает сам. Каждое обновление идёт в своём потоке,
    поэтому медленный запрос не задерживает следующие тики.
    """

    def __init__(self, interval, on_refresh, tick_seconds=1.0, run_async=True):
        if interval < 1:
            raise ValueError("interval must be at least 1 second")
        self.interval = int(interval)
        self.on_refresh = on_refresh
        self.tick_seconds = tick_seconds
        self.run_async = run_async
        self.countdown = self.interval
        self._stop = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def reset(self):
        self.countdown = self.interval

    def tick(self):
        self.countdown -= 1
        if self.countdown > 0:
            return False
        self.reset()
        if self.run_async:
            threading.Thread(target=self._run_refresh, name="refresh", daemon=True).start()
        else:
            self._run_refresh()
        return True

    def _run_refresh(self):
        try:
            self.on_refresh()
        except Exception:
            logger.exception("Scheduled refresh failed")

    def _loop(self):
        while not self._stop.wait(self.tick_seconds):
            self.tick()

    def start(self):
        self.stop()
        self.reset()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, name="refresh-timer", daemon=True)
        self._thread.start()
        logger.info("Auto-refresh started (every %ss)", self.interval)

    def stop(self):
        if self._thread is None:
            return
        self._stop.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=max(1.0, self.tick_seconds * 2))
        self._thread = None
        logger.info("Auto-refresh stopped")
