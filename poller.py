import logging
import threading

logger = logging.getLogger(__name__)


class RepeatingTask:
    """Run ``func`` now and then every ``interval`` seconds until cancelled."""

    def __init__(self, interval, func, name='poller'):
        self.interval = interval
        self.func = func
        self.name = name
        self._stop = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        return self

    def cancel(self):
        self._stop.set()

    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self):
        while not self._stop.is_set():
            try:
                self.func()
            except Exception:
                logger.exception('%s: poll failed', self.name)
            if self._stop.wait(self.interval):
                break
