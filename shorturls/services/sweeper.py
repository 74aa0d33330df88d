from datetime import timedelta
from typing import Optional
import logging
import threading

from shorturls.db.repository import LinkStore

logger = logging.getLogger(__name__)


class ExpiredLinkSweeper:
    """Periodically drops links that expired more than ``retention`` ago.

    Expired links stay readable through the stats endpoint until they are swept.
    """

    def __init__(self, store: LinkStore, interval_seconds: float, retention_minutes: int = 1440):
        self.store = store
        self.interval_seconds = interval_seconds
        self.retention = timedelta(minutes=retention_minutes)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> int:
        cutoff = self.store.clock() - self.retention
        return self.store.purge_expired(cutoff)

    def start(self):
        if self.interval_seconds <= 0 or self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="link-sweeper", daemon=True)
        self._thread.start()
        logger.info(
            "Expired link sweeper running every %ss", self.interval_seconds,
            extra={"package": "cron_job"},
        )

    def stop(self, timeout: float = 5.0):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _loop(self):
        while not self._stop.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception:
                logger.exception("Expired link sweep failed", extra={"package": "cron_job"})
