from __future__ import annotations

import logging
import threading
from typing import Optional

from .logging_utils import log_event
from .store import MetricsStore

WINDOW_SECONDS = 1.0

logger = logging.getLogger(__name__)


class WindowScheduler:
    """Background thread that clears the one-second status window.

    The window is reset immediately on start and then once per
    ``WINDOW_SECONDS`` until :meth:`stop` is called.
    """

    def __init__(self, store: MetricsStore) -> None:
        self._store = store
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._guard = threading.Lock()

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        with self._guard:
            if self.running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run_loop,
                name="reqstats-window",
                daemon=True,
            )
            self._thread.start()
        log_event(logger, "stats.scheduler.started", interval_sec=WINDOW_SECONDS)

    def stop(self, timeout: Optional[float] = None) -> None:
        with self._guard:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()
            thread.join(timeout)
            self._thread = None
        log_event(logger, "stats.scheduler.stopped")

    def _run_loop(self) -> None:
        while True:
            self._store.reset_window()
            if self._stop_event.wait(WINDOW_SECONDS):
                break
