from __future__ import annotations

import time
from typing import Optional

from starlette.types import Send

from .clock import Clock, utc_now
from .exporter import SnapshotExporter
from .models import StatsSnapshot
from .pipeline import RecordingPipeline, Timer
from .recorder import ASGIResponseRecorder, ResponseRecorder, StartResponse, WSGIResponseRecorder
from .scheduler import WindowScheduler
from .store import MetricsStore



class RequestStats:
    """One service instance's collector: store, window scheduler, pipeline and exporter.

    Build it once at startup and hand it to the middleware and to whatever
    serves the stats endpoint. Call :meth:`start` to begin clearing the
    one-second window and :meth:`stop` on shutdown.
    """

    def __init__(
        self,
        store: Optional[MetricsStore] = None,
        *,
        clock: Clock = utc_now,
        timer: Timer = time.perf_counter_ns,
        legacy_zero_minimum: bool = False,
    ) -> None:
        if store is None:
            store = MetricsStore(clock=clock, legacy_zero_minimum=legacy_zero_minimum)
        self.store = store
        self.scheduler = WindowScheduler(self.store)
        self.pipeline = RecordingPipeline(self.store, timer=timer)
        self.exporter = SnapshotExporter(self.store)

    def __enter__(self) -> RequestStats:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def start(self) -> None:
        self.scheduler.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self.scheduler.stop(timeout)

    def begin(self, send: Send) -> tuple[int, ASGIResponseRecorder]:
        return self.pipeline.begin(send)

    def begin_wsgi(self, start_response: StartResponse) -> tuple[int, WSGIResponseRecorder]:
        return self.pipeline.begin_wsgi(start_response)

    def end(self, start: int, recorder: ResponseRecorder, url: str, method: str, user_agent: str) -> None:
        self.pipeline.end(start, recorder, url, method, user_agent)

    def end_with_status(self, start: int, status: int | str, url: str, method: str, user_agent: str) -> None:
        self.pipeline.end_with_status(start, status, url, method, user_agent)

    def data(self) -> StatsSnapshot:
        return self.exporter.export()
