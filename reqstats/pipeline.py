from __future__ import annotations

import time
from typing import Callable

from starlette.types import Send

from .recorder import ASGIResponseRecorder, ResponseRecorder, StartResponse, WSGIResponseRecorder
from .store import MetricsStore

Timer = Callable[[], int]


class RecordingPipeline:
    """Times one request and folds the outcome into a :class:`MetricsStore`.

    Adapters call ``begin`` before handing the request on and exactly one of
    ``end`` / ``end_with_status`` once the inner handler has finished.
    """

    def __init__(self, store: MetricsStore, timer: Timer = time.perf_counter_ns) -> None:
        self._store = store
        self._timer = timer

    def begin(self, send: Send) -> tuple[int, ASGIResponseRecorder]:
        return self._timer(), ASGIResponseRecorder(send)

    def begin_wsgi(self, start_response: StartResponse) -> tuple[int, WSGIResponseRecorder]:
        return self._timer(), WSGIResponseRecorder(start_response)

    def end(
        self,
        start: int,
        recorder: ResponseRecorder,
        url: str,
        method: str,
        user_agent: str,
    ) -> None:
        self.end_with_status(start, recorder.status, url, method, user_agent)

    def end_with_status(
        self,
        start: int,
        status: int | str,
        url: str,
        method: str,
        user_agent: str,
    ) -> None:
        elapsed_ns = max(self._timer() - start, 0)
        self._store.record(elapsed_ns, status, url, method, user_agent)
