from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from .logging_utils import log_event
from .recorder import ResponseRecorder, StartResponse, WSGIResponseRecorder
from .stats import RequestStats

WSGIApp = Callable[[dict[str, Any], StartResponse], Iterable[bytes]]

SERVER_ERROR_STATUS = 500

logger = logging.getLogger(__name__)


def _request_url(path: str, query: str) -> str:
    return f"{path}?{query}" if query else path


def _failed(recorder: ResponseRecorder) -> None:
    # Nothing reached the client, so the server will answer with a 500.
    if not recorder.started:
        recorder.write_status(SERVER_ERROR_STATUS)


class RequestStatsMiddleware:
    """ASGI middleware recording every HTTP request into a :class:`RequestStats`.

    Usage with FastAPI/Starlette::

        app.add_middleware(RequestStatsMiddleware, stats=stats)
    """

    def __init__(self, app: ASGIApp, stats: RequestStats) -> None:
        self.app = app
        self.stats = stats

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start, recorder = self.stats.begin(send)
        try:
            await self.app(scope, receive, recorder)
        except BaseException:
            # Cancellation (client disconnect, shutdown) counts as a failure too.
            _failed(recorder)
            raise
        finally:
            self._end(scope, start, recorder)

    def _end(self, scope: Scope, start: int, recorder: ResponseRecorder) -> None:
        # ASGI "path" already carries the root_path prefix.
        url = _request_url(
            scope.get("path", ""),
            scope.get("query_string", b"").decode("latin-1"),
        )
        method = scope.get("method", "")
        user_agent = Headers(scope=scope).get("user-agent", "")
        self.stats.end(start, recorder, url, method, user_agent)
        log_event(
            logger,
            "request.recorded",
            level=logging.DEBUG,
            method=method,
            path=url,
            status_code=recorder.status,
            bytes_written=recorder.bytes_written,
        )


class _RecordedBody:
    """Response iterable that records the request once, on exhaustion or close."""

    def __init__(self, body: Iterable[bytes], recorder: WSGIResponseRecorder, on_finish: Callable[[], None]) -> None:
        self._body = body
        self._recorder = recorder
        self._on_finish = on_finish
        self._finished = False

    def __iter__(self) -> Iterator[bytes]:
        try:
            for chunk in self._body:
                self._recorder.count_body(chunk)
                yield chunk
        except Exception:
            _failed(self._recorder)
            self._finish()
            raise
        self._finish()

    def close(self) -> None:
        close = getattr(self._body, "close", None)
        try:
            if close is not None:
                close()
        finally:
            self._finish()

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._on_finish()


class WSGIRequestStatsMiddleware:
    """WSGI counterpart of :class:`RequestStatsMiddleware`.

    The request is recorded once the response iterable is exhausted or
    closed, so streamed bodies are included in the latency.
    """

    def __init__(self, app: WSGIApp, stats: RequestStats) -> None:
        self.app = app
        self.stats = stats

    def __call__(self, environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        start, recorder = self.stats.begin_wsgi(start_response)
        try:
            body = self.app(environ, recorder)
        except Exception:
            _failed(recorder)
            self._end(environ, start, recorder)
            raise
        return _RecordedBody(body, recorder, lambda: self._end(environ, start, recorder))

    def _end(self, environ: dict[str, Any], start: int, recorder: ResponseRecorder) -> None:
        url = _request_url(
            environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", ""),
            environ.get("QUERY_STRING", ""),
        )
        method = environ.get("REQUEST_METHOD", "")
        self.stats.end(start, recorder, url, method, environ.get("HTTP_USER_AGENT", ""))
        log_event(
            logger,
            "request.recorded",
            level=logging.DEBUG,
            method=method,
            path=url,
            status_code=recorder.status,
            bytes_written=recorder.bytes_written,
        )
