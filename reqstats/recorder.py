from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from starlette.types import Message, Send

DEFAULT_STATUS = 200

WSGIWrite = Callable[[bytes], Any]
StartResponse = Callable[..., WSGIWrite]


class ResponseRecorder:
    """Remembers the status code a handler sent through it.

    Subclasses wrap a concrete output destination and pass every write
    through unchanged. The status stays at 200 until a handler sets one.
    """

    def __init__(self) -> None:
        self._status = DEFAULT_STATUS
        self._started = False
        self._bytes_written = 0

    @property
    def status(self) -> int:
        return self._status

    @property
    def started(self) -> bool:
        return self._started

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    def write_status(self, status_code: int) -> None:
        self._status = int(status_code)


class ASGIResponseRecorder(ResponseRecorder):
    def __init__(self, send: Send) -> None:
        super().__init__()
        self._send = send

    async def __call__(self, message: Message) -> None:
        message_type = message.get("type")
        if message_type == "http.response.start":
            self._status = int(message.get("status", DEFAULT_STATUS))
            self._started = True
        elif message_type == "http.response.body":
            self._bytes_written += len(message.get("body", b""))
        await self._send(message)


class WSGIResponseRecorder(ResponseRecorder):
    def __init__(self, start_response: StartResponse) -> None:
        super().__init__()
        self._start_response = start_response

    def __call__(
        self,
        status: str,
        headers: Iterable[tuple[str, str]],
        exc_info: Optional[Any] = None,
    ) -> WSGIWrite:
        code, _, _ = status.partition(" ")
        if code.isdigit():
            self._status = int(code)
        self._started = True
        if exc_info is None:
            write = self._start_response(status, headers)
        else:
            write = self._start_response(status, headers, exc_info)

        def recorded_write(data: bytes) -> Any:
            self._bytes_written += len(data)
            return write(data)

        return recorded_write

    def count_body(self, chunk: bytes) -> None:
        self._bytes_written += len(chunk)
