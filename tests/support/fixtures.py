from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

MS = 1_000_000
SECOND = 1_000_000_000


class ManualClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


class ManualTimer:
    """Nanosecond counter that only moves when told to."""

    def __init__(self) -> None:
        self.value = 0

    def __call__(self) -> int:
        return self.value

    def advance(self, nanoseconds: int) -> None:
        self.value += nanoseconds


class RecordingSend:
    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)


class RecordingStartResponse:
    def __init__(self) -> None:
        self.calls: list[tuple[str, list[tuple[str, str]], Any]] = []
        self.written: list[bytes] = []

    def __call__(self, status: str, headers: list[tuple[str, str]], exc_info: Any = None):
        self.calls.append((status, headers, exc_info))
        return self.written.append


def build_http_scope(
    path: str = "/",
    method: str = "GET",
    query_string: bytes = b"",
    user_agent: str | None = "test-agent/1.0",
    root_path: str = "",
) -> dict[str, Any]:
    headers = []
    if user_agent is not None:
        headers.append((b"user-agent", user_agent.encode("latin-1")))
    return {
        "type": "http",
        "method": method,
        "path": path,
        "root_path": root_path,
        "query_string": query_string,
        "headers": headers,
    }


def build_wsgi_environ(
    path: str = "/",
    method: str = "GET",
    query: str = "",
    user_agent: str = "test-agent/1.0",
) -> dict[str, Any]:
    return {
        "REQUEST_METHOD": method,
        "SCRIPT_NAME": "",
        "PATH_INFO": path,
        "QUERY_STRING": query,
        "HTTP_USER_AGENT": user_agent,
    }
