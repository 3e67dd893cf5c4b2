from __future__ import annotations

import os
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .clock import Clock, utc_now
from .locking import ReadWriteLock


@dataclass(frozen=True)
class PeakRecord:
    url: str = ""
    method: str = ""
    duration_ns: int = 0
    observed_at: Optional[datetime] = None


@dataclass(frozen=True)
class StoreState:
    """Copy of every aggregate taken under a single read lock."""

    process_id: int
    started_at: datetime
    captured_at: datetime
    window_status_counts: dict[str, int]
    cumulative_status_counts: dict[str, int]
    cumulative_response_time_ns: int
    url_request_counts: dict[str, int]
    url_latency_sum_ns: dict[str, int]
    method_counts: dict[str, int]
    user_agent_counts: dict[str, int]
    url_max_latency_ns: dict[str, int]
    url_min_latency_ns: dict[str, int]
    peak: PeakRecord


class MetricsStore:
    """Running request aggregates shared by every request-handling thread.

    Counters keyed by status code exist twice: the window map is cleared by
    :meth:`reset_window` once a second, the cumulative map only grows.

    ``legacy_zero_minimum`` reproduces the older behaviour where a stored
    minimum of exactly zero counts as unset and is replaced by the next
    observation for that URL.
    """

    def __init__(
        self,
        *,
        clock: Clock = utc_now,
        process_id: Optional[int] = None,
        legacy_zero_minimum: bool = False,
    ) -> None:
        self._lock = ReadWriteLock()
        self._clock = clock
        self._legacy_zero_minimum = legacy_zero_minimum
        self._process_id = os.getpid() if process_id is None else process_id
        self._started_at = clock()

        self._window_status_counts: dict[str, int] = defaultdict(int)
        self._cumulative_status_counts: dict[str, int] = defaultdict(int)
        self._cumulative_response_time_ns = 0
        self._url_request_counts: dict[str, int] = defaultdict(int)
        self._url_latency_sum_ns: dict[str, int] = defaultdict(int)
        self._method_counts: dict[str, int] = defaultdict(int)
        self._user_agent_counts: dict[str, int] = defaultdict(int)
        self._url_max_latency_ns: dict[str, int] = {}
        self._url_min_latency_ns: dict[str, int] = {}
        self._peak = PeakRecord()

    @property
    def process_id(self) -> int:
        return self._process_id

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def clock(self) -> Clock:
        return self._clock

    def record(
        self,
        elapsed_ns: int,
        status: int | str,
        url: str,
        method: str,
        user_agent: str,
    ) -> None:
        status_key = str(status)
        with self._lock.write():
            self._window_status_counts[status_key] += 1
            self._cumulative_status_counts[status_key] += 1
            self._cumulative_response_time_ns += elapsed_ns
            self._url_request_counts[url] += 1
            self._url_latency_sum_ns[url] += elapsed_ns
            self._method_counts[method] += 1
            self._user_agent_counts[user_agent] += 1

            if elapsed_ns > self._peak.duration_ns:
                self._peak = PeakRecord(
                    url=url,
                    method=method,
                    duration_ns=elapsed_ns,
                    observed_at=self._clock(),
                )

            highest = self._url_max_latency_ns.get(url)
            if highest is None or elapsed_ns > highest:
                self._url_max_latency_ns[url] = elapsed_ns

            lowest = self._url_min_latency_ns.get(url)
            if lowest is None or (self._legacy_zero_minimum and lowest == 0) or elapsed_ns < lowest:
                self._url_min_latency_ns[url] = elapsed_ns

    def reset_window(self) -> None:
        with self._lock.write():
            self._window_status_counts = defaultdict(int)

    def capture(self) -> StoreState:
        with self._lock.read():
            return StoreState(
                process_id=self._process_id,
                started_at=self._started_at,
                captured_at=self._clock(),
                window_status_counts=dict(self._window_status_counts),
                cumulative_status_counts=dict(self._cumulative_status_counts),
                cumulative_response_time_ns=self._cumulative_response_time_ns,
                url_request_counts=dict(self._url_request_counts),
                url_latency_sum_ns=dict(self._url_latency_sum_ns),
                method_counts=dict(self._method_counts),
                user_agent_counts=dict(self._user_agent_counts),
                url_max_latency_ns=dict(self._url_max_latency_ns),
                url_min_latency_ns=dict(self._url_min_latency_ns),
                peak=self._peak,
            )
