from __future__ import annotations

import logging
from datetime import datetime, timedelta

from .logging_utils import log_event
from .models import PeakResponse, StatsSnapshot
from .store import MetricsStore, PeakRecord
from .timespan import (
    TimeSpan,
    decompose,
    format_duration,
    nanoseconds_to_seconds,
    round_to_decimals,
)

logger = logging.getLogger(__name__)


class SnapshotExporter:
    """Derives a :class:`StatsSnapshot` from one capture of the store.

    Nothing computed here is written back: the peak's "time since" is
    rebuilt from ``observed_at`` on every export.
    """

    def __init__(self, store: MetricsStore) -> None:
        self._store = store

    def export(self) -> StatsSnapshot:
        state = self._store.capture()
        now = state.captured_at

        uptime_ns = _timedelta_ns(now - state.started_at)
        count = sum(state.window_status_counts.values())
        total_count = sum(state.cumulative_status_counts.values())
        total_ns = state.cumulative_response_time_ns
        average_ns = total_ns // total_count if total_count > 0 else 0

        snapshot = StatsSnapshot(
            pid=state.process_id,
            uptime=format_duration(uptime_ns),
            uptime_sec=nanoseconds_to_seconds(uptime_ns),
            time=now.isoformat(),
            unixtime=int(now.timestamp()),
            status_code_count=state.window_status_counts,
            total_status_code_count=state.cumulative_status_counts,
            count=count,
            total_count=total_count,
            total_response_time=format_duration(total_ns),
            total_response_time_sec=nanoseconds_to_seconds(total_ns),
            average_response_time=format_duration(average_ns),
            average_response_time_sec=nanoseconds_to_seconds(average_ns),
            url_request_counts=state.url_request_counts,
            request_type_counts=state.method_counts,
            user_agent_counts=state.user_agent_counts,
            url_request_latency=state.url_latency_sum_ns,
            url_highest_response={url: float(ns) for url, ns in state.url_max_latency_ns.items()},
            url_lowest_response={url: float(ns) for url, ns in state.url_min_latency_ns.items()},
            max_response_time=_peak_response(state.peak, now),
        )
        log_event(logger, "stats.exported", level=logging.DEBUG, total_count=total_count)
        return snapshot


def _peak_response(peak: PeakRecord, now: datetime) -> PeakResponse:
    since = TimeSpan()
    if peak.observed_at is not None:
        elapsed = round_to_decimals((now - peak.observed_at).total_seconds(), 0)
        since = decompose(max(elapsed, 0))

    return PeakResponse(
        response_url=peak.url,
        response_method=peak.method,
        response_duration=peak.duration_ns,
        response_time=peak.observed_at,
        response_seconds=nanoseconds_to_seconds(peak.duration_ns),
        response_since=since,
    )


def _timedelta_ns(delta: timedelta) -> int:
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000
