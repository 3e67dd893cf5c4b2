from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .timespan import TimeSpan


class _Report(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PeakResponse(_Report):
    response_url: str = Field(alias="ResponseURL")
    # Field name kept misspelled for compatibility with existing consumers.
    response_method: str = Field(alias="RepsonseMethod")
    response_duration: int = Field(alias="ResponseDuration")
    response_time: Optional[datetime] = Field(alias="ResponseTime")
    response_seconds: float = Field(alias="ResponseSeconds")
    response_since: TimeSpan = Field(alias="ResponseSince")


class StatsSnapshot(_Report):
    pid: int
    uptime: str
    uptime_sec: float
    time: str
    unixtime: int
    status_code_count: dict[str, int]
    total_status_code_count: dict[str, int]
    count: int
    total_count: int
    total_response_time: str
    total_response_time_sec: float
    average_response_time: str
    average_response_time_sec: float
    url_request_counts: dict[str, int] = Field(alias="URLRequestCounts")
    request_type_counts: dict[str, int] = Field(alias="RequestTypeCounts")
    user_agent_counts: dict[str, int] = Field(alias="UserAgentCounts")
    url_request_latency: dict[str, int] = Field(alias="URLRequestLatency")
    url_highest_response: dict[str, float] = Field(alias="URLHighestResponse")
    url_lowest_response: dict[str, float] = Field(alias="URLLowestResponse")
    max_response_time: PeakResponse = Field(alias="MaxResponseTimes")
