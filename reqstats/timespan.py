from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR
SECONDS_PER_WEEK = 7 * SECONDS_PER_DAY

_NS_PER_MICROSECOND = 1_000
_NS_PER_MILLISECOND = 1_000_000
_NS_PER_SECOND = 1_000_000_000
_NS_PER_MINUTE = 60 * _NS_PER_SECOND
_NS_PER_HOUR = 60 * _NS_PER_MINUTE


class TimeSpan(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    weeks: int = Field(default=0, ge=0, alias="Weeks")
    days: int = Field(default=0, ge=0, le=6, alias="Days")
    hours: int = Field(default=0, ge=0, le=23, alias="Hours")
    minutes: int = Field(default=0, ge=0, le=59, alias="Minutes")
    seconds: int = Field(default=0, ge=0, le=59, alias="Seconds")


def decompose(total_seconds: int | float) -> TimeSpan:
    """Split a whole number of seconds into weeks, days, hours, minutes and seconds."""
    remaining = int(total_seconds)
    if remaining < 0:
        raise ValueError("total_seconds must not be negative")

    weeks, remaining = divmod(remaining, SECONDS_PER_WEEK)
    days, remaining = divmod(remaining, SECONDS_PER_DAY)
    hours, remaining = divmod(remaining, SECONDS_PER_HOUR)
    minutes, seconds = divmod(remaining, SECONDS_PER_MINUTE)
    return TimeSpan(weeks=weeks, days=days, hours=hours, minutes=minutes, seconds=seconds)


def round_to_decimals(value: float, decimals: int) -> float:
    """Round half away from zero, so 2.5 -> 3.0 and -2.5 -> -3.0."""
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def nanoseconds_to_seconds(nanoseconds: int) -> float:
    return nanoseconds / _NS_PER_SECOND


def format_duration(nanoseconds: int) -> str:
    """Render a duration as e.g. ``1h2m3.5s``, ``12.345ms`` or ``0s``."""
    if nanoseconds == 0:
        return "0s"

    sign = "-" if nanoseconds < 0 else ""
    value = abs(nanoseconds)
    if value < _NS_PER_MICROSECOND:
        return f"{sign}{value}ns"
    if value < _NS_PER_MILLISECOND:
        return f"{sign}{_with_fraction(value, _NS_PER_MICROSECOND)}µs"
    if value < _NS_PER_SECOND:
        return f"{sign}{_with_fraction(value, _NS_PER_MILLISECOND)}ms"

    hours, value = divmod(value, _NS_PER_HOUR)
    minutes, value = divmod(value, _NS_PER_MINUTE)
    text = f"{_with_fraction(value, _NS_PER_SECOND)}s"
    if hours:
        text = f"{hours}h{minutes}m{text}"
    elif minutes:
        text = f"{minutes}m{text}"
    return sign + text


def _with_fraction(value: int, unit: int) -> str:
    whole, fraction = divmod(value, unit)
    if not fraction:
        return str(whole)
    width = len(str(unit)) - 1
    return f"{whole}.{fraction:0{width}d}".rstrip("0")
