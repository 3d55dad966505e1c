from abc import ABC, abstractmethod
from bisect import bisect_right
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional
import math
import re

import numpy as np

from .errors import InvalidScaleDefinition
from .ticks import nice_linear, nice_with, tick_step

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# The Sunday on or before the epoch, used to align week multiples.
_WEEK_EPOCH = datetime(1969, 12, 28, tzinfo=timezone.utc)

DURATION_SECOND = 1000.0
DURATION_MINUTE = DURATION_SECOND * 60
DURATION_HOUR = DURATION_MINUTE * 60
DURATION_DAY = DURATION_HOUR * 24
DURATION_WEEK = DURATION_DAY * 7
DURATION_MONTH = DURATION_DAY * 30
DURATION_YEAR = DURATION_DAY * 365


def is_temporal(value: Any) -> bool:
    return isinstance(value, (datetime, date, np.datetime64))


def as_datetime(value: Any) -> datetime:
    """Normalize date-like values to `datetime`."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, np.datetime64):
        return value.astype("datetime64[us]").item()
    raise TypeError(f"Cannot interpret {value!r} as a datetime")


def to_milliseconds(value: Any, utc: bool = True) -> float:
    """
    Milliseconds since the epoch. Naive datetimes are read as UTC on utc
    scales and as local time otherwise.
    """
    dt = as_datetime(value)
    if dt.tzinfo is None and utc:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp() * 1000


def from_milliseconds(ms: float, utc: bool = True) -> datetime:
    if utc:
        return _EPOCH + timedelta(milliseconds=ms)
    return datetime.fromtimestamp(ms / 1000)


def milliseconds_like(ms: float, template: Any, utc: bool = True) -> Any:
    """
    Convert milliseconds back into the same kind of value as `template`: a
    `date` for dates, a naive or aware `datetime` matching its tzinfo, or a
    `numpy.datetime64`.
    """
    dt = from_milliseconds(ms, utc)
    if isinstance(template, np.datetime64):
        return np.datetime64(dt.replace(tzinfo=None), "us")
    if isinstance(template, datetime) and template.tzinfo is not None:
        return dt.astimezone(template.tzinfo)
    dt = dt.replace(tzinfo=None)
    if isinstance(template, date) and not isinstance(template, datetime):
        return dt.date()
    return dt


class Interval(ABC):
    """
    A regular partition of a value space. `floor` maps a value to the start of
    its bucket, `offset` steps forward by whole buckets, and `range` lists the
    bucket starts in `[start, stop)`.
    """

    @abstractmethod
    def floor(self, value: Any) -> Any:
        pass

    @abstractmethod
    def offset(self, value: Any, k: int = 1) -> Any:
        pass

    def ceil(self, value: Any) -> Any:
        lo = self.floor(value)
        return lo if lo == value else self.offset(lo)

    def range(self, start: Any, stop: Any) -> list[Any]:
        values = []
        current = self.ceil(start)
        while current < stop:
            values.append(current)
            current = self.offset(current)
        return values


@dataclass(frozen=True)
class NumberInterval(Interval):
    period: float

    def __post_init__(self):
        if not (math.isfinite(self.period) and self.period > 0):
            raise InvalidScaleDefinition(f"invalid interval period: {self.period}")

    @property
    def _inverse(self) -> Optional[float]:
        # Fractional periods like 0.1 are handled through their reciprocal to
        # avoid accumulating floating point error.
        if self.period < 1:
            n = 1 / self.period
            if n == round(n):
                return float(round(n))
        return None

    def floor(self, value):
        if value is None or not math.isfinite(value):
            return value
        n = self._inverse
        if n is not None:
            return math.floor(value * n) / n
        return self.period * math.floor(value / self.period)

    def offset(self, value, k=1):
        n = self._inverse
        if n is not None:
            return (round(value * n) + math.floor(k)) / n
        return value + self.period * math.floor(k)

    def range(self, start, stop):
        n = self._inverse
        if n is not None:
            lo, hi = math.ceil(start * n), stop * n
            return [i / n for i in range(lo, math.ceil(hi))]
        lo, hi = math.ceil(start / self.period), stop / self.period
        return [self.period * i for i in range(lo, math.ceil(hi))]


_UNITS = ("second", "minute", "hour", "day", "week", "month", "year")


def _add_months(dt: datetime, months: int) -> datetime:
    total = dt.year * 12 + (dt.month - 1) + months
    return dt.replace(year=total // 12, month=total % 12 + 1)


@dataclass(frozen=True)
class TimeInterval(Interval):
    """
    Calendar interval on datetimes. Multiples (`every`) align to the natural
    field: seconds of the minute, hours of the day, days of the month, months
    of the year and so on.
    """

    unit: str
    step: int = 1

    def __post_init__(self):
        if self.unit not in _UNITS:
            raise InvalidScaleDefinition(f"unknown interval: {self.unit}")
        if self.step < 1:
            raise InvalidScaleDefinition(f"invalid interval step: {self.step}")

    def every(self, step: int) -> "TimeInterval":
        return TimeInterval(self.unit, self.step * step)

    def floor(self, value):
        if value is None:
            return value
        dt = as_datetime(value)
        k = self.step
        match self.unit:
            case "second":
                dt = dt.replace(microsecond=0)
                return dt.replace(second=dt.second - dt.second % k)
            case "minute":
                dt = dt.replace(second=0, microsecond=0)
                return dt.replace(minute=dt.minute - dt.minute % k)
            case "hour":
                dt = dt.replace(minute=0, second=0, microsecond=0)
                return dt.replace(hour=dt.hour - dt.hour % k)
            case "day":
                dt = dt.replace(hour=0, minute=0, second=0, microsecond=0)
                return dt.replace(day=(dt.day - 1) // k * k + 1)
            case "week":
                dt = dt.replace(hour=0, minute=0, second=0, microsecond=0)
                dt -= timedelta(days=(dt.weekday() + 1) % 7)
                if k > 1:
                    epoch = _WEEK_EPOCH.replace(tzinfo=dt.tzinfo)
                    weeks = (dt - epoch).days // 7
                    dt -= timedelta(weeks=weeks % k)
                return dt
            case "month":
                dt = dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
                return dt.replace(month=(dt.month - 1) // k * k + 1)
            case _:
                dt = dt.replace(
                    month=1, day=1, hour=0, minute=0, second=0, microsecond=0
                )
                return dt.replace(year=dt.year - dt.year % k)

    def offset(self, value, k=1):
        dt = as_datetime(value)
        n = self.step * math.floor(k)
        match self.unit:
            case "second":
                return dt + timedelta(seconds=n)
            case "minute":
                return dt + timedelta(minutes=n)
            case "hour":
                return dt + timedelta(hours=n)
            case "day":
                return dt + timedelta(days=n)
            case "week":
                return dt + timedelta(weeks=n)
            case "month":
                return _add_months(dt, n)
            case _:
                return dt.replace(year=dt.year + n)

    def range(self, start, stop):
        return super().range(as_datetime(start), as_datetime(stop))


_INTERVAL_PATTERN = re.compile(
    r"^\s*(?:(\d+)\s*)?(second|minute|hour|day|week|month|year)s?\s*$", re.IGNORECASE
)


def as_interval(value: Any) -> Optional[Interval]:
    """Parse the `interval` scale option."""
    if value is None or isinstance(value, Interval):
        return value
    if isinstance(value, bool):
        raise InvalidScaleDefinition(f"invalid interval: {value}")
    if isinstance(value, (int, float, np.number)):
        return NumberInterval(float(value))
    if isinstance(value, str):
        match = _INTERVAL_PATTERN.match(value)
        if match is None:
            try:
                return NumberInterval(float(value))
            except ValueError:
                raise InvalidScaleDefinition(f"unknown interval: {value}") from None
        step, unit = match.groups()
        return TimeInterval(unit.lower(), int(step) if step else 1)
    raise InvalidScaleDefinition(f"invalid interval: {value!r}")


_TICK_INTERVALS = [
    (TimeInterval("second"), 1, DURATION_SECOND),
    (TimeInterval("second"), 5, 5 * DURATION_SECOND),
    (TimeInterval("second"), 15, 15 * DURATION_SECOND),
    (TimeInterval("second"), 30, 30 * DURATION_SECOND),
    (TimeInterval("minute"), 1, DURATION_MINUTE),
    (TimeInterval("minute"), 5, 5 * DURATION_MINUTE),
    (TimeInterval("minute"), 15, 15 * DURATION_MINUTE),
    (TimeInterval("minute"), 30, 30 * DURATION_MINUTE),
    (TimeInterval("hour"), 1, DURATION_HOUR),
    (TimeInterval("hour"), 3, 3 * DURATION_HOUR),
    (TimeInterval("hour"), 6, 6 * DURATION_HOUR),
    (TimeInterval("hour"), 12, 12 * DURATION_HOUR),
    (TimeInterval("day"), 1, DURATION_DAY),
    (TimeInterval("day"), 2, 2 * DURATION_DAY),
    (TimeInterval("week"), 1, DURATION_WEEK),
    (TimeInterval("month"), 1, DURATION_MONTH),
    (TimeInterval("month"), 3, 3 * DURATION_MONTH),
    (TimeInterval("year"), 1, DURATION_YEAR),
]
_TICK_DURATIONS = [duration for _, _, duration in _TICK_INTERVALS]


def time_tick_interval(start: float, stop: float, count: int) -> Optional[TimeInterval]:
    """
    Choose the calendar interval whose duration best matches the span
    `[start, stop]` (in milliseconds) divided into `count` ticks. Returns None
    when the span calls for sub-second ticks.
    """
    target = abs(stop - start) / count
    i = bisect_right(_TICK_DURATIONS, target)
    if i == len(_TICK_INTERVALS):
        step = tick_step(start / DURATION_YEAR, stop / DURATION_YEAR, count)
        return TimeInterval("year", max(1, math.floor(step)))
    if i == 0:
        return None
    before, after = _TICK_INTERVALS[i - 1], _TICK_INTERVALS[i]
    interval, step, _ = before if target / before[2] < after[2] / target else after
    return interval.every(step)


def nice_time(domain: list, count: int = 10, utc: bool = True) -> list:
    """Extend a temporal domain's endpoints to calendar boundaries."""
    start = to_milliseconds(domain[0], utc)
    stop = to_milliseconds(domain[-1], utc)
    interval = time_tick_interval(min(start, stop), max(start, stop), count)
    if interval is None:
        ms = nice_linear([start, stop], count)
        return [
            milliseconds_like(ms[0], domain[0], utc),
            *domain[1:-1],
            milliseconds_like(ms[-1], domain[-1], utc),
        ]
    return nice_with([as_datetime(d) for d in domain], interval.floor, interval.ceil)
