"""Time-window selection over raw events, applied before enrichment.

Event timestamps are compared as absolute instants. Calendar boundaries
(midnight, "yesterday", "the last 7 days") are computed in the configured
local timezone, so a day window is DST-aware.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

import pandas as pd

from errors import InvalidDate

EPOCH = pd.Timestamp("1970-01-01", tz="UTC")
END_OF_DAY = pd.Timedelta(hours=23, minutes=59, seconds=59, milliseconds=999)
DEFAULT_LATEST_LIMIT = 60

RANGE_ERROR_MESSAGE = "Formato start/end non valido. Usa date ISO (YYYY-MM-DDTHH:mm:ssZ)."


def parse_instant(value: Any, tz: str) -> pd.Timestamp | None:
    """Parse a wire timestamp into a tz-aware instant, or None if it can't be read.

    Strings without an offset are read as local wall time. Bare numbers are
    epoch milliseconds.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            ts = pd.Timestamp(value, unit="ms", tz="UTC")
        elif isinstance(value, str) and value.strip()[:1].isdigit():
            # Calendar dates only: pandas would also accept words like "now" and "today".
            ts = pd.Timestamp(value.strip())
        else:
            return None
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        ts = ts.tz_localize(tz, ambiguous=False, nonexistent="shift_forward")
    return ts


def local_midnight(day: date, tz: str) -> pd.Timestamp:
    return pd.Timestamp(day).tz_localize(tz, ambiguous=False, nonexistent="shift_forward")


def _now(tz: str, now: pd.Timestamp | None) -> pd.Timestamp:
    if now is None:
        return pd.Timestamp.now(tz=tz)
    if now.tzinfo is None:
        return now.tz_localize(tz)
    return now.tz_convert(tz)


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive ``[start, end]`` bounds, or a top-``limit`` selection when ``limit`` is set."""

    mode: str
    start: pd.Timestamp | None = None
    end: pd.Timestamp | None = None
    limit: int | None = None

    def contains(self, instant: pd.Timestamp | None) -> bool:
        if instant is None:
            return False
        if self.start is not None and instant < self.start:
            return False
        if self.end is not None and instant > self.end:
            return False
        return True


def exact_day(day: str | date, tz: str) -> TimeWindow:
    """Local calendar day ``[00:00:00.000, 23:59:59.999]``."""
    if isinstance(day, str):
        parsed = parse_instant(day, tz)
        if parsed is None:
            raise InvalidDate(day)
        day = parsed.tz_convert(tz).date()
    # Naive arithmetic on wall time, then localize, keeps DST days right.
    start = local_midnight(day, tz)
    end = (pd.Timestamp(day) + END_OF_DAY).tz_localize(tz, ambiguous=False, nonexistent="shift_forward")
    return TimeWindow("exact_day", start, end)


def date_range(start: str | None, end: str | None, tz: str, now: pd.Timestamp | None = None) -> TimeWindow:
    """Inclusive range; a missing start means the epoch and a missing end means now."""
    lower = EPOCH
    if start:
        lower = parse_instant(start, tz)
        if lower is None:
            raise InvalidDate(start, RANGE_ERROR_MESSAGE)
    if end:
        upper = parse_instant(end, tz)
        if upper is None:
            raise InvalidDate(end, RANGE_ERROR_MESSAGE)
    else:
        upper = _now(tz, now)
    return TimeWindow("range", lower, upper)


def today(tz: str, now: pd.Timestamp | None = None) -> TimeWindow:
    window = exact_day(_now(tz, now).date(), tz)
    return TimeWindow("today", window.start, window.end)


def yesterday(tz: str, now: pd.Timestamp | None = None) -> TimeWindow:
    window = exact_day(_now(tz, now).date() - timedelta(days=1), tz)
    return TimeWindow("yesterday", window.start, window.end)


def weekly(tz: str, now: pd.Timestamp | None = None) -> TimeWindow:
    current = _now(tz, now)
    start = local_midnight(current.date() - timedelta(days=7), tz)
    return TimeWindow("weekly", start, current)


def latest(limit: int = DEFAULT_LATEST_LIMIT) -> TimeWindow:
    return TimeWindow("latest", limit=limit)


def everything() -> TimeWindow:
    return TimeWindow("all")


def from_query(
    day: str | None,
    start: str | None,
    end: str | None,
    tz: str,
    now: pd.Timestamp | None = None,
) -> TimeWindow:
    """Pick the window for the base route. ``date`` wins over ``start``/``end``."""
    if day:
        return exact_day(day, tz)
    if start or end:
        return date_range(start, end, tz, now)
    return everything()


def apply(
    window: TimeWindow,
    events: Iterable[Mapping[str, Any]],
    tz: str,
    timestamp_field: str = "ts",
) -> list[Mapping[str, Any]]:
    """Return the events inside ``window``; the input sequence is left as-is."""
    events = list(events)
    if window.limit is not None:
        return _most_recent(events, window.limit, tz, timestamp_field)
    if window.start is None and window.end is None:
        return events
    return [ev for ev in events if window.contains(parse_instant(ev.get(timestamp_field), tz))]


def _most_recent(
    events: Sequence[Mapping[str, Any]], limit: int, tz: str, timestamp_field: str
) -> list[Mapping[str, Any]]:
    # Stable descending sort: ties keep their upstream order. Unreadable
    # timestamps sink to the bottom.
    def sort_key(ev: Mapping[str, Any]) -> tuple[bool, pd.Timestamp]:
        instant = parse_instant(ev.get(timestamp_field), tz)
        return (instant is not None, instant if instant is not None else EPOCH)

    return sorted(events, key=sort_key, reverse=True)[:limit]
