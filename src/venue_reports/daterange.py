"""Inclusive date range filter shared by every query of one aggregation call.

This module provides:

- DateRange: an inclusive [start, end] bound on ``created_at`` (UTC)
- apply_date_range: the single filtering helper used by the store
- Presets and request-parameter parsing used by report views

All queries feeding one aggregation call must receive the same DateRange
instance. Applying it to orders but not to their refunds (or the other way
around) breaks reconciliation between the business and event views.

Examples:
    >>> from venue_reports.daterange import DateRange, preset_date_range
    >>> DateRange.from_bounds("2025-01-01", "2025-01-31").end
    Timestamp('2025-01-31 23:59:59.999999999+0000', tz='UTC')
    >>> preset_date_range("all-time") is None
    True

"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone

import pandas as pd

DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DEFAULT_PRESET = "last-30-days"

PRESET_LABELS = {
    "all-time": "All Time",
    "current-month": "Current Month",
    "last-30-days": "Last 30 Days",
    "last-90-days": "Last 90 Days",
    "last-6-months": "Last 6 Months",
    "ytd": "Year to Date",
    "custom": "Custom Range",
}

# Rolling presets -> days back from today
_ROLLING_DAYS = {
    "last-30-days": 30,
    "last-90-days": 90,
    "last-6-months": 180,
}


def to_utc_timestamp(value: str | date | datetime | pd.Timestamp) -> pd.Timestamp:
    """Convert a bound to a UTC timestamp. Naive values are taken as UTC.

    Raises:
        ValueError: If the value cannot be parsed as a timestamp.

    """
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid date bound {value!r}: {e}") from e
    if ts is pd.NaT:
        raise ValueError(f"Invalid date bound {value!r}")
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def _is_date_only(value: object) -> bool:
    if isinstance(value, date) and not isinstance(value, datetime):
        return True
    return isinstance(value, str) and bool(DATE_ONLY_RE.match(value.strip()))


def _end_of_day(ts: pd.Timestamp) -> pd.Timestamp:
    return ts.normalize() + pd.Timedelta(days=1) - pd.Timedelta(nanoseconds=1)


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] bound on ``created_at``.

    Attributes:
        start: Lower bound (inclusive), UTC.
        end: Upper bound (inclusive), UTC.

    """

    start: pd.Timestamp
    end: pd.Timestamp

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", to_utc_timestamp(self.start))
        object.__setattr__(self, "end", to_utc_timestamp(self.end))
        if self.start > self.end:
            raise ValueError(f"Date range start {self.start} is after end {self.end}")

    @classmethod
    def from_bounds(
        cls,
        start: str | date | datetime | pd.Timestamp,
        end: str | date | datetime | pd.Timestamp,
    ) -> DateRange:
        """Build a range from loosely-typed bounds.

        A date-only ``end`` (``date`` or ``"YYYY-MM-DD"``) covers that whole day.

        Examples:
            >>> r = DateRange.from_bounds("2025-03-01", "2025-03-01")
            >>> r.contains(pd.Series(pd.to_datetime(["2025-03-01T18:30:00Z"]))).tolist()
            [True]

        """
        end_ts = to_utc_timestamp(end)
        if _is_date_only(end):
            end_ts = _end_of_day(end_ts)
        return cls(start=to_utc_timestamp(start), end=end_ts)

    def contains(self, values: pd.Series) -> pd.Series:
        """Boolean mask of values inside the range. Null timestamps never match."""
        return (values >= self.start) & (values <= self.end)


def apply_date_range(
    frame: pd.DataFrame,
    date_range: DateRange | None,
    column: str = "created_at",
) -> pd.DataFrame:
    """Filter ``frame`` to rows whose ``column`` lies inside ``date_range``.

    Args:
        frame: Collection rows with a UTC datetime column.
        date_range: Range to apply, or None for all-time (no filtering).
        column: Timestamp column to filter on.

    Returns:
        The filtered frame (the input itself when date_range is None).

    """
    if date_range is None:
        return frame
    return frame[date_range.contains(frame[column])]


def preset_date_range(preset: str, today: date | None = None) -> DateRange | None:
    """Resolve a named preset into a DateRange ending at the end of ``today``.

    Calendar presets ("current-month", "ytd") start at midnight of the first
    day. Rolling presets start exactly N days before the end of today, i.e. at
    the last instant of the day N days back (30, 90 or 180 days).

    Args:
        preset: One of PRESET_LABELS. "custom" resolves to the default window.
        today: Reference day (UTC). Defaults to the current UTC date.

    Returns:
        The DateRange, or None for "all-time".

    Raises:
        ValueError: If the preset is unknown.

    """
    if preset not in PRESET_LABELS:
        raise ValueError(f"Unknown date range preset '{preset}'. Known: {list(PRESET_LABELS)}")
    if preset == "all-time":
        return None

    if today is None:
        today = datetime.now(timezone.utc).date()
    end = _end_of_day(to_utc_timestamp(today))

    if preset == "current-month":
        start = to_utc_timestamp(today.replace(day=1))
    elif preset == "ytd":
        start = to_utc_timestamp(date(today.year, 1, 1))
    else:
        days = _ROLLING_DAYS.get(preset, _ROLLING_DAYS[DEFAULT_PRESET])
        # last instant of the day N days back
        start = end - pd.Timedelta(days=days)

    return DateRange(start=start, end=end)


def parse_date_range_params(
    params: Mapping[str, str | None],
    today: date | None = None,
) -> DateRange | None:
    """Parse ``preset``/``from``/``to`` request parameters into a DateRange.

    Missing or unrecognized presets mean the default (last 30 days). A
    "custom" preset needs both bounds; without them it falls back to the
    default window.

    Examples:
        >>> parse_date_range_params({"preset": "custom", "from": "2025-01-01", "to": "2025-01-31"})
        DateRange(start=Timestamp('2025-01-01 00:00:00+0000', tz='UTC'), end=Timestamp('2025-01-31 23:59:59.999999999+0000', tz='UTC'))

    """
    preset = params.get("preset") or DEFAULT_PRESET
    if preset not in PRESET_LABELS:
        preset = DEFAULT_PRESET
    start = params.get("from")
    end = params.get("to")

    if preset == "custom" and start and end:
        return DateRange.from_bounds(start, end)

    return preset_date_range(preset, today=today)
