"""
Temporal filters: keep the records whose activity date falls in a day, ISO week, month or explicit range.
Comparisons are lexical on YYYY-MM-DD strings, which orders the same as the calendar.
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple, Union

from errors import InvalidRange
from normalize.models import ActivityRecord
from normalize.util import is_calendar_date

logger = logging.getLogger(__name__)

DAY = 'day'
WEEK = 'week'
RANGE = 'range'
MONTH = 'month'

MODES = (DAY, WEEK, RANGE, MONTH)

DateLike = Union[str, date]


class Period:
    """Resolved time window for display: inclusive bounds plus a label."""

    def __init__(self, mode: str, start: str, end: str, label: str):
        self.mode = mode
        self.start = start
        self.end = end
        self.label = label

    def __eq__(self, other):
        if not isinstance(other, Period):
            return NotImplemented
        return (self.mode, self.start, self.end, self.label) == (other.mode, other.start, other.end, other.label)

    def __repr__(self):
        return f"Period({self.mode!r}, {self.start!r}, {self.end!r}, {self.label!r})"

    def to_dict(self) -> dict:
        return {'mode': self.mode, 'start': self.start, 'end': self.end, 'label': self.label}


class FilterResult:
    def __init__(self, records: List[ActivityRecord], period: Period):
        self.records = records
        self.period = period


def _as_date(value: DateLike, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not is_calendar_date(value):
        raise InvalidRange(f"{name} is not a YYYY-MM-DD date: {value!r}")
    return date.fromisoformat(value)


def _as_iso(value: DateLike, name: str) -> str:
    return _as_date(value, name).isoformat()


def _in_range(records: List[ActivityRecord], start: str, end: str) -> List[ActivityRecord]:
    return [r for r in records if start <= r.activity_date <= end]


def filter_day(records: List[ActivityRecord], day: Optional[DateLike] = None) -> List[ActivityRecord]:
    """Keep records dated exactly on the given day (default: today, local calendar)."""
    target = _as_iso(day if day is not None else date.today(), 'day')
    return [r for r in records if r.activity_date == target]


def week_bounds(anchor: DateLike) -> Period:
    """Return the Monday-Sunday week containing anchor.

    Sunday is the last day of the week that started the previous Monday. The label is
    YYYY-Www using the ISO year, i.e. the year of the week's Thursday.
    """
    d = _as_date(anchor, 'anchor')
    iso_year, iso_week, iso_weekday = d.isocalendar()[:3]
    monday = d - timedelta(days=iso_weekday - 1)
    sunday = monday + timedelta(days=6)
    return Period(WEEK, monday.isoformat(), sunday.isoformat(), f"{iso_year}-W{iso_week:02d}")


def filter_week(records: List[ActivityRecord], anchor: Optional[DateLike] = None) -> Tuple[List[ActivityRecord], Period]:
    period = week_bounds(anchor if anchor is not None else date.today())
    return _in_range(records, period.start, period.end), period


def filter_range(records: List[ActivityRecord], start: DateLike, end: DateLike) -> List[ActivityRecord]:
    """Keep records with start <= activity_date <= end. Raises InvalidRange when start > end."""
    start_s = _as_iso(start, 'start')
    end_s = _as_iso(end, 'end')
    if start_s > end_s:
        raise InvalidRange(f"start {start_s} is after end {end_s}")
    return _in_range(records, start_s, end_s)


def month_bounds(month: str) -> Period:
    """Resolve a YYYY-MM month into its first and last day."""
    try:
        first = _as_date(f"{month}-01", 'month')
    except InvalidRange:
        raise InvalidRange(f"month is not YYYY-MM: {month!r}")
    next_first = (first.replace(day=28) + timedelta(days=4)).replace(day=1)
    last = next_first - timedelta(days=1)
    return Period(MONTH, first.isoformat(), last.isoformat(), month)


def filter_month(records: List[ActivityRecord], month: str) -> List[ActivityRecord]:
    period = month_bounds(month)
    return _in_range(records, period.start, period.end)


def filter_records(
    records: List[ActivityRecord],
    mode: str,
    anchor: Optional[DateLike] = None,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    month: Optional[str] = None,
    today: Optional[date] = None,
) -> FilterResult:
    """Single entry point for every window mode.

    today is the clock reading taken once by the caller; it is the default anchor for
    day and week modes.
    """
    today = today or date.today()
    if mode == DAY:
        day = _as_iso(anchor if anchor is not None else today, 'day')
        result = FilterResult(filter_day(records, day), Period(DAY, day, day, day))
    elif mode == WEEK:
        kept, period = filter_week(records, anchor if anchor is not None else today)
        result = FilterResult(kept, period)
    elif mode == RANGE:
        if start is None or end is None:
            raise InvalidRange("range mode requires both start and end")
        kept = filter_range(records, start, end)
        start_s, end_s = _as_iso(start, 'start'), _as_iso(end, 'end')
        result = FilterResult(kept, Period(RANGE, start_s, end_s, f"{start_s} to {end_s}"))
    elif mode == MONTH:
        if not month:
            raise InvalidRange("month mode requires a YYYY-MM month")
        period = month_bounds(month)
        result = FilterResult(_in_range(records, period.start, period.end), period)
    else:
        raise InvalidRange(f"Unknown window mode: {mode}")
    logger.debug("Window %s kept %d of %d records", result.period.label, len(result.records), len(records))
    return result
