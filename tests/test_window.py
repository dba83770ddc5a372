from datetime import date, datetime, timedelta

import pytest

from errors import InvalidRange
from normalize.models import ActivityRecord, REVIEW
from window.filters import (
    filter_day,
    filter_week,
    filter_range,
    filter_month,
    filter_records,
    week_bounds,
    month_bounds,
    DAY,
    WEEK,
    RANGE,
)


def _rec(rid, day):
    return ActivityRecord(REVIEW, rid, f"pr {rid}", 'Alice', day, 'active')


@pytest.fixture
def records():
    return [
        _rec(1, '2024-03-14'),
        _rec(2, '2024-03-15'),
        _rec(3, '2024-03-11'),
        _rec(4, '2024-03-15'),
        _rec(5, '2024-03-18'),
    ]


def test_filter_day_keeps_exact_matches_in_order(records):
    kept = filter_day(records, '2024-03-15')
    assert [r.id for r in kept] == [2, 4]
    # subset by reference
    assert kept[0] is records[1]
    assert kept[1] is records[3]


def test_week_bounds_midweek():
    period = week_bounds('2024-03-15')
    assert (period.start, period.end, period.label) == ('2024-03-11', '2024-03-17', '2024-W11')


def test_datetime_arguments_use_their_calendar_date(records):
    period = week_bounds(datetime(2024, 3, 11, 10, 0))
    assert (period.start, period.end) == ('2024-03-11', '2024-03-17')
    assert [r.id for r in filter_day(records, datetime(2024, 3, 15, 23, 59))] == [2, 4]
    kept = filter_range(records, datetime(2024, 3, 11, 9, 0), datetime(2024, 3, 14, 18, 0))
    assert [r.id for r in kept] == [1, 3]


def test_week_bounds_sunday_belongs_to_previous_monday():
    period = week_bounds('2024-03-17')
    assert period.start == '2024-03-11'
    assert period.end == '2024-03-17'


@pytest.mark.parametrize('anchor,start,label', [
    ('2024-12-31', '2024-12-30', '2025-W01'),
    ('2021-01-03', '2020-12-28', '2020-W53'),
    ('2026-01-01', '2025-12-29', '2026-W01'),
])
def test_week_label_uses_thursday_year(anchor, start, label):
    period = week_bounds(anchor)
    assert period.start == start
    assert period.label == label


def test_week_span_always_monday_to_sunday():
    d = date(2023, 12, 20)
    for _ in range(40):
        period = week_bounds(d)
        start = date.fromisoformat(period.start)
        end = date.fromisoformat(period.end)
        assert start.isoweekday() == 1
        assert end - start == timedelta(days=6)
        assert start <= d <= end
        d += timedelta(days=1)


def test_filter_week(records):
    kept, period = filter_week(records, '2024-03-13')
    assert [r.id for r in kept] == [1, 2, 3, 4]
    assert period.label == '2024-W11'


def test_filter_range_inclusive(records):
    assert [r.id for r in filter_range(records, '2024-03-14', '2024-03-15')] == [1, 2, 4]


def test_filter_range_rejects_start_after_end(records):
    with pytest.raises(InvalidRange) as exc:
        filter_range(records, '2024-03-16', '2024-03-15')
    assert exc.value.stage == 'filter'


def test_filter_month():
    recs = [_rec(1, '2024-02-29'), _rec(2, '2024-03-01'), _rec(3, '2024-02-01')]
    assert [r.id for r in filter_month(recs, '2024-02')] == [1, 3]
    assert month_bounds('2024-02').end == '2024-02-29'


def test_month_bounds_rejects_garbage():
    with pytest.raises(InvalidRange):
        month_bounds('March')


def test_filter_records_defaults_to_supplied_today(records):
    result = filter_records(records, DAY, today=date(2024, 3, 15))
    assert [r.id for r in result.records] == [2, 4]
    assert result.period.label == '2024-03-15'

    result = filter_records(records, WEEK, today=date(2024, 3, 18))
    assert [r.id for r in result.records] == [5]
    assert result.period.start == '2024-03-18'


def test_filter_records_range_requires_bounds(records):
    with pytest.raises(InvalidRange):
        filter_records(records, RANGE, start='2024-03-01')


def test_filter_records_invalid_date(records):
    with pytest.raises(InvalidRange):
        filter_records(records, DAY, anchor='15/03/2024')


def test_filter_records_unknown_mode(records):
    with pytest.raises(InvalidRange):
        filter_records(records, 'quarter')
