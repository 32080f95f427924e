"""
Tests for `domain/time_buckets.py`.

Covers:
- The last period's level always equals the current total.
- Earlier levels undo later net changes and are clamped at zero.
- Periods are Monday-anchored weeks (or half months), oldest first.
- Records with unparseable dates are left out of every period.
"""

from __future__ import annotations

from datetime import date

from domain.time_buckets import (
    count_unplaced,
    half_month_start,
    half_monthly_levels,
    next_half_month_start,
    previous_half_month_start,
    reconstruct_levels,
    weekly_levels,
)


def test_window_is_monday_anchored_and_oldest_first() -> None:
    buckets = weekly_levels([], [], current_total=5, window_weeks=3, anchor=date(2025, 1, 22))

    assert [b.start for b in buckets] == [date(2025, 1, 6), date(2025, 1, 13), date(2025, 1, 20)]
    assert [b.end for b in buckets] == [date(2025, 1, 13), date(2025, 1, 20), date(2025, 1, 27)]
    assert [b.label for b in buckets] == ["01/06", "01/13", "01/20"]


def test_no_events_keeps_every_level_at_current_total() -> None:
    buckets = weekly_levels([], [], current_total=5, window_weeks=3, anchor=date(2025, 1, 20))

    assert [b.level for b in buckets] == [5, 5, 5]


def test_levels_undo_later_net_changes() -> None:
    arrivals = [
        {"receivedAt": "2025-01-14"},
        {"receivedAt": "2025-01-13"},
        {"receivedAt": "2025-01-07"},
    ]
    departures = [
        {"handoverAt": "2025-01-08"},
        {"handoverAt": "2025-01-09"},
        {"handoverAt": "2025-01-10"},
    ]

    buckets = weekly_levels(arrivals, departures, current_total=5, window_weeks=3, anchor=date(2025, 1, 15))

    # Weeks: 12/30, 01/06, 01/13. Net changes: 0, 1 - 3 = -2, +2.
    assert [b.net_change for b in buckets] == [0, -2, 2]
    assert [b.level for b in buckets] == [5, 3, 5]
    assert buckets[-1].level == 5


def test_levels_are_clamped_at_zero() -> None:
    arrivals = [{"receivedAt": "2025-01-20"}, {"receivedAt": "2025-01-21"}, {"receivedAt": "2025-01-22"}]

    buckets = weekly_levels(arrivals, [], current_total=1, window_weeks=3, anchor=date(2025, 1, 22))

    assert [b.level for b in buckets] == [0, 0, 1]


def test_departures_fall_back_to_created_at() -> None:
    departures = [{"createdAt": "2025-01-21"}, {"handoverAt": None, "createdAt": "21/01/2025"}]

    buckets = weekly_levels([], departures, current_total=2, window_weeks=2, anchor=date(2025, 1, 22))

    assert buckets[-1].departures == 2
    assert [b.level for b in buckets] == [4, 2]


def test_unparseable_and_out_of_window_records_are_ignored() -> None:
    arrivals = [
        {"receivedAt": "garbage"},
        {"receivedAt": None},
        {"receivedAt": "2024-06-01"},
        {"receivedAt": "2025-02-01"},
        {"receivedAt": "2025-01-21"},
    ]

    buckets = weekly_levels(arrivals, [], current_total=3, window_weeks=2, anchor=date(2025, 1, 22))

    assert [b.arrivals for b in buckets] == [0, 1]
    assert count_unplaced(arrivals, ("receivedAt",)) == 2


def test_attribute_records_are_supported() -> None:
    class Entry:
        def __init__(self, received_at):
            self.received_at = received_at

    buckets = weekly_levels(
        [Entry("2025-01-21")],
        [],
        current_total=1,
        window_weeks=2,
        anchor=date(2025, 1, 22),
        arrival_fields=("received_at",),
    )

    assert [b.level for b in buckets] == [0, 1]


def test_non_positive_window_is_empty() -> None:
    assert weekly_levels([], [], current_total=3, window_weeks=0, anchor=date(2025, 1, 22)) == []


def test_reconstruct_levels() -> None:
    assert reconstruct_levels([1, 2, 3], 10) == [5, 7, 10]
    assert reconstruct_levels([], 10) == []


def test_half_month_boundaries() -> None:
    assert half_month_start(date(2025, 3, 14)) == date(2025, 3, 1)
    assert half_month_start(date(2025, 3, 15)) == date(2025, 3, 15)
    assert next_half_month_start(date(2025, 3, 1)) == date(2025, 3, 15)
    assert next_half_month_start(date(2025, 12, 15)) == date(2026, 1, 1)
    assert previous_half_month_start(date(2025, 3, 15)) == date(2025, 3, 1)
    assert previous_half_month_start(date(2025, 1, 1)) == date(2024, 12, 15)


def test_half_monthly_levels() -> None:
    arrivals = [{"receivedAt": "2025-03-16"}, {"receivedAt": "2025-03-02"}]

    buckets = half_monthly_levels(arrivals, [], current_total=4, window_periods=3, anchor=date(2025, 3, 20))

    assert [b.start for b in buckets] == [date(2025, 2, 15), date(2025, 3, 1), date(2025, 3, 15)]
    assert [b.level for b in buckets] == [2, 3, 4]


def test_three_week_window_with_arrivals_and_a_departure() -> None:
    arrivals = [{"receivedAt": "2025-01-01"}, {"receivedAt": "2025-01-10"}]
    departures = [{"handoverAt": "2025-01-08"}]

    buckets = weekly_levels(arrivals, departures, current_total=5, window_weeks=3, anchor=date(2025, 1, 20))

    # 2025-01-01 falls in the week of 12/30, before the window.
    assert [b.start for b in buckets] == [date(2025, 1, 6), date(2025, 1, 13), date(2025, 1, 20)]
    assert [b.arrivals for b in buckets] == [1, 0, 0]
    assert [b.departures for b in buckets] == [1, 0, 0]
    assert [b.net_change for b in buckets] == [0, 0, 0]
    assert [b.level for b in buckets] == [5, 5, 5]
    for earlier, later in zip(buckets, buckets[1:]):
        assert later.level - earlier.level == later.net_change
    assert all(b.level >= 0 for b in buckets)


def test_placeholder_and_empty_dates_are_excluded() -> None:
    arrivals = [{"receivedAt": "DD/MM/YYYY"}, {"receivedAt": ""}, {"receivedAt": "2025-01-21"}]
    departures = [{"handoverAt": "DD/MM/YYYY"}, {"handoverAt": ""}]

    buckets = weekly_levels(arrivals, departures, current_total=1, window_weeks=2, anchor=date(2025, 1, 22))

    assert sum(b.arrivals for b in buckets) == 1
    assert sum(b.departures for b in buckets) == 0
    assert [b.level for b in buckets] == [0, 1]
    assert count_unplaced(arrivals, ("receivedAt",)) == 2
    assert count_unplaced(departures, ("handoverAt", "createdAt")) == 2


def test_out_of_range_dates_do_not_raise() -> None:
    arrivals = [{"receivedAt": "1/1/99999999999"}, {"receivedAt": "9999-12-31T23:00:00-05:00"}]

    buckets = weekly_levels(arrivals, [], current_total=1, window_weeks=2, anchor=date(2025, 1, 22))

    assert [b.level for b in buckets] == [1, 1]
    assert count_unplaced(arrivals, ("receivedAt",)) == 2
