from datetime import date, timedelta

import pytest

from portfolio_evolution.errors import SpanTooLargeError
from portfolio_evolution.sampler import (
    MAX_POINTS,
    build_time_axis,
    day_step_for,
    price_grid,
    price_interval_for,
    snap_to_grid,
)


def test_exactly_ten_years_is_accepted():
    start = date(2014, 1, 1)
    axis = build_time_axis(start, start + timedelta(days=3650))
    assert axis.total_days == 3650
    assert len(axis.points) <= MAX_POINTS + 1


def test_more_than_ten_years_is_rejected():
    start = date(2014, 1, 1)
    with pytest.raises(SpanTooLargeError) as excinfo:
        build_time_axis(start, start + timedelta(days=3651))
    assert excinfo.value.total_days == 3651


def test_reversed_bounds_are_swapped():
    axis = build_time_axis(date(2024, 1, 10), date(2024, 1, 1))
    assert axis.start == date(2024, 1, 1)
    assert axis.end == date(2024, 1, 10)
    assert axis.points[0].on == date(2024, 1, 1)


@pytest.mark.parametrize(
    ("days", "step"),
    [(0, 1), (30, 1), (180, 1), (181, 3), (365, 3), (730, 7), (731, 7), (1500, 14), (3650, 30)],
)
def test_day_step_widens_with_span(days, step):
    assert day_step_for(days) == step


@pytest.mark.parametrize("days", [1, 90, 181, 250, 400, 731, 1200, 2000, 2900, 3650])
def test_point_count_is_bounded(days):
    start = date(2015, 3, 1)
    axis = build_time_axis(start, start + timedelta(days=days))
    assert len(axis.points) <= MAX_POINTS + 1
    dates = [point.on for point in axis.points]
    assert dates == sorted(set(dates))
    assert dates[0] == axis.start
    assert dates[-1] == axis.end


@pytest.mark.parametrize(("days", "interval"), [(30, 1), (180, 1), (181, 3), (365, 3), (366, 7), (730, 7), (731, 14)])
def test_price_interval_thresholds(days, interval):
    assert price_interval_for(days) == interval


def test_daily_labels_without_year():
    axis = build_time_axis(date(2024, 1, 1), date(2024, 1, 3))
    assert [point.label for point in axis.points] == ["01/01", "02/01", "03/01"]
    assert axis.resolution == "1d"
    assert not axis.show_year


def test_labels_include_year_beyond_one_year():
    axis = build_time_axis(date(2022, 1, 1), date(2023, 6, 1))
    assert axis.show_year
    assert axis.points[0].label == "01/01/2022"
    assert axis.points[-1].label == "01/06/2023"


def test_single_day_intraday_sampling():
    axis = build_time_axis(date(2024, 1, 1), date(2024, 1, 1), intraday=True)
    labels = [point.label for point in axis.points]
    assert axis.resolution == "2h"
    assert len(labels) == 13
    assert labels[:3] == ["00:00", "02:00", "04:00"]
    assert labels[-2:] == ["22:00", "24:00"]
    assert axis.points[-1].on == date(2024, 1, 2)
    assert all(point.moment is not None for point in axis.points)


def test_intraday_for_previous_day_window():
    axis = build_time_axis(date(2023, 12, 31), date(2024, 1, 1), intraday=True)
    assert len(axis.points) == 13
    assert axis.points[0].moment.date() == date(2023, 12, 31)
    assert axis.points[-1].label == "24:00"


def test_intraday_ignored_for_multi_day_spans():
    axis = build_time_axis(date(2024, 1, 1), date(2024, 2, 1), intraday=True)
    assert axis.resolution == "1d"


def test_snap_to_grid_rounds_down():
    assert snap_to_grid(date(1970, 1, 15), 7) == date(1970, 1, 15)
    assert snap_to_grid(date(1970, 1, 17), 7) == date(1970, 1, 15)
    assert snap_to_grid(date(2024, 5, 5), 1) == date(2024, 5, 5)


def test_price_grid_covers_range_from_anchor():
    grid = list(price_grid(date(1970, 1, 17), date(1970, 2, 5), 7))
    assert grid == [date(1970, 1, 15), date(1970, 1, 22), date(1970, 1, 29), date(1970, 2, 5)]
