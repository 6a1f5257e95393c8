from __future__ import annotations

import calendar
from datetime import date, timedelta

import pytest

from calendar_logic import (
    add_months,
    build_month_grid,
    format_exchange_date,
    month_title,
    next_month,
    parse_exchange_date,
    prev_month,
    weekday_headers,
    weeks,
)


def _month_days(year: int, month: int) -> list[date]:
    return [date(year, month, d) for d in range(1, calendar.monthrange(year, month)[1] + 1)]


@pytest.mark.parametrize("week_start", range(7))
@pytest.mark.parametrize("year", [2023, 2024, 2026, 2100])
def test_grid_invariants_for_every_month(year: int, week_start: int) -> None:
    for month in range(1, 13):
        grid = build_month_grid(date(year, month, 15), week_start)
        assert len(grid) % 7 == 0
        assert grid[0].weekday() == week_start
        assert grid[-1].weekday() == (week_start + 6) % 7
        # consecutive, no gaps or duplicates
        assert all(b - a == timedelta(days=1) for a, b in zip(grid, grid[1:]))
        # whole month present as a contiguous run
        days = _month_days(year, month)
        start = grid.index(days[0])
        assert grid[start:start + len(days)] == days
        # padding never spans a full week
        assert start < 7
        assert len(grid) - (start + len(days)) < 7


def test_grid_is_the_same_for_any_day_in_the_month() -> None:
    grids = {tuple(build_month_grid(date(2026, 10, d))) for d in (1, 19, 31)}
    assert len(grids) == 1
    assert build_month_grid(date(2026, 10, 19)) == build_month_grid(date(2026, 10, 19))


def test_leap_february_2024() -> None:
    grid = build_month_grid(date(2024, 2, 10))
    assert grid.count(date(2024, 2, 29)) == 1
    tail = grid[grid.index(date(2024, 2, 29)) + 1:]
    assert tail and all((d.year, d.month) == (2024, 3) for d in tail)
    # Monday-start: Jan 29 .. Mar 3
    assert grid[0] == date(2024, 1, 29)
    assert grid[-1] == date(2024, 3, 3)
    assert len(grid) == 35


def test_non_leap_february_has_no_29th() -> None:
    grid = build_month_grid(date(2023, 2, 1))
    assert date(2023, 2, 28) in grid
    assert all(not (d.month == 2 and d.day == 29) for d in grid)


def test_december_rolls_into_next_year() -> None:
    grid = build_month_grid(date(2024, 12, 25), week_start=6)
    assert grid[0] == date(2024, 12, 1)
    assert grid[-1] == date(2025, 1, 4)


def test_month_fitting_exactly_four_weeks() -> None:
    # February 2021 starts on a Monday and has 28 days.
    grid = build_month_grid(date(2021, 2, 14))
    assert grid[0] == date(2021, 2, 1)
    assert len(grid) == 28


def test_invalid_week_start() -> None:
    with pytest.raises(ValueError):
        build_month_grid(date(2024, 1, 1), week_start=7)


def test_weeks_and_headers() -> None:
    rows = weeks(build_month_grid(date(2026, 10, 1)))
    assert all(len(r) == 7 for r in rows)
    assert weekday_headers(0)[0] == "Mon"
    assert weekday_headers(6) == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def test_month_navigation() -> None:
    assert prev_month(2024, 1) == (2023, 12)
    assert next_month(2024, 12) == (2025, 1)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 1)
    assert add_months(date(2024, 1, 31), -1) == date(2023, 12, 1)
    assert add_months(date(2024, 3, 15), 0) == date(2024, 3, 1)
    assert add_months(date(2024, 11, 5), 14) == date(2026, 1, 1)
    assert month_title(date(2026, 10, 19)) == "October 2026"


def test_exchange_format() -> None:
    assert format_exchange_date(date(2024, 12, 25)) == "25/12/2024"
    assert format_exchange_date(date(2024, 3, 5)) == "05/03/2024"
    assert format_exchange_date(date(987, 1, 2)) == "02/01/0987"


def test_exchange_parse_round_trips() -> None:
    for d in build_month_grid(date(2024, 2, 1)):
        assert parse_exchange_date(format_exchange_date(d)) == d
    assert parse_exchange_date("29/02/2024") == date(2024, 2, 29)


@pytest.mark.parametrize(
    "text",
    ["5/3/2024", "2024-03-05", "05/03/24", "29/02/2023", "32/01/2024", "05/13/2024",
     "05/03/2024\n", " 05/03/2024", "", None, 20240305],
)
def test_exchange_parse_rejects(text) -> None:
    with pytest.raises(ValueError):
        parse_exchange_date(text)
