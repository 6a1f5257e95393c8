"""Pure calendar calculations — no UI dependencies."""

import calendar
import re
from datetime import date, timedelta

DAY_ABBR = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

_EXCHANGE_RE = re.compile(r"([0-9]{2})/([0-9]{2})/([0-9]{4})")


def _check_week_start(week_start: int) -> None:
    if not 0 <= week_start <= 6:
        raise ValueError(f"week_start must be 0 (Mon) .. 6 (Sun), got {week_start!r}")


def build_month_grid(reference_day: date, week_start: int = 0) -> list[date]:
    """Return every day shown for the month containing ``reference_day``.

    The grid starts on the ``week_start`` weekday on/before the 1st and ends
    on the last weekday of that week on/after the month's last day, so its
    length is always a multiple of 7.
    """
    _check_week_start(week_start)
    first = reference_day.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])

    start = first - timedelta(days=(first.weekday() - week_start) % 7)
    end = last + timedelta(days=(week_start + 6 - last.weekday()) % 7)

    days: list[date] = []
    d = start
    while d <= end:
        days.append(d)
        d += timedelta(days=1)
    return days


def weeks(grid: list[date]) -> list[list[date]]:
    """Split a month grid into rows of 7."""
    return [grid[i:i + 7] for i in range(0, len(grid), 7)]


def weekday_headers(week_start: int = 0) -> list[str]:
    """Day abbreviations in grid column order."""
    _check_week_start(week_start)
    return DAY_ABBR[week_start:] + DAY_ABBR[:week_start]


def month_title(day: date) -> str:
    return f"{calendar.month_name[day.month]} {day.year}"


def prev_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) for one month earlier."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def next_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) for one month later."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


def add_months(day: date, delta: int) -> date:
    """Return the 1st of the month ``delta`` months away from ``day``'s month."""
    y, m = day.year, day.month
    step = next_month if delta > 0 else prev_month
    for _ in range(abs(delta)):
        y, m = step(y, m)
    return date(y, m, 1)


# ------------------------------------------------------------------
# Wire representation: dd/MM/yyyy
# ------------------------------------------------------------------

def format_exchange_date(day: date) -> str:
    return f"{day.day:02d}/{day.month:02d}/{day.year:04d}"


def parse_exchange_date(text: str) -> date:
    """Parse ``dd/MM/yyyy`` strictly; raise ValueError on anything else."""
    if not isinstance(text, str):
        raise ValueError(f"expected a dd/MM/yyyy string, got {text!r}")
    m = _EXCHANGE_RE.fullmatch(text)
    if m is None:
        raise ValueError(f"not a dd/MM/yyyy date: {text!r}")
    dd, mm, yyyy = (int(g) for g in m.groups())
    return date(yyyy, mm, dd)
