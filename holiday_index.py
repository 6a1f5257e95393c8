"""Holiday entity and the day -> holidays index used by grid and modals."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Union

from calendar_logic import format_exchange_date, parse_exchange_date

HolidayId = Union[str, int]


@dataclass(frozen=True)
class Holiday:
    """A named annotation on one calendar day; ``id`` is None until stored."""

    date: date
    name: str
    id: HolidayId | None = None

    @classmethod
    def from_wire(cls, payload: Any) -> Holiday:
        """Decode ``{"id", "date": "dd/MM/yyyy", "name"}``; ValueError if malformed."""
        if not isinstance(payload, dict):
            raise ValueError(f"holiday entry must be an object, got {type(payload).__name__}")
        name = payload.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"holiday entry has no name: {payload!r}")
        hid = payload.get("id")
        if hid is None:
            raise ValueError(f"holiday entry has no id: {payload!r}")
        if isinstance(hid, bool) or not isinstance(hid, (str, int)):
            raise ValueError(f"holiday id must be a string or integer: {hid!r}")
        return cls(date=parse_exchange_date(payload.get("date")), name=name, id=hid)

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {"date": format_exchange_date(self.date), "name": self.name}
        if self.id is not None:
            body["id"] = self.id
        return body


class HolidayIndex:
    """Holidays grouped by exact date, input order kept within a day.

    Never patched in place: build a new one with :func:`index_by_day`
    whenever the collection changes.
    """

    __slots__ = ("_by_day", "_size")

    def __init__(self, by_day: dict[date, tuple[Holiday, ...]], size: int) -> None:
        self._by_day = by_day
        self._size = size

    def holidays_on(self, day: date) -> tuple[Holiday, ...]:
        return self._by_day.get(day, ())

    def count_on(self, day: date) -> int:
        return len(self._by_day.get(day, ()))

    def days(self) -> list[date]:
        """Days that carry at least one holiday, ascending."""
        return sorted(self._by_day)

    def ids(self) -> set[HolidayId]:
        return {h.id for hs in self._by_day.values() for h in hs if h.id is not None}

    def __len__(self) -> int:
        return self._size

    def __contains__(self, day: object) -> bool:
        return day in self._by_day

    def __repr__(self) -> str:
        return f"HolidayIndex(days={len(self._by_day)}, holidays={self._size})"


def index_by_day(holidays: Iterable[Holiday]) -> HolidayIndex:
    """Return {date: (holiday, ...)} for the given collection."""
    grouped: dict[date, list[Holiday]] = {}
    size = 0
    for h in holidays:
        grouped.setdefault(h.date, []).append(h)
        size += 1
    return HolidayIndex({d: tuple(hs) for d, hs in grouped.items()}, size)


EMPTY_INDEX = index_by_day(())
