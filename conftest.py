from __future__ import annotations

import itertools
from datetime import date

import pytest

from holiday_index import Holiday, HolidayId
from store_client import TransportError


class FakeHolidayStore:
    """In-memory HolidayStoreClient recording every call."""

    def __init__(self, holidays: list[Holiday] | None = None) -> None:
        self.holidays: list[Holiday] = list(holidays or [])
        self.calls: list[tuple] = []
        self.fail_list = False
        self.fail_create = False
        self.fail_delete = False
        self._ids = itertools.count(100)

    async def list_all(self) -> list[Holiday]:
        self.calls.append(("list_all",))
        if self.fail_list:
            raise TransportError("GET /holidays returned HTTP 500", status=500)
        return list(self.holidays)

    async def create(self, day: date, name: str) -> None:
        self.calls.append(("create", day, name))
        if self.fail_create:
            raise TransportError("POST /holidays failed: connection refused")
        self.holidays.append(Holiday(date=day, name=name, id=str(next(self._ids))))

    async def delete(self, holiday_id: HolidayId) -> None:
        self.calls.append(("delete", holiday_id))
        if self.fail_delete:
            raise TransportError("DELETE /holidays returned HTTP 500", status=500)
        self.holidays = [h for h in self.holidays if h.id != holiday_id]

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def christmas() -> Holiday:
    return Holiday(date=date(2024, 12, 25), name="Christmas", id=1)


@pytest.fixture
def store() -> FakeHolidayStore:
    return FakeHolidayStore()


@pytest.fixture
def settings_path(tmp_path, monkeypatch):
    import settings

    path = tmp_path / "settings.json"
    monkeypatch.setattr(settings, "_SETTINGS_PATH", str(path))
    return path
