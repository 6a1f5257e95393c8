from __future__ import annotations

from datetime import date

import pytest
import requests
import requests_mock

from holiday_index import Holiday
from store_client import HttpHolidayStore, TransportError

BASE = "http://store.test:8080"


@pytest.fixture
def client() -> HttpHolidayStore:
    return HttpHolidayStore(BASE + "/", session=requests.Session(), timeout=2.0)


@pytest.mark.asyncio
async def test_list_all_decodes_holidays(client: HttpHolidayStore) -> None:
    with requests_mock.Mocker() as mocker:
        mocker.get(f"{BASE}/holidays", json=[
            {"id": 1, "date": "25/12/2024", "name": "Christmas"},
            {"id": "abc", "date": "26/12/2024", "name": "Boxing Day"},
        ])
        holidays = await client.list_all()
    assert holidays == [
        Holiday(date(2024, 12, 25), "Christmas", 1),
        Holiday(date(2024, 12, 26), "Boxing Day", "abc"),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["[]", "null"])
async def test_list_all_empty(client: HttpHolidayStore, body: str) -> None:
    with requests_mock.Mocker() as mocker:
        mocker.get(f"{BASE}/holidays", text=body)
        assert await client.list_all() == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"status_code": 500, "text": "Error fetching holidays"},
        {"status_code": 404},
        {"text": "not json"},
        {"json": {"holidays": []}},
        {"json": [{"id": 1, "date": "2024-12-25", "name": "Christmas"}]},
        {"json": [{"date": "25/12/2024", "name": "Christmas"}]},
    ],
)
async def test_list_all_failures_raise_transport_error(client: HttpHolidayStore, kwargs) -> None:
    with requests_mock.Mocker() as mocker:
        mocker.get(f"{BASE}/holidays", **kwargs)
        with pytest.raises(TransportError):
            await client.list_all()


@pytest.mark.asyncio
async def test_status_is_carried(client: HttpHolidayStore) -> None:
    with requests_mock.Mocker() as mocker:
        mocker.get(f"{BASE}/holidays", status_code=503)
        with pytest.raises(TransportError) as info:
            await client.list_all()
    assert info.value.status == 503


@pytest.mark.asyncio
async def test_network_errors_and_timeouts(client: HttpHolidayStore) -> None:
    with requests_mock.Mocker() as mocker:
        mocker.get(f"{BASE}/holidays", exc=requests.exceptions.ConnectTimeout)
        mocker.delete(f"{BASE}/holidays/1", exc=requests.exceptions.ConnectionError)
        with pytest.raises(TransportError):
            await client.list_all()
        with pytest.raises(TransportError):
            await client.delete(1)


@pytest.mark.asyncio
async def test_create_posts_exchange_payload(client: HttpHolidayStore) -> None:
    with requests_mock.Mocker() as mocker:
        mocker.post(f"{BASE}/holidays", json={"InsertedID": "65f0"})
        await client.create(date(2024, 3, 5), "Test")
        request = mocker.request_history[0]
    assert request.method == "POST"
    assert request.json() == {"date": "05/03/2024", "name": "Test"}
    assert request.headers["Content-Type"] == "application/json"
    assert request.timeout == 2.0


@pytest.mark.asyncio
async def test_create_rejected(client: HttpHolidayStore) -> None:
    with requests_mock.Mocker() as mocker:
        mocker.post(f"{BASE}/holidays", status_code=400, text="Error decoding request")
        with pytest.raises(TransportError, match="HTTP 400"):
            await client.create(date(2024, 3, 5), "Test")


@pytest.mark.asyncio
async def test_delete_uses_id_in_path(client: HttpHolidayStore) -> None:
    with requests_mock.Mocker() as mocker:
        mocker.delete(f"{BASE}/holidays/65f0c0ffee", json={"DeletedCount": 1})
        await client.delete("65f0c0ffee")
        assert mocker.call_count == 1
        assert mocker.request_history[0].method == "DELETE"


@pytest.mark.asyncio
async def test_delete_rejected(client: HttpHolidayStore) -> None:
    with requests_mock.Mocker() as mocker:
        mocker.delete(f"{BASE}/holidays/bogus", status_code=400, text="Invalid ID")
        with pytest.raises(TransportError):
            await client.delete("bogus")


def test_base_url_is_validated() -> None:
    with pytest.raises(ValueError):
        HttpHolidayStore("localhost:8080")
    assert HttpHolidayStore("https://example.org/api/").base_url == "https://example.org/api"
