"""Remote holiday store: the list/create/delete contract and its HTTP client."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Protocol
from urllib.parse import quote, urlparse

import requests
from requests import Response
from requests.exceptions import RequestException

from holiday_index import Holiday, HolidayId

LOGGER = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10.0


class TransportError(RuntimeError):
    """Network failure, timeout, non-2xx status or malformed payload."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class HolidayStoreClient(Protocol):
    async def list_all(self) -> list[Holiday]: ...

    async def create(self, day: date, name: str) -> None: ...

    async def delete(self, holiday_id: HolidayId) -> None: ...


class HttpHolidayStore:
    """HolidayStoreClient over the ``/holidays`` JSON endpoints.

    ``requests`` is blocking, so each call runs on the loop's default
    executor; only the awaiting coroutine is suspended. No retries.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        parsed = urlparse(self._base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid holiday store URL: {base_url!r}")
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    # Public API ---------------------------------------------------------

    async def list_all(self) -> list[Holiday]:
        response = await asyncio.to_thread(self._request, "GET", "/holidays")
        return self._decode_list(response)

    async def create(self, day: date, name: str) -> None:
        body = Holiday(date=day, name=name).to_wire()
        await asyncio.to_thread(self._request, "POST", "/holidays", body)

    async def delete(self, holiday_id: HolidayId) -> None:
        path = f"/holidays/{quote(str(holiday_id), safe='')}"
        await asyncio.to_thread(self._request, "DELETE", path)

    def close(self) -> None:
        self._session.close()

    # Internal helpers ---------------------------------------------------

    def _request(self, method: str, path: str, json_body: Any = None) -> Response:
        url = f"{self._base_url}{path}"
        headers = {"Content-Type": "application/json"} if json_body is not None else None
        try:
            response = self._session.request(
                method, url, json=json_body, headers=headers, timeout=self._timeout,
            )
        except RequestException as exc:
            LOGGER.warning("holiday store %s %s failed: %s", method, path, exc)
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            LOGGER.warning("holiday store %s %s -> HTTP %s", method, path, response.status_code)
            detail = response.text.strip()[:200]
            message = f"{method} {path} returned HTTP {response.status_code}"
            if detail:
                message = f"{message}: {detail}"
            raise TransportError(message, status=response.status_code)

        LOGGER.debug("holiday store %s %s -> HTTP %s", method, path, response.status_code)
        return response

    @staticmethod
    def _decode_list(response: Response) -> list[Holiday]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError(f"GET /holidays returned invalid JSON: {exc}") from exc
        # An empty collection may be encoded as null.
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise TransportError(
                f"GET /holidays returned {type(payload).__name__}, expected a list")
        try:
            return [Holiday.from_wire(entry) for entry in payload]
        except ValueError as exc:
            raise TransportError(f"GET /holidays returned a malformed holiday: {exc}") from exc
