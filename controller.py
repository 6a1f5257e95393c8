"""Calendar interaction state machine.

``CalendarState`` is an immutable record; every intent produces a new one via
``dataclasses.replace``. Store calls are awaited inside the intent that needs
them, and ``holidays`` (with its index) only ever changes in ``refresh``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable, Union

from calendar_logic import add_months
from holiday_index import EMPTY_INDEX, Holiday, HolidayId, HolidayIndex, index_by_day
from store_client import HolidayStoreClient, TransportError

LOGGER = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised before any store call when the add form is incomplete."""


# ------------------------------------------------------------------
# Modal states
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Closed:
    pass


@dataclass(frozen=True)
class Adding:
    day: date
    draft_name: str = ""
    saving: bool = False


@dataclass(frozen=True)
class Viewing:
    day: date
    holidays: tuple[Holiday, ...]


Modal = Union[Closed, Adding, Viewing]
CLOSED = Closed()


@dataclass(frozen=True)
class CalendarState:
    reference_month: date
    holidays: tuple[Holiday, ...] = ()
    index: HolidayIndex = field(default=EMPTY_INDEX, compare=False)
    active_modal: Modal = CLOSED
    error: str | None = None
    loading: bool = False

    @property
    def pending_name(self) -> str:
        modal = self.active_modal
        return modal.draft_name if isinstance(modal, Adding) else ""


def with_holidays(state: CalendarState, holidays: tuple[Holiday, ...]) -> CalendarState:
    """Replace the collection, rebuild the index and re-snapshot an open view.

    A view whose day no longer has holidays is closed.
    """
    index = index_by_day(holidays)
    modal = state.active_modal
    if isinstance(modal, Viewing):
        on_day = index.holidays_on(modal.day)
        modal = Viewing(modal.day, on_day) if on_day else CLOSED
    return replace(state, holidays=holidays, index=index, active_modal=modal)


Listener = Callable[[CalendarState], None]


class CalendarController:
    """Owns the calendar state and mediates every user intent."""

    def __init__(self, store: HolidayStoreClient, *, today: date | None = None) -> None:
        self._store = store
        self._state = CalendarState(reference_month=today or date.today())
        self._listeners: list[Listener] = []
        self._refresh_issued = 0
        self._refresh_applied = 0
        self._saving = False

    @property
    def state(self) -> CalendarState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: CalendarState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _fail(self, message: str) -> None:
        LOGGER.warning(message)
        self._set_state(replace(self._state, error=message))

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def navigate(self, delta: int) -> None:
        new_ref = add_months(self._state.reference_month, delta)
        self._set_state(replace(self._state, reference_month=new_ref))

    def go_today(self, today: date | None = None) -> None:
        self._set_state(replace(self._state, reference_month=today or date.today()))

    # ------------------------------------------------------------------
    # Add flow
    # ------------------------------------------------------------------
    def open_add(self, day: date) -> None:
        if isinstance(self._state.active_modal, Adding):
            return
        self._set_state(replace(self._state, active_modal=Adding(day), error=None))

    def update_draft(self, name: str) -> None:
        modal = self._state.active_modal
        if isinstance(modal, Adding) and modal.draft_name != name:
            self._set_state(replace(self._state, active_modal=replace(modal, draft_name=name)))

    def cancel_add(self) -> None:
        if isinstance(self._state.active_modal, Adding):
            self._set_state(replace(self._state, active_modal=CLOSED, error=None))

    async def submit_add(self, day: date | None = None, name: str | None = None) -> bool:
        """Create a holiday, refetch, and close the add form.

        Defaults to the open form's day and draft. Returns False (form kept
        open, ``error`` set) on validation or transport failure, and while a
        previous save is still in flight.
        """
        if self._saving:
            return False
        modal = self._state.active_modal
        if isinstance(modal, Adding):
            day = day or modal.day
            name = modal.draft_name if name is None else name
        try:
            day, name = self._validate(day, name)
        except ValidationError as exc:
            self._fail(str(exc))
            return False

        self._saving = True
        try:
            if isinstance(modal, Adding):
                self._set_state(replace(self._state, active_modal=replace(modal, saving=True)))
            try:
                await self._store.create(day, name)
            except TransportError as exc:
                self._mark_saved(close=False)
                self._fail(f"Could not save holiday: {exc}")
                return False

            LOGGER.info("created holiday %r on %s", name, day.isoformat())
            await self.refresh()
            self._mark_saved(close=True)
            return True
        finally:
            self._saving = False

    def _mark_saved(self, close: bool) -> None:
        """Close or re-enable the form that was submitted; other forms are left alone."""
        modal = self._state.active_modal
        if isinstance(modal, Adding) and modal.saving:
            new_modal = CLOSED if close else replace(modal, saving=False)
            self._set_state(replace(self._state, active_modal=new_modal))

    @staticmethod
    def _validate(day: date | None, name: str | None) -> tuple[date, str]:
        if day is None:
            raise ValidationError("No day selected.")
        name = (name or "").strip()
        if not name:
            raise ValidationError("Holiday name must not be empty.")
        return day, name

    # ------------------------------------------------------------------
    # View / delete flow
    # ------------------------------------------------------------------
    def open_view(self, day: date) -> bool:
        """Show the holidays on ``day``; a day without holidays does not open."""
        on_day = self._state.index.holidays_on(day)
        if not on_day or isinstance(self._state.active_modal, Adding):
            return False
        self._set_state(replace(self._state, active_modal=Viewing(day, on_day), error=None))
        return True

    def close_view(self) -> None:
        if isinstance(self._state.active_modal, Viewing):
            self._set_state(replace(self._state, active_modal=CLOSED, error=None))

    async def delete_holiday(self, holiday_id: HolidayId) -> bool:
        try:
            await self._store.delete(holiday_id)
        except TransportError as exc:
            self._fail(f"Could not delete holiday: {exc}")
            return False

        LOGGER.info("deleted holiday %s", holiday_id)
        await self.refresh()
        return True

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------
    async def refresh(self) -> None:
        """Replace ``holidays`` with the store's collection, or empty it on failure.

        Results of a refresh older than one already applied are dropped.
        """
        self._refresh_issued += 1
        ticket = self._refresh_issued
        self._set_state(replace(self._state, loading=True))

        error: str | None = None
        try:
            holidays = tuple(await self._store.list_all())
        except TransportError as exc:
            error = f"Could not load holidays: {exc}"
            holidays = ()

        if ticket < self._refresh_applied:
            LOGGER.debug("discarding stale refresh #%d (applied #%d)", ticket, self._refresh_applied)
            return
        self._refresh_applied = ticket

        new_state = with_holidays(self._state, holidays)
        new_state = replace(
            new_state,
            loading=ticket < self._refresh_issued,
            error=error,
        )
        if error is not None:
            LOGGER.warning(error)
        else:
            LOGGER.debug("refresh #%d applied %d holidays", ticket, len(holidays))
        self._set_state(new_state)

    def dismiss_error(self) -> None:
        if self._state.error is not None:
            self._set_state(replace(self._state, error=None))
