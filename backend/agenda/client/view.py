"""
View controller: application state plus the pure derivation of what to show.

`AppState` is immutable; every transition builds a new one and the
controller keeps the latest. `render()` turns (state, store) into a
`ViewModel` the UI layer draws as it likes.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Mapping, Optional, Sequence

from .dates import (
    DAY_LABELS, CalendarCell, DateLike, add_days, add_months, as_date,
    first_of_month, format_date_parts, format_month_title, format_week_title,
    month_grid, parse_iso_date, to_iso_date, week_strip,
)
from .models import PRIORITY_LABELS, CalendarEvent
from .reorder import ReorderEngine
from .store import FILTERS, EventStore

CALENDAR_VIEWS = ("month", "week")
EMPTY_MESSAGE = "Sem eventos para este filtro."
MAX_AVATARS = 3


@dataclass(frozen=True)
class AppState:
    selected_date: date
    current_month: date
    filter: str = "day"
    calendar_view: str = "month"
    search: str = ""

    @classmethod
    def initial(cls, today: DateLike) -> "AppState":
        today = as_date(today)
        return cls(selected_date=today, current_month=first_of_month(today))


@dataclass(frozen=True)
class EventCard:
    id: str
    title: str
    day: str
    month: str
    time: str
    location: str
    priority: str
    priority_label: str
    avatars: tuple[str, ...]
    overflow: Optional[str] = None


@dataclass(frozen=True)
class CalendarPanel:
    kind: str
    title: str
    header_labels: tuple[str, ...]
    cells: tuple[CalendarCell, ...]


@dataclass(frozen=True)
class ViewModel:
    calendar: CalendarPanel
    events: tuple[EventCard, ...] = field(default_factory=tuple)
    empty_message: Optional[str] = None


def event_card(event: CalendarEvent) -> EventCard:
    day, month = format_date_parts(event.date)
    extra = len(event.attendees) - MAX_AVATARS
    return EventCard(
        id=event.id,
        title=event.title,
        day=day,
        month=month,
        time=event.time,
        location=event.location,
        priority=event.priority,
        priority_label=PRIORITY_LABELS.get(event.priority, event.priority),
        avatars=tuple(event.attendees[:MAX_AVATARS]),
        overflow=f"+{extra}" if extra > 0 else None,
    )


def parse_attendees(text: str) -> list[str]:
    """'ana, bruno' -> ['AN', 'BR']."""
    return [item.strip()[:2].upper() for item in text.split(",") if item.strip()]


def render(state: AppState, store: EventStore, today: DateLike) -> ViewModel:
    event_dates = store.dates_with_events()
    if state.calendar_view == "month":
        calendar = CalendarPanel(
            kind="month",
            title=format_month_title(state.current_month),
            header_labels=DAY_LABELS,
            cells=tuple(month_grid(state.current_month, state.selected_date, today, event_dates)),
        )
    else:
        calendar = CalendarPanel(
            kind="week",
            title=format_week_title(state.selected_date),
            header_labels=(),
            cells=tuple(week_strip(state.selected_date, today, event_dates)),
        )

    visible = store.visible(state.filter, state.selected_date, state.search)
    if not visible:
        return ViewModel(calendar=calendar, empty_message=EMPTY_MESSAGE)
    return ViewModel(calendar=calendar, events=tuple(event_card(e) for e in visible))


class ViewController:
    """Owns the AppState and runs every UI transition against the store."""

    def __init__(self, store: EventStore, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today
        self.state = AppState.initial(today())
        self.reorder_engine = ReorderEngine(store)

    def _set(self, **changes) -> AppState:
        self.state = dataclasses.replace(self.state, **changes)
        return self.state

    def load(self) -> ViewModel:
        self.store.refresh()
        return self.render()

    def render(self) -> ViewModel:
        return render(self.state, self.store, self.today())

    # ── selection & filters ──
    def select_date(self, value: DateLike) -> AppState:
        """Calendar cell or week-day click: that day, filtered to 'day'."""
        selected = as_date(value)
        return self._set(selected_date=selected, current_month=first_of_month(selected), filter="day")

    def select_iso(self, iso: str) -> AppState:
        return self.select_date(parse_iso_date(iso))

    def set_filter(self, value: str) -> AppState:
        if value not in FILTERS:
            raise ValueError(f"Unknown filter: {value!r}")
        return self._set(filter=value)

    def set_calendar_view(self, value: str) -> AppState:
        if value not in CALENDAR_VIEWS:
            raise ValueError(f"Unknown calendar view: {value!r}")
        return self._set(calendar_view=value)

    def set_search(self, text: str) -> AppState:
        return self._set(search=text.strip())

    # ── navigation ──
    def _step(self, direction: int) -> AppState:
        if self.state.calendar_view == "month":
            return self._set(current_month=add_months(self.state.current_month, direction))
        selected = add_days(self.state.selected_date, 7 * direction)
        return self._set(selected_date=selected, current_month=first_of_month(selected))

    def previous(self) -> AppState:
        return self._step(-1)

    def next(self) -> AppState:
        return self._step(1)

    # ── mutations ──
    def new_event_draft(self) -> dict[str, Any]:
        return {
            "id": "",
            "title": "",
            "date": to_iso_date(self.state.selected_date),
            "time": "09:00",
            "priority": "media",
            "location": "",
            "attendees": [],
        }

    def save_event(self, form: Mapping[str, Any]) -> CalendarEvent:
        data = dict(form)
        if isinstance(data.get("attendees"), str):
            data["attendees"] = parse_attendees(data["attendees"])
        data["title"] = str(data.get("title") or "").strip()
        data["location"] = str(data.get("location") or "").strip()
        saved = self.store.upsert(data)
        self.select_date(parse_iso_date(saved.date))
        return saved

    def delete_event(self, event_id: str) -> None:
        if not event_id:
            return
        self.store.delete(event_id)

    def reorder(self, visible_ids: Sequence[str]) -> dict[str, int]:
        return self.reorder_engine.reorder(visible_ids)
