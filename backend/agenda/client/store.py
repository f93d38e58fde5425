"""
In-memory event cache and the read-only projections the views use.

The cache is only ever replaced wholesale from the backend (`refresh`);
every mutation goes to the backend first and is followed by a refresh.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from .dates import DateLike, add_days, parse_iso_date, start_of_week, to_iso_date
from .models import CalendarEvent

if TYPE_CHECKING:
    from .backends import EventBackend

logger = logging.getLogger(__name__)

FILTERS = ("day", "week")


def normalize_events(events: Iterable[CalendarEvent]) -> list[CalendarEvent]:
    """
    Give every event an order.

    If even one event lacks an order, the whole collection is renumbered
    1..n by (date, time); otherwise the stored orders are kept untouched.
    """
    events = list(events)
    if all(e.order is not None for e in events):
        return events
    by_slot = sorted(events, key=lambda e: (e.date, e.time))
    return [dataclasses.replace(e, order=i) for i, e in enumerate(by_slot, start=1)]


def read_events(records: Iterable[Mapping[str, Any]]) -> list[CalendarEvent]:
    """Parse raw records, skipping ones without a usable date."""
    events = []
    for record in records:
        try:
            events.append(CalendarEvent.from_dict(dict(record)))
        except (KeyError, ValueError) as exc:
            logger.warning("Skipping malformed event record: %s", exc)
    return events


def sort_by_order(events: Iterable[CalendarEvent]) -> list[CalendarEvent]:
    return sorted(events, key=lambda e: e.sort_key)


def matches_search(event: CalendarEvent, search: str) -> bool:
    haystack = f"{event.title} {event.location} {' '.join(event.attendees)}".lower()
    return search.lower() in haystack


def filter_events(
    events: Iterable[CalendarEvent],
    filter: str,
    selected_date: DateLike,
    search: str = "",
) -> list[CalendarEvent]:
    """Events visible for a (filter, date, search) triple, in display order."""
    if filter not in FILTERS:
        raise ValueError(f"Unknown filter: {filter!r}")

    if filter == "day":
        selected_iso = to_iso_date(selected_date)
        visible = [e for e in events if e.date == selected_iso]
    else:
        week_start = start_of_week(selected_date)
        week_end = add_days(week_start, 6)
        visible = [e for e in events if week_start <= parse_iso_date(e.date) <= week_end]

    if search:
        visible = [e for e in visible if matches_search(e, search)]
    return sort_by_order(visible)


class EventStore:
    def __init__(self, backend: "EventBackend"):
        self.backend = backend
        self._events: list[CalendarEvent] = []

    def refresh(self) -> list[CalendarEvent]:
        records = self.backend.fetch_all()
        self._events = sort_by_order(normalize_events(read_events(records)))
        logger.debug("Loaded %d events", len(self._events))
        return self.list()

    def list(self) -> list[CalendarEvent]:
        return list(self._events)

    def get(self, event_id: str) -> Optional[CalendarEvent]:
        return next((e for e in self._events if e.id == event_id), None)

    def events_on(self, iso: str) -> list[CalendarEvent]:
        return [e for e in self._events if e.date == iso]

    def dates_with_events(self) -> set[str]:
        return {e.date for e in self._events}

    def visible(self, filter: str, selected_date: DateLike, search: str = "") -> list[CalendarEvent]:
        return filter_events(self._events, filter, selected_date, search)

    def max_order(self) -> int:
        return max((e.order or 0 for e in self._events), default=0)

    def upsert(self, data: Mapping[str, Any]) -> CalendarEvent:
        """Create (no id) or fully replace (with id) an event; updates keep the stored order."""
        payload = dict(data)
        event_id = payload.get("id")
        if event_id:
            existing = self.get(event_id)
            payload["order"] = existing.order if existing else payload.get("order")
            saved = self.backend.update(payload)
            logger.info("Updated event %s", event_id)
        else:
            payload.pop("id", None)
            payload.pop("order", None)
            saved = self.backend.create(payload)
            logger.info("Created event %s", saved.get("id"))
        self.refresh()
        return self.get(str(saved["id"])) or CalendarEvent.from_dict(saved)

    def delete(self, event_id: str) -> None:
        self.backend.delete(event_id)
        logger.info("Deleted event %s", event_id)
        self.refresh()

    def apply_orders(self, orders: Mapping[str, int]) -> None:
        """Local-only order rewrite used for optimistic reordering."""
        self._events = sort_by_order(
            dataclasses.replace(e, order=orders[e.id]) if e.id in orders else e
            for e in self._events
        )
