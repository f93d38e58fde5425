"""
Drag-and-drop reordering.

The rows the user can see are permuted among the order values they already
held (their "slots"), so events outside the visible subset keep their place
in the global sequence and no order value is ever invented.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..errors import UnknownEventError
from .models import CalendarEvent
from .store import EventStore

logger = logging.getLogger(__name__)


def assign_slots(events: Iterable[CalendarEvent], visible_ids: Sequence[str]) -> dict[str, int]:
    """
    Map each id in `visible_ids` (new on-screen sequence) to its new order.

    The existing orders of exactly those ids, sorted ascending, form the slot
    pool; slot i goes to the id at position i. Ids that are unknown, appear
    twice or have no order are rejected rather than guessed.
    """
    if not visible_ids:
        return {}

    by_id = {e.id: e for e in events}
    missing = [i for i in visible_ids if i not in by_id or by_id[i].order is None]
    if missing:
        raise UnknownEventError(missing)
    if len(set(visible_ids)) != len(visible_ids):
        raise ValueError("Each visible event may appear only once in a reorder")

    slots = sorted(by_id[i].order for i in visible_ids)
    return dict(zip(visible_ids, slots))


class ReorderEngine:
    """Optimistic local reorder, confirmed by the backend, then a full refresh."""

    def __init__(self, store: EventStore):
        self.store = store

    def reorder(self, visible_ids: Sequence[str]) -> dict[str, int]:
        visible_ids = list(visible_ids)
        if not visible_ids:
            return {}

        events = self.store.list()
        updates = assign_slots(events, visible_ids)
        previous = {e.id: e.order for e in events if e.id in updates}

        self.store.apply_orders(updates)
        try:
            self.store.backend.reorder(updates)
        except Exception:
            logger.warning("Reorder of %d events failed, restoring previous order", len(updates))
            self.store.apply_orders(previous)
            raise

        self.store.refresh()
        logger.info("Reordered %d events", len(updates))
        return updates
