"""
Persistence capabilities for the event store.

`LocalEventBackend` keeps everything in a JSON file on this machine;
`RemoteEventBackend` talks to the agenda API. Both expose the same five
operations so `EventStore` does not care which one it was given.
"""
from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from ..errors import ConfigurationError, UnknownEventError
from .api import ApiClient
from .models import CalendarEvent
from .store import normalize_events, read_events

logger = logging.getLogger(__name__)

DEFAULT_EVENTS = (
    {
        "title": "Treino",
        "date": "2026-02-17",
        "time": "08:30",
        "location": "Academia Green Fit",
        "priority": "alta",
        "attendees": ["GM"],
    },
    {
        "title": "Reunião com o time",
        "date": "2026-02-22",
        "time": "09:45",
        "location": "Escritório Green Leaf",
        "priority": "media",
        "attendees": ["J", "B"],
    },
    {
        "title": "Almoço com Stephanie",
        "date": "2026-02-27",
        "time": "13:00",
        "location": "Café Mallota",
        "priority": "baixa",
        "attendees": ["S"],
    },
)


class EventBackend(Protocol):
    def fetch_all(self) -> list[dict[str, Any]]: ...

    def create(self, data: dict[str, Any]) -> dict[str, Any]: ...

    def update(self, data: dict[str, Any]) -> dict[str, Any]: ...

    def delete(self, event_id: str) -> None: ...

    def reorder(self, updates: dict[str, int]) -> None: ...


class LocalEventBackend:
    """JSON-file store, seeded with a few sample events on first load."""

    def __init__(self, path: Union[str, Path, None] = None, seed: bool = True):
        self.path = Path(path) if path is not None else None
        self.seed = seed
        self._records: Optional[list[dict[str, Any]]] = None

    def _load(self) -> list[dict[str, Any]]:
        if self._records is None:
            if self.path is not None and self.path.exists():
                self._records = json.loads(self.path.read_text(encoding="utf-8"))
                self._persist_orders()
            else:
                self._records = self._seeded() if self.seed else []
                logger.info("Started local event store with %d events", len(self._records))
                self._save()
        return self._records

    def _persist_orders(self) -> None:
        """Write back the orders normalization gives a file with unordered events."""
        events = read_events(self._records)
        if all(e.order is not None for e in events):
            return
        orders = {e.id: e.order for e in normalize_events(events)}
        for record in self._records:
            if str(record.get("id")) in orders:
                record["order"] = orders[str(record["id"])]
        logger.info("Assigned orders to %d stored events", len(orders))
        self._save()

    def _seeded(self) -> list[dict[str, Any]]:
        events = [CalendarEvent.from_dict({"id": str(uuid.uuid4()), **e}) for e in DEFAULT_EVENTS]
        return [e.to_dict() for e in normalize_events(events)]

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.write_text(json.dumps(self._records, ensure_ascii=False, indent=2), encoding="utf-8")

    def _find(self, event_id: str) -> Optional[dict[str, Any]]:
        return next((r for r in self._load() if r.get("id") == event_id), None)

    def fetch_all(self) -> list[dict[str, Any]]:
        return [dict(r) for r in self._load()]

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        records = self._load()
        record = dict(data)
        record["id"] = record.get("id") or str(uuid.uuid4())
        if not isinstance(record.get("order"), int) or isinstance(record.get("order"), bool):
            orders = [r["order"] for r in records if isinstance(r.get("order"), int)]
            record["order"] = max(orders, default=0) + 1
        CalendarEvent.from_dict(record)
        records.append(record)
        self._save()
        return dict(record)

    def update(self, data: dict[str, Any]) -> dict[str, Any]:
        existing = self._find(data["id"])
        if existing is None:
            raise UnknownEventError([data["id"]])
        order = data.get("order")
        CalendarEvent.from_dict({**existing, **data})
        existing.update({k: v for k, v in data.items() if k != "order"})
        if order is not None:
            existing["order"] = order
        self._save()
        return dict(existing)

    def delete(self, event_id: str) -> None:
        records = self._load()
        records[:] = [r for r in records if r.get("id") != event_id]
        self._save()

    def reorder(self, updates: dict[str, int]) -> None:
        missing = [i for i in updates if self._find(i) is None]
        if missing:
            raise UnknownEventError(missing)
        for record in self._load():
            if record["id"] in updates:
                record["order"] = updates[record["id"]]
        self._save()


class RemoteEventBackend:
    def __init__(self, api: ApiClient):
        self.api = api

    def fetch_all(self) -> list[dict[str, Any]]:
        data = self.api.get("/api/events")
        return data if isinstance(data, list) else []

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        return self.api.post("/api/events", data)

    def update(self, data: dict[str, Any]) -> dict[str, Any]:
        return self.api.put("/api/events", data)

    def delete(self, event_id: str) -> None:
        self.api.delete("/api/events", params={"id": event_id})

    def reorder(self, updates: dict[str, int]) -> None:
        payload = {"updates": [{"id": i, "order": o} for i, o in updates.items()]}
        self.api.post("/api/reorder", payload)


def backend_from_env() -> EventBackend:
    """Pick the persistence capability from AGENDA_EVENTS_BACKEND."""
    kind = os.getenv("AGENDA_EVENTS_BACKEND", "local").strip().lower()
    if kind == "local":
        return LocalEventBackend(os.getenv("AGENDA_LOCAL_STORE", "agenda-events.json"))
    if kind == "remote":
        return RemoteEventBackend(ApiClient(os.getenv("AGENDA_API_URL", "http://localhost:8000")))
    raise ConfigurationError(f"Unknown AGENDA_EVENTS_BACKEND: {kind!r}")
