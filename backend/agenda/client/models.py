"""Client-side records mirroring the JSON the API returns."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .dates import parse_iso_date, to_iso_date

PRIORITY_LABELS = {"alta": "Alta", "media": "Média", "baixa": "Baixa"}


@dataclass(frozen=True)
class CalendarEvent:
    """One scheduled item; `order` is None until normalized."""
    id: str
    title: str
    date: str
    time: str
    location: str = ""
    priority: str = "media"
    attendees: tuple[str, ...] = ()
    order: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CalendarEvent":
        """Raises ValueError when the record has no usable date."""
        raw_date = data.get("date")
        if not raw_date:
            raise ValueError(f"Event {data.get('id')!r} has no date")
        order = data.get("order")
        # bool is an int subclass but never a valid order
        if isinstance(order, bool) or not isinstance(order, int):
            order = None
        attendees = data.get("attendees")
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            date=to_iso_date(parse_iso_date(str(raw_date))),
            time=str(data.get("time") or "")[:5],
            location=data.get("location") or "",
            priority=data.get("priority") or "media",
            attendees=tuple(attendees) if isinstance(attendees, (list, tuple)) else (),
            order=order,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "priority": self.priority,
            "attendees": list(self.attendees),
        }
        if self.order is not None:
            data["order"] = self.order
        return data

    @property
    def sort_key(self) -> tuple:
        return (self.order if self.order is not None else 0, self.date, self.time)


@dataclass(frozen=True)
class Leader:
    id: str
    name: str
    phone: str
    ministries: tuple[str, ...] = field(default_factory=tuple)
    opt_in: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Leader":
        ministries = data.get("ministries")
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            phone=data.get("phone") or "",
            ministries=tuple(ministries) if isinstance(ministries, (list, tuple)) else (),
            opt_in=bool(data.get("optIn")),
        )
