# backend/agenda/schemas.py
from __future__ import annotations
from typing import Literal, Optional
import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, field_validator

Priority = Literal["alta", "media", "baixa"]

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def _hhmm(value):
    if isinstance(value, dt.time):
        return value.strftime("%H:%M")
    if isinstance(value, str) and len(value) > 5:
        # "08:30:00" as returned by some drivers
        return value[:5]
    return value


class EventIn(BaseModel):
    """Request schema for event creation/update."""
    id: Optional[str] = None
    title: str = Field(min_length=1)
    date: dt.date
    time: str = Field(pattern=TIME_PATTERN)
    location: str = ""
    priority: Priority = "media"
    attendees: list[str] = Field(default_factory=list)
    order: Optional[int] = None

    @field_validator("time", mode="before")
    @classmethod
    def _trim_seconds(cls, value):
        return _hhmm(value)

    @property
    def time_value(self) -> dt.time:
        return dt.time.fromisoformat(self.time)


class EventUpdate(EventIn):
    """PUT body: same fields, but the id is mandatory."""
    id: str


class EventOut(BaseModel):
    """Response schema for an event row."""
    id: str
    title: str
    date: dt.date
    time: str
    location: str
    priority: str
    attendees: list[str]
    order: int
    model_config = ConfigDict(from_attributes=True)  # allow from ORM

    @field_validator("time", mode="before")
    @classmethod
    def _format_time(cls, value):
        return _hhmm(value)

    @field_validator("attendees", mode="before")
    @classmethod
    def _attendees_list(cls, value):
        return value if isinstance(value, list) else []


class ReorderItem(BaseModel):
    id: str
    order: int


class ReorderIn(BaseModel):
    updates: list[ReorderItem] = Field(default_factory=list)


class LeaderIn(BaseModel):
    """Request schema for leader creation/update."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    ministries: list[str] = Field(default_factory=list)
    opt_in: Optional[bool] = Field(default=None, alias="optIn")


class LeaderUpdate(LeaderIn):
    """PUT body: blank name/phone are stored as given, a missing optIn keeps the stored flag."""
    id: str
    name: str = ""
    phone: str = ""


class LeaderOut(BaseModel):
    """Response schema for a leader row; optIn keeps the client's camelCase."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: str
    phone: str
    ministries: list[str]
    opt_in: bool = Field(serialization_alias="optIn")

    @field_validator("ministries", mode="before")
    @classmethod
    def _ministries_list(cls, value):
        return value if isinstance(value, list) else []


class OkOut(BaseModel):
    ok: bool = True
