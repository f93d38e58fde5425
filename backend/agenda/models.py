from __future__ import annotations
import datetime as dt
import uuid

from sqlalchemy import Boolean, Date, DateTime, Integer, JSON, String, Text, Time, func
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


def new_id() -> str:
    return str(uuid.uuid4())


class Event(Base):
    __tablename__ = "events"

    id:        Mapped[str]       = mapped_column(String(36), primary_key=True, default=new_id)
    title:     Mapped[str]       = mapped_column(Text, nullable=False)
    date:      Mapped[dt.date]   = mapped_column("event_date", Date, nullable=False)
    time:      Mapped[dt.time]   = mapped_column("event_time", Time, nullable=False)
    location:  Mapped[str]       = mapped_column(Text, nullable=False, default="")
    priority:  Mapped[str]       = mapped_column(String(16), nullable=False)
    attendees: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    order:     Mapped[int]       = mapped_column("order_index", Integer, nullable=False, default=0)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class Leader(Base):
    __tablename__ = "leaders"

    id:         Mapped[str]       = mapped_column(String(36), primary_key=True, default=new_id)
    name:       Mapped[str]       = mapped_column(Text, nullable=False)
    phone:      Mapped[str]       = mapped_column("phone_e164", Text, nullable=False)
    ministries: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    opt_in:     Mapped[bool]      = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
