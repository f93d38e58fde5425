"""
Calendar math for the agenda views.

All helpers work on `datetime.date`; a `datetime` argument is truncated to
its calendar date first, so there is never a time-of-day or time-zone
component that could shift the day.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Collection, Union

from dateutil.parser import isoparse as iso_parse

DateLike = Union[date, datetime]

GRID_CELLS = 42  # 6 weeks x 7 days

DAY_LABELS = ("Seg", "Ter", "Qua", "Qui", "Sex", "Sab", "Dom")

MONTHS_PT = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)
MONTHS_PT_SHORT = (
    "jan.", "fev.", "mar.", "abr.", "mai.", "jun.",
    "jul.", "ago.", "set.", "out.", "nov.", "dez.",
)
MONTHS_EN_SHORT = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)


def as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def to_iso_date(value: DateLike) -> str:
    d = as_date(value)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_iso_date(value: str) -> date:
    # isoparse("2026-02-17") yields local midnight; .date() drops it
    return iso_parse(value.strip()).date()


def add_days(value: DateLike, days: int) -> date:
    return as_date(value) + timedelta(days=days)


def start_of_week(value: DateLike) -> date:
    """Monday on or before `value` (a Sunday goes back six days)."""
    d = as_date(value)
    return d - timedelta(days=d.weekday())


def first_of_month(value: DateLike) -> date:
    return as_date(value).replace(day=1)


def add_months(value: DateLike, months: int) -> date:
    """First day of the month `months` away from `value`'s month."""
    d = as_date(value)
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


@dataclass(frozen=True)
class CalendarCell:
    date: date
    iso: str
    day: int
    label: str = ""
    other_month: bool = False
    selected: bool = False
    today: bool = False
    has_events: bool = False


def month_grid(
    reference: DateLike,
    selected: DateLike,
    today: DateLike,
    event_dates: Collection[str] = (),
) -> list[CalendarCell]:
    """Six Monday-first weeks covering `reference`'s month."""
    first = first_of_month(reference)
    grid_start = start_of_week(first)
    selected_iso = to_iso_date(selected)
    today_iso = to_iso_date(today)

    cells = []
    for i in range(GRID_CELLS):
        current = add_days(grid_start, i)
        iso = to_iso_date(current)
        cells.append(CalendarCell(
            date=current,
            iso=iso,
            day=current.day,
            label=DAY_LABELS[i % 7],
            other_month=current.month != first.month,
            selected=iso == selected_iso,
            today=iso == today_iso,
            has_events=iso in event_dates,
        ))
    return cells


def week_strip(
    selected: DateLike,
    today: DateLike,
    event_dates: Collection[str] = (),
) -> list[CalendarCell]:
    week_start = start_of_week(selected)
    selected_iso = to_iso_date(selected)
    today_iso = to_iso_date(today)

    cells = []
    for i, label in enumerate(DAY_LABELS):
        current = add_days(week_start, i)
        iso = to_iso_date(current)
        cells.append(CalendarCell(
            date=current,
            iso=iso,
            day=current.day,
            label=label,
            selected=iso == selected_iso,
            today=iso == today_iso,
            has_events=iso in event_dates,
        ))
    return cells


def format_month_title(value: DateLike) -> str:
    """'Fevereiro de 2026'."""
    d = as_date(value)
    text = f"{MONTHS_PT[d.month - 1]} de {d.year}"
    return text[0].upper() + text[1:]


def _short_pt(d: date) -> str:
    return f"{d.day:02d} de {MONTHS_PT_SHORT[d.month - 1]}"


def format_week_title(value: DateLike) -> str:
    """'Semana de 16 de fev. - 22 de fev.' for the week containing `value`."""
    week_start = start_of_week(value)
    return f"Semana de {_short_pt(week_start)} - {_short_pt(add_days(week_start, 6))}"


def format_date_parts(iso: str) -> tuple[str, str]:
    """Day and month badge for an event card: ('17', 'FEB')."""
    d = parse_iso_date(iso)
    return f"{d.day:02d}", MONTHS_EN_SHORT[d.month - 1]
