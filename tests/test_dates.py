"""Tests for the calendar math helpers."""
from datetime import date, datetime, timedelta

import pytest

from agenda.client.dates import (
    add_days,
    add_months,
    format_date_parts,
    format_month_title,
    format_week_title,
    month_grid,
    parse_iso_date,
    start_of_week,
    to_iso_date,
    week_strip,
)


def test_to_iso_date_zero_pads():
    assert to_iso_date(date(2026, 3, 5)) == "2026-03-05"
    assert to_iso_date(datetime(2026, 3, 5, 23, 59)) == "2026-03-05"


def test_parse_iso_date_keeps_calendar_day():
    assert parse_iso_date("2026-02-17") == date(2026, 2, 17)


@pytest.mark.parametrize("offset", [0, 1, 59, 365, 366 + 31])
def test_iso_round_trip(offset):
    d = date(2024, 1, 1) + timedelta(days=offset)
    parsed = parse_iso_date(to_iso_date(d))
    assert (parsed.year, parsed.month, parsed.day) == (d.year, d.month, d.day)


def test_start_of_week_for_sunday_goes_back_six_days():
    sunday = date(2026, 2, 22)
    assert start_of_week(sunday) == add_days(sunday, -6) == date(2026, 2, 16)


def test_start_of_week_for_monday_is_same_day_without_time():
    assert start_of_week(datetime(2026, 2, 16, 15, 30)) == date(2026, 2, 16)


def test_start_of_week_midweek():
    assert start_of_week(date(2026, 2, 19)) == date(2026, 2, 16)


def test_add_days_crosses_month_and_year():
    assert add_days(date(2025, 12, 30), 3) == date(2026, 1, 2)
    assert add_days(date(2024, 3, 1), -1) == date(2024, 2, 29)


def test_add_months_wraps_years():
    assert add_months(date(2026, 1, 31), -1) == date(2025, 12, 1)
    assert add_months(date(2026, 12, 10), 1) == date(2027, 1, 1)


def test_month_grid_shape_and_flags():
    cells = month_grid(
        date(2026, 2, 1),
        selected=date(2026, 2, 17),
        today=date(2026, 2, 20),
        event_dates={"2026-02-17", "2026-03-01"},
    )
    assert len(cells) == 42
    # Feb 1st 2026 is a Sunday, so the grid opens on Monday Jan 26th
    assert cells[0].date == date(2026, 1, 26)
    assert cells[0].other_month
    assert all(c.date.weekday() == i % 7 for i, c in enumerate(cells))

    by_iso = {c.iso: c for c in cells}
    selected = by_iso["2026-02-17"]
    assert selected.selected and selected.has_events and not selected.other_month
    assert by_iso["2026-02-20"].today
    march_first = by_iso["2026-03-01"]
    assert march_first.other_month and march_first.has_events
    assert sum(c.selected for c in cells) == 1


def test_week_strip_runs_monday_to_sunday():
    cells = week_strip(date(2026, 2, 22), today=date(2026, 2, 17), event_dates={"2026-02-18"})
    assert [c.label for c in cells] == ["Seg", "Ter", "Qua", "Qui", "Sex", "Sab", "Dom"]
    assert cells[0].date == date(2026, 2, 16)
    assert cells[-1].selected
    assert cells[1].today
    assert cells[2].has_events


def test_titles_and_badges():
    assert format_month_title(date(2026, 2, 9)) == "Fevereiro de 2026"
    assert format_week_title(date(2026, 2, 18)) == "Semana de 16 de fev. - 22 de fev."
    assert format_date_parts("2026-02-07") == ("07", "FEB")
