"""Tests for the event cache: normalization, filtering and mutations."""
import json
from datetime import date

import pytest

from agenda.client.backends import LocalEventBackend
from agenda.client.models import CalendarEvent
from agenda.client.store import EventStore, filter_events, normalize_events

from conftest import event_record


def _events(*records):
    return [CalendarEvent.from_dict(r) for r in records]


def test_normalize_assigns_orders_by_date_and_time():
    events = _events(
        event_record("c", "2026-02-20", "08:00"),
        event_record("a", "2026-02-17", "13:00"),
        event_record("b", "2026-02-17", "08:30"),
    )
    first = normalize_events(events)
    second = normalize_events(events)

    assert [(e.id, e.order) for e in first] == [("b", 1), ("a", 2), ("c", 3)]
    assert [(e.id, e.order) for e in first] == [(e.id, e.order) for e in second]


def test_normalize_is_all_or_nothing():
    events = _events(
        event_record("a", "2026-02-17", order=7),
        event_record("b", "2026-02-16"),
    )
    renumbered = {e.id: e.order for e in normalize_events(events)}
    # one missing order renumbers everyone, including the one that had 7
    assert renumbered == {"b": 1, "a": 2}


def test_normalize_trusts_complete_orders():
    events = _events(
        event_record("a", "2026-02-17", order=9),
        event_record("b", "2026-02-16", order=3),
    )
    assert normalize_events(events) == events


def test_non_integer_order_counts_as_missing():
    (event,) = _events(event_record("a", "2026-02-17", order="3"))
    assert event.order is None


@pytest.fixture
def week_events():
    return _events(
        event_record("mon", "2026-02-16", "10:00", order=4, title="Ensaio", location="Templo", attendees=["GM"]),
        event_record("tue-late", "2026-02-17", "18:00", order=1, title="Culto"),
        event_record("tue-early", "2026-02-17", "07:00", order=3, title="Oração", attendees=["JB", "AN"]),
        event_record("sun", "2026-02-22", "09:00", order=2, title="Escola"),
        event_record("next-mon", "2026-02-23", "09:00", order=5, title="Reunião"),
    )


def test_day_filter_sorts_by_order(week_events):
    visible = filter_events(week_events, "day", date(2026, 2, 17))
    assert [e.id for e in visible] == ["tue-late", "tue-early"]


def test_day_filter_is_idempotent(week_events):
    once = filter_events(week_events, "day", date(2026, 2, 17))
    twice = filter_events(once, "day", date(2026, 2, 17))
    assert once == twice


def test_week_filter_is_inclusive_monday_to_sunday(week_events):
    visible = filter_events(week_events, "week", date(2026, 2, 19))
    assert [e.id for e in visible] == ["tue-late", "sun", "tue-early", "mon"]


def test_search_matches_title_location_and_attendees(week_events):
    assert [e.id for e in filter_events(week_events, "week", date(2026, 2, 19), "templo")] == ["mon"]
    assert [e.id for e in filter_events(week_events, "week", date(2026, 2, 19), "jb")] == ["tue-early"]
    assert [e.id for e in filter_events(week_events, "week", date(2026, 2, 19), "CULTO")] == ["tue-late"]


def test_filter_does_not_mutate_input(week_events):
    before = list(week_events)
    filter_events(week_events, "week", date(2026, 2, 19), "e")
    assert week_events == before


def test_unknown_filter_is_rejected(week_events):
    with pytest.raises(ValueError):
        filter_events(week_events, "month", date(2026, 2, 19))


def test_empty_day_is_an_empty_list(week_events):
    assert filter_events(week_events, "day", date(2026, 3, 1)) == []


def test_store_lists_in_order_after_refresh(make_store):
    store = make_store([
        event_record("late", "2026-02-17", "18:00"),
        event_record("early", "2026-02-17", "07:00"),
    ])
    assert [(e.id, e.order) for e in store.list()] == [("early", 1), ("late", 2)]


def test_store_create_appends_with_next_order(make_store):
    store = make_store([event_record("a", "2026-02-17", order=5)])
    created = store.upsert({"title": "Novo", "date": "2026-02-10", "time": "09:00", "priority": "alta"})
    assert created.order == 6
    assert [e.id for e in store.list()] == ["a", created.id]


def test_store_update_keeps_order(make_store):
    store = make_store([
        event_record("a", "2026-02-17", order=1),
        event_record("b", "2026-02-18", order=2),
    ])
    updated = store.upsert({**event_record("a", "2026-02-25", title="Movido"), "order": 99})
    assert updated.order == 1
    assert updated.date == "2026-02-25"
    assert store.get("a").title == "Movido"


def test_store_delete_keeps_survivor_orders(make_store):
    store = make_store([
        event_record("a", "2026-02-17", order=1),
        event_record("b", "2026-02-18", order=2),
    ])
    store.delete("a")
    assert [(e.id, e.order) for e in store.list()] == [("b", 2)]
    assert store.dates_with_events() == {"2026-02-18"}


def test_local_backend_persists_to_file(tmp_path):
    path = tmp_path / "events.json"
    store = EventStore(LocalEventBackend(path))
    seeded = store.refresh()
    assert [e.title for e in seeded] == ["Treino", "Reunião com o time", "Almoço com Stephanie"]
    assert [e.order for e in seeded] == [1, 2, 3]

    store.delete(seeded[0].id)
    reopened = EventStore(LocalEventBackend(path))
    assert [e.title for e in reopened.refresh()] == ["Reunião com o time", "Almoço com Stephanie"]


def test_unordered_file_gets_orders_written_back(make_store, tmp_path):
    make_store([
        event_record("late", "2026-02-17", "18:00"),
        event_record("early", "2026-02-17", "07:00", order=9),
    ])
    stored = json.loads((tmp_path / "events.json").read_text(encoding="utf-8"))
    assert {r["id"]: r["order"] for r in stored} == {"early": 1, "late": 2}


def test_records_without_date_are_skipped(make_store):
    broken = event_record("broken", "2026-02-17")
    del broken["date"]
    store = make_store([broken, event_record("ok", "2026-02-17", order=1)])

    assert [e.id for e in store.list()] == ["ok"]
    assert [e.id for e in store.visible("week", date(2026, 2, 17))] == ["ok"]


def test_local_backend_refuses_event_without_date(make_store):
    store = make_store([event_record("a", "2026-02-17", order=1)])
    with pytest.raises(ValueError):
        store.upsert({"title": "Sem data", "time": "09:00", "priority": "media"})
    assert [e.id for e in store.list()] == ["a"]


def test_from_dict_rejects_missing_or_invalid_date():
    with pytest.raises(ValueError):
        CalendarEvent.from_dict({"id": "x", "title": "Sem data"})
    with pytest.raises(ValueError):
        CalendarEvent.from_dict({"id": "x", "date": "amanhã"})
