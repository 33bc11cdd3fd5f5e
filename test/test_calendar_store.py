import asyncio
from datetime import date, datetime, timezone

import pytest

from conftest import TZ
from integration.calendar_integration import CalendarError, CalendarIntegration, NoCalendar
from storage import calendar_store
from storage.calendar_store import CalendarEventStore, day_bounds


def _row(event_id, start, end, title="Lecture", location=None):
    return {
        "id": event_id,
        "title": title,
        "description": None,
        "location": location,
        "start_time": start,
        "end_time": end,
    }


def test_day_bounds_cover_local_day():
    start, end = day_bounds(date(2025, 7, 1), TZ)
    # British Summer Time: local midnight is 23:00 UTC the day before
    assert start.astimezone(timezone.utc) == datetime(2025, 6, 30, 23, 0, tzinfo=timezone.utc)
    assert (end - start).total_seconds() == 24 * 3600


def test_store_reads_rows_in_local_time(monkeypatch):
    calls = []

    async def fake_fetch(query, *args):
        calls.append(args)
        return [
            _row(42, datetime(2025, 7, 1, 8, 0, tzinfo=timezone.utc), datetime(2025, 7, 1, 9, 0, tzinfo=timezone.utc),
                 location="Room 101"),
            _row("b", datetime(2025, 7, 1, 12, 0, tzinfo=timezone.utc), datetime(2025, 7, 1, 13, 0, tzinfo=timezone.utc),
                 title=None),
        ]

    monkeypatch.setattr(calendar_store.db, "fetch", fake_fetch)

    events = asyncio.run(CalendarEventStore().get_events_for_date("user-1", date(2025, 7, 1), TZ))

    assert [e.id for e in events] == ["42", "b"]
    assert events[0].start_time.hour == 9
    assert events[0].start_time.utcoffset().total_seconds() == 3600
    assert events[1].title == ""
    assert calls[0][0] == "user-1"


def test_integration_wraps_source_failures():
    class Broken:
        async def get_events_between(self, user_id, start, end):
            raise ConnectionError("pool closed")

    start, end = day_bounds(date(2025, 1, 18), TZ)
    with pytest.raises(CalendarError) as exc:
        asyncio.run(CalendarIntegration(Broken()).get_events("u", start, end))
    assert isinstance(exc.value.__cause__, ConnectionError)


def test_no_calendar_is_empty():
    start, end = day_bounds(date(2025, 1, 18), TZ)
    events = asyncio.run(CalendarIntegration(NoCalendar()).get_events("u", start, end))
    assert events == []


def test_health_check_without_pool_is_unhealthy():
    from storage import db

    assert db.is_initialized() is False
    result = asyncio.run(db.health_check())
    assert result["status"] == "unhealthy"
    assert "not initialized" in result["error"]


def test_store_queries_the_requested_window(monkeypatch):
    calls = []

    async def fake_fetch(query, *args):
        calls.append(args)
        return [
            _row("late", datetime(2025, 1, 19, 0, 15, tzinfo=timezone.utc),
                 datetime(2025, 1, 19, 0, 45, tzinfo=timezone.utc)),
        ]

    monkeypatch.setattr(calendar_store.db, "fetch", fake_fetch)

    start = datetime(2025, 1, 18, 0, 0, tzinfo=TZ)
    end = datetime(2025, 1, 19, 1, 0, tzinfo=TZ)
    events = asyncio.run(CalendarEventStore().get_events_between("user-1", start, end))

    assert calls == [("user-1", start, end)]
    assert events[0].start_time.tzinfo == TZ
