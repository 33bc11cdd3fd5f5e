from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from cryptography.fernet import Fernet

from chain_planner.models import CalendarEvent

TZ = ZoneInfo("Europe/London")
DAY = "2025-01-18"


def at(hhmm: str, day: str = DAY) -> datetime:
    """Aware datetime on the test day, e.g. at("09:30")."""
    return datetime.fromisoformat(f"{day}T{hhmm}:00").replace(tzinfo=TZ)


def make_event(
    event_id: str,
    start: str,
    end: str,
    title: str = "Lecture",
    location=None,
    description=None,
) -> CalendarEvent:
    return CalendarEvent(
        id=event_id,
        title=title,
        description=description,
        location=location,
        start_time=at(start),
        end_time=at(end),
    )


class FakeCalendar:
    def __init__(self, events=None, error: Exception = None):
        self.events = events or []
        self.error = error
        self.calls = []

    async def get_events(self, user_id, start, end):
        self.calls.append((user_id, start, end))
        if self.error is not None:
            raise self.error
        return list(self.events)


@pytest.fixture
def session_key() -> str:
    return Fernet.generate_key().decode()


@pytest.fixture
def frozen_clock():
    def _make(hhmm: str):
        moment = at(hhmm)
        return lambda: moment
    return _make
