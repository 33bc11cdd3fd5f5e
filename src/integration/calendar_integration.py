import logging
from datetime import datetime
from typing import List, Protocol

from chain_planner.models import CalendarEvent
from storage.calendar_store import CalendarEventStore

logger = logging.getLogger(__name__)


class CalendarError(Exception):
    """Raised when the calendar collaborator cannot return the day's events."""


class CalendarSource(Protocol):
    async def get_events_between(self, user_id: str, start: datetime, end: datetime) -> List[CalendarEvent]: ...


class CalendarIntegration:
    """
    Calendar collaborator used by the chains endpoint.

    A single read per request, no retries. Any failure from the underlying
    source is wrapped in CalendarError so the caller can degrade gracefully.
    """

    def __init__(self, source: CalendarSource = None):
        self.source = source or CalendarEventStore()

    async def get_events(self, user_id: str, start: datetime, end: datetime) -> List[CalendarEvent]:
        try:
            return await self.source.get_events_between(user_id, start, end)
        except Exception as e:
            raise CalendarError(f"Calendar read failed for {start:%Y-%m-%d %H:%M}-{end:%Y-%m-%d %H:%M}: {e}") from e


class NoCalendar:
    """Source for deployments without a calendar backend: every day is empty."""

    async def get_events_between(self, user_id: str, start: datetime, end: datetime) -> List[CalendarEvent]:
        return []
