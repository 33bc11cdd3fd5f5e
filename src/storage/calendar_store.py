import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import List

from chain_planner.models import CalendarEvent
from storage import db

logger = logging.getLogger(__name__)

EVENTS_FOR_RANGE_SQL = """
    SELECT id, title, description, location, start_time, end_time
    FROM calendar_events
    WHERE user_id = $1
      AND start_time < $3
      AND end_time > $2
    ORDER BY start_time
"""


def day_bounds(day: date, tz: tzinfo) -> tuple:
    start = datetime.combine(day, time(0, 0)).replace(tzinfo=tz)
    return start, start + timedelta(days=1)


def event_from_record(record, tz: tzinfo) -> CalendarEvent:
    return CalendarEvent(
        id=str(record["id"]),
        title=record["title"] or "",
        description=record["description"],
        location=record["location"],
        start_time=record["start_time"].astimezone(tz),
        end_time=record["end_time"].astimezone(tz),
    )


class CalendarEventStore:
    """Read-only access to the ``calendar_events`` table."""

    async def get_events_between(self, user_id: str, start: datetime, end: datetime) -> List[CalendarEvent]:
        """Events overlapping [start, end), earliest first, in the timezone of ``start``."""
        rows = await db.fetch(EVENTS_FOR_RANGE_SQL, user_id, start, end)
        events = [event_from_record(r, start.tzinfo) for r in rows]
        logger.info(
            f"Loaded {len(events)} calendar events for user {user_id} "
            f"between {start.isoformat()} and {end.isoformat()}"
        )
        return events

    async def get_events_for_date(self, user_id: str, day: date, tz: tzinfo) -> List[CalendarEvent]:
        start, end = day_bounds(day, tz)
        return await self.get_events_between(user_id, start, end)
