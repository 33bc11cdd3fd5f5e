import os
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import Depends, Request

from api.session import SessionVerifier, token_from_request
from chain_planner.models import SchedulingPreferences
from integration.calendar_integration import CalendarIntegration, NoCalendar
from scheduling.errors import Unauthorized
from storage.calendar_store import CalendarEventStore
from storage.preferences_store import PreferencesStore

# Configuration
CALENDAR_BACKEND = os.getenv("CALENDAR_BACKEND", "postgres").strip().lower()
PREFERENCES_PATH = os.getenv("PREFERENCES_PATH", "data/preferences.json")

_session_verifier: Optional[SessionVerifier] = None


def get_session_verifier() -> SessionVerifier:
    global _session_verifier
    if _session_verifier is None:
        _session_verifier = SessionVerifier()
    return _session_verifier


def get_current_user(
    request: Request,
    verifier: SessionVerifier = Depends(get_session_verifier),
) -> str:
    user_id = verifier.verify(token_from_request(request))
    if user_id is None:
        raise Unauthorized()
    return user_id


def get_calendar() -> CalendarIntegration:
    if CALENDAR_BACKEND == "postgres":
        return CalendarIntegration(CalendarEventStore())
    return CalendarIntegration(NoCalendar())


def get_preferences() -> SchedulingPreferences:
    return PreferencesStore(path=PREFERENCES_PATH).load()


def get_clock() -> Callable[[], datetime]:
    return lambda: datetime.now(timezone.utc)
