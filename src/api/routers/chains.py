import logging
import time
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_calendar, get_clock, get_current_user, get_preferences
from api.metrics import (
    CALENDAR_ERRORS_TOTAL,
    CHAINS_DROPPED_TOTAL,
    CHAINS_GENERATED_TOTAL,
    REQUEST_LATENCY_SECONDS,
    REQUESTS_TOTAL,
)
from chain_planner.models import SchedulingPreferences
from integration.calendar_integration import CalendarError, CalendarIntegration
from scheduling.plan import to_payload
from scheduling.request_validator import validate
from scheduling.scheduler import Scheduler

router = APIRouter()
logger = logging.getLogger(__name__)

ENDPOINT = "/api/chains/today"


@router.get(ENDPOINT)
async def chains_today(
    request: Request,
    user_id: str = Depends(get_current_user),
    calendar: CalendarIntegration = Depends(get_calendar),
    preferences: SchedulingPreferences = Depends(get_preferences),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> dict:
    """
    Build today's chain plan for the signed-in user.

    Query parameters (all optional): date (YYYY-MM-DD), wakeTime, sleepTime
    (ISO datetimes), energy (low | medium | high), completed (comma-separated
    chain ids already done).
    """
    start = time.time()

    params = validate(dict(request.query_params), clock(), preferences)

    calendar_available = True
    try:
        window_start, window_end = params.calendar_window
        events = await calendar.get_events(user_id, window_start, window_end)
    except CalendarError:
        # Degrade to an anchor-free plan rather than failing the request.
        logger.exception(f"Calendar unavailable for user {user_id}, planning without anchors")
        CALENDAR_ERRORS_TOTAL.inc()
        events = []
        calendar_available = False

    plan = Scheduler(preferences).schedule(events, params, calendar_available=calendar_available)

    for chain in plan.chains:
        CHAINS_GENERATED_TOTAL.labels(kind=chain.kind).inc()
    for dropped in plan.dropped:
        CHAINS_DROPPED_TOTAL.labels(kind=dropped.kind).inc()

    REQUESTS_TOTAL.labels(endpoint=ENDPOINT, status="200").inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint=ENDPOINT).observe(time.time() - start)

    return to_payload(plan)
