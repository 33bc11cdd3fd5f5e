from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

from chain_planner.models import Chain, ChainStep, HomeInterval, SchedulingPreferences
from scheduling.intervals import first_fit

logger = logging.getLogger(__name__)

EVENING_ROUTINE_NAME = "Evening routine"


def evening_routine_id(wake_time: datetime) -> str:
    return f"evening-routine-{wake_time.date().isoformat()}"


def evening_routine_start(
    wake_time: datetime,
    sleep_time: datetime,
    current_time: datetime,
    preferences: Optional[SchedulingPreferences] = None,
) -> datetime:
    """
    Earliest start for the evening routine.

    The routine never starts before the plan does. It also waits for the
    evening floor (18:00 on the wake day by default), unless sleep itself
    comes before the floor, in which case the floor is ignored. A bedtime
    after midnight is still later than the floor.
    """
    prefs = preferences or SchedulingPreferences()
    earliest = prefs.evening_routine_earliest

    plan_start = max(wake_time, current_time)
    floor = wake_time.replace(
        hour=earliest.hour, minute=earliest.minute, second=0, microsecond=0
    )

    if sleep_time < floor:
        return max(current_time, plan_start)
    return max(current_time, floor, plan_start)


def place_evening_routine(
    wake_time: datetime,
    sleep_time: datetime,
    current_time: datetime,
    preferences: Optional[SchedulingPreferences] = None,
    free_windows: Optional[Sequence[HomeInterval]] = None,
) -> Optional[Chain]:
    """
    Place the evening routine, or return None when it would overrun sleep.

    With ``free_windows`` the routine moves to the first free window at or
    after its earliest start, so it never overlaps an anchor, a chain or a
    wind-down.
    """
    prefs = preferences or SchedulingPreferences()
    minutes = prefs.evening_routine_minutes

    start = evening_routine_start(wake_time, sleep_time, current_time, prefs)
    if free_windows is not None:
        earliest = start
        start = first_fit(free_windows, earliest, minutes)
        if start is None:
            logger.info(f"Evening routine dropped: no free {minutes} min after {earliest:%H:%M}")
            return None

    end = start + timedelta(minutes=minutes)

    if end > sleep_time:
        logger.info(
            f"Evening routine dropped: {start:%H:%M}-{end:%H:%M} runs past sleep at {sleep_time:%H:%M}"
        )
        return None

    return Chain(
        chain_id=evening_routine_id(wake_time),
        kind="evening_routine",
        anchor=None,
        steps=[
            ChainStep(
                name=EVENING_ROUTINE_NAME,
                duration_minutes=minutes,
                order=0,
            )
        ],
        start=start,
        chain_completion_deadline=end,
    )
