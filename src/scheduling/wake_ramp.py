from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence, Tuple

from chain_planner.models import Anchor, EnergyLevel, WakeRamp

logger = logging.getLogger(__name__)

# Past this point after waking the person is considered already up.
SKIP_AFTER = timedelta(hours=2)

WAKE_RAMP_COMPONENTS: Dict[EnergyLevel, Dict[str, int]] = {
    "low": {"toilet": 20, "hygiene": 10, "shower": 25, "dress": 20, "buffer": 45},
    "medium": {"toilet": 15, "hygiene": 10, "shower": 20, "dress": 15, "buffer": 30},
    "high": {"toilet": 10, "hygiene": 10, "shower": 15, "dress": 10, "buffer": 30},
}


def wake_ramp_minutes(energy: EnergyLevel) -> int:
    return sum(WAKE_RAMP_COMPONENTS[energy].values())


def should_skip_wake_ramp(plan_start: datetime, wake_time: datetime) -> bool:
    return plan_start > wake_time + SKIP_AFTER


def _first_collision(
    start: datetime, end: datetime, spans: Sequence[Tuple[datetime, datetime]]
) -> Optional[datetime]:
    hits = [s for s, e in spans if s < end and e > start]
    return min(hits) if hits else None


def generate_wake_ramp(
    plan_start: datetime,
    wake_time: datetime,
    energy: EnergyLevel = "medium",
    anchors: Sequence[Anchor] = (),
    sleep_time: Optional[datetime] = None,
    busy: Sequence[Tuple[datetime, datetime]] = (),
) -> Optional[WakeRamp]:
    """
    Wake ramp starting at the plan start, sized by energy level.

    Returns None when the person has been up for more than two hours, or when
    the ramp would overlap an anchor, a busy span (preparation chains and
    wind-downs) or run past sleep.
    """
    if should_skip_wake_ramp(plan_start, wake_time):
        logger.info("Wake ramp skipped: already awake")
        return None

    components = dict(WAKE_RAMP_COMPONENTS[energy])
    duration = sum(components.values())
    end = plan_start + timedelta(minutes=duration)

    spans = [(a.start_time, a.end_time) for a in anchors] + list(busy)
    collision = _first_collision(plan_start, end, spans)
    if collision is not None:
        logger.info(f"Wake ramp skipped: {duration} min collides with a block at {collision:%H:%M}")
        return None
    if sleep_time is not None and end > sleep_time:
        logger.info("Wake ramp skipped: runs past sleep time")
        return None

    return WakeRamp(
        start=plan_start,
        end=end,
        duration_minutes=duration,
        components=components,
    )
