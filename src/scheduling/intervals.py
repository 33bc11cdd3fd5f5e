from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from chain_planner.models import Anchor, HomeInterval
from classification.anchor_classifier import sort_anchors
from scheduling.errors import InvalidWindow

logger = logging.getLogger(__name__)

Span = Tuple[datetime, datetime]


def minutes_between(start: datetime, end: datetime) -> int:
    return max(0, int((end - start).total_seconds() // 60))


def make_interval(start: datetime, end: datetime) -> HomeInterval:
    return HomeInterval(start=start, end=end, duration_minutes=minutes_between(start, end))


def compute_home_intervals(
    wake_time: datetime,
    sleep_time: datetime,
    anchors: Sequence[Anchor],
) -> List[HomeInterval]:
    """
    Free windows between wake and sleep that no anchor occupies.

    Overlapping anchors merge through the cursor: it only ever moves forward
    to the latest anchor end seen so far.
    """
    if wake_time >= sleep_time:
        raise InvalidWindow(
            f"wakeTime ({wake_time.isoformat()}) must be before "
            f"sleepTime ({sleep_time.isoformat()})"
        )

    intervals: List[HomeInterval] = []
    cursor = wake_time

    for anchor in sort_anchors(anchors):
        if cursor >= sleep_time:
            break
        if anchor.start_time > cursor:
            intervals.append(make_interval(cursor, min(anchor.start_time, sleep_time)))
        cursor = max(cursor, anchor.end_time)

    if cursor < sleep_time:
        intervals.append(make_interval(cursor, sleep_time))

    logger.debug(
        f"Computed {len(intervals)} home intervals "
        f"({total_home_minutes(intervals)} free minutes) for {len(anchors)} anchors"
    )
    return intervals


def total_home_minutes(intervals: Sequence[HomeInterval]) -> int:
    return sum(i.duration_minutes for i in intervals)


def interval_containing(
    start: datetime, end: datetime, intervals: Sequence[HomeInterval]
) -> Optional[HomeInterval]:
    """Return the home interval that holds all of [start, end], if any."""
    for interval in intervals:
        if interval.contains(start, end):
            return interval
    return None


def subtract_spans(intervals: Sequence[HomeInterval], spans: Iterable[Span]) -> List[HomeInterval]:
    """Cut busy spans (chains, wind-downs) out of the home intervals."""
    ordered = sorted(spans)
    free: List[HomeInterval] = []

    for interval in intervals:
        cursor = interval.start
        for start, end in ordered:
            if cursor >= interval.end:
                break
            if end <= cursor or start >= interval.end:
                continue
            if start > cursor:
                free.append(make_interval(cursor, start))
            cursor = max(cursor, end)
        if cursor < interval.end:
            free.append(make_interval(cursor, interval.end))

    return free


def first_fit(
    intervals: Sequence[HomeInterval], earliest: datetime, minutes: int
) -> Optional[datetime]:
    """Earliest start at or after ``earliest`` with ``minutes`` of room in one interval."""
    length = timedelta(minutes=minutes)
    for interval in intervals:
        start = max(earliest, interval.start)
        if start + length <= interval.end:
            return start
    return None
