from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Collection, List, Optional, Sequence, Tuple

from chain_planner.models import (
    Anchor,
    Chain,
    ChainStep,
    DroppedChain,
    EnergyLevel,
    HomeInterval,
    SchedulingPreferences,
)
from scheduling.errors import InvalidWindow
from scheduling.evening_routine import place_evening_routine
from scheduling.intervals import Span, interval_containing, subtract_spans
from scheduling.status import with_status
from scheduling.templates import BUFFER_MINUTES, StepTemplate, get_chain_template, recovery_minutes

logger = logging.getLogger(__name__)

NO_ROOM = "Not enough free time before the anchor to fit its chain"
TOO_LATE = "Too little time left before the anchor to fit its chain"


def chain_id_for(anchor: Anchor) -> str:
    return f"chain-{anchor.id}"


def needs_chain(anchor: Anchor, preferences: SchedulingPreferences) -> bool:
    if preferences.chain_policy == "all":
        return True
    return anchor.must_attend


def _numbered(templates: List[StepTemplate]) -> List[ChainStep]:
    return [
        ChainStep(
            name=t.name,
            duration_minutes=t.duration_minutes,
            order=i,
            required=t.required,
        )
        for i, t in enumerate(templates)
    ]


def chain_steps(
    anchor: Anchor,
    energy: EnergyLevel,
    preferences: SchedulingPreferences,
    required_only: bool = False,
) -> List[ChainStep]:
    """Ordered steps for an anchor: preparation, energy buffer, then commute."""
    templates: List[StepTemplate] = list(get_chain_template(anchor.type))
    templates.append(StepTemplate("Buffer", BUFFER_MINUTES[energy]))
    if anchor.must_attend and preferences.commute_minutes > 0:
        templates.append(StepTemplate("Commute", preferences.commute_minutes))

    if required_only:
        templates = [t for t in templates if t.required]

    return _numbered(templates)


def wind_down_steps(anchor: Anchor, preferences: SchedulingPreferences) -> List[ChainStep]:
    """Steps after the anchor ends: travel back home, then recovery."""
    templates: List[StepTemplate] = []
    if anchor.must_attend and preferences.commute_minutes > 0:
        templates.append(StepTemplate("Travel back", preferences.commute_minutes))
    templates.append(StepTemplate("Recovery", recovery_minutes(anchor.duration_minutes)))
    return _numbered(templates)


def wind_down_span(anchor: Anchor, preferences: SchedulingPreferences) -> Span:
    minutes = sum(s.duration_minutes for s in wind_down_steps(anchor, preferences))
    return anchor.end_time, anchor.end_time + timedelta(minutes=minutes)


def wind_down_spans(anchors: Sequence[Anchor], preferences: SchedulingPreferences) -> List[Span]:
    return [wind_down_span(a, preferences) for a in anchors if needs_chain(a, preferences)]


def chain_spans(chains: Sequence[Chain]) -> List[Span]:
    return [(c.start, c.chain_completion_deadline) for c in chains]


def _fit(
    anchor: Anchor,
    steps: List[ChainStep],
    free_windows: Sequence[HomeInterval],
    not_before: Optional[datetime] = None,
) -> Optional[Tuple[datetime, datetime]]:
    deadline = anchor.start_time
    start = deadline - timedelta(minutes=sum(s.duration_minutes for s in steps))
    if not_before is not None and start < not_before:
        return None
    if interval_containing(start, deadline, free_windows) is None:
        return None
    return start, deadline


def build_chain(
    anchor: Anchor,
    free_windows: Sequence[HomeInterval],
    energy: EnergyLevel,
    preferences: SchedulingPreferences,
    not_before: Optional[datetime] = None,
) -> Optional[Chain]:
    """
    Place the preparation chain for one anchor, or return None if it cannot fit.

    The chain must finish exactly when the anchor begins, sit inside a
    single free window and start no earlier than ``not_before``. When the
    full chain is too long, the optional steps are dropped and the required
    ones are tried on their own.
    """
    steps = chain_steps(anchor, energy, preferences)
    trimmed = False
    placement = _fit(anchor, steps, free_windows, not_before)

    if placement is None and not all(s.required for s in steps):
        steps = chain_steps(anchor, energy, preferences, required_only=True)
        trimmed = True
        placement = _fit(anchor, steps, free_windows, not_before)

    if placement is None:
        return None

    start, deadline = placement
    wind_down = wind_down_steps(anchor, preferences)
    return Chain(
        chain_id=chain_id_for(anchor),
        kind="anchor",
        anchor=anchor,
        steps=steps,
        start=start,
        chain_completion_deadline=deadline,
        trimmed=trimmed,
        wind_down=wind_down,
        wind_down_end=wind_down_span(anchor, preferences)[1],
    )


def build_chains(
    anchors: Sequence[Anchor],
    home_intervals: Sequence[HomeInterval],
    wake_time: datetime,
    sleep_time: datetime,
    current_time: datetime,
    energy: EnergyLevel = "medium",
    preferences: Optional[SchedulingPreferences] = None,
    completed_ids: Collection[str] = (),
) -> Tuple[List[Chain], List[DroppedChain]]:
    """
    Build every chain for the day and report the ones that were dropped.

    Chains run in the home intervals minus every anchor's wind-down. A chain
    still ahead of its anchor starts no earlier than ``current_time``; chains
    for anchors already under way or done keep the slot they had and are
    reported as missed or completed. Chains that cannot be placed are left
    out of the plan rather than raised.
    """
    if wake_time >= sleep_time:
        raise InvalidWindow("wakeTime must be before sleepTime")

    prefs = preferences or SchedulingPreferences()
    chains: List[Chain] = []
    dropped: List[DroppedChain] = []

    free = subtract_spans(home_intervals, wind_down_spans(anchors, prefs))

    for anchor in anchors:
        if not needs_chain(anchor, prefs):
            continue

        not_before = current_time
        if current_time >= anchor.start_time or chain_id_for(anchor) in completed_ids:
            not_before = None

        chain = build_chain(anchor, free, energy, prefs, not_before)
        if chain is None:
            reason = NO_ROOM
            if not_before is not None and build_chain(anchor, free, energy, prefs) is not None:
                reason = TOO_LATE
            logger.warning(
                f"Dropping chain for anchor {anchor.id} ({anchor.title!r}) at "
                f"{anchor.start_time:%H:%M}: {reason}"
            )
            dropped.append(DroppedChain(anchor_id=anchor.id, kind="anchor", reason=reason))
            continue

        logger.debug(
            f"Placed chain {chain.chain_id}: {chain.start:%H:%M}-"
            f"{chain.chain_completion_deadline:%H:%M} ({len(chain.steps)} steps, "
            f"trimmed={chain.trimmed}), wind-down until {chain.wind_down_end:%H:%M}"
        )
        chains.append(with_status(chain, current_time, completed_ids))

    if prefs.evening_routine_enabled:
        evening_free = subtract_spans(free, chain_spans(chains))
        routine = place_evening_routine(wake_time, sleep_time, current_time, prefs, evening_free)
        if routine is None:
            dropped.append(
                DroppedChain(
                    kind="evening_routine",
                    reason="No free time for the evening routine before sleep",
                )
            )
        else:
            chains.append(with_status(routine, current_time, completed_ids))

    return chains, dropped
