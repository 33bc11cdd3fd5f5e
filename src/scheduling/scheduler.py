import logging
from typing import Optional, Sequence

from chain_planner.models import CalendarEvent, DailyPlanResponse, SchedulingPreferences
from classification.anchor_classifier import AnchorClassifier
from scheduling.chain_builder import build_chains, chain_spans, wind_down_spans
from scheduling.intervals import compute_home_intervals
from scheduling.plan import assemble
from scheduling.request_validator import ValidatedParams
from scheduling.wake_ramp import generate_wake_ramp

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Deterministic daily chain scheduler.

    Pure: everything it needs, including the current time (inside ``params``),
    is passed in. Fetching events is the caller's job.
    """

    def __init__(self, preferences: Optional[SchedulingPreferences] = None):
        self.preferences = preferences or SchedulingPreferences()
        self.classifier = AnchorClassifier()

    def schedule(
        self,
        events: Sequence[CalendarEvent],
        params: ValidatedParams,
        calendar_available: bool = True,
    ) -> DailyPlanResponse:
        anchors = self.classifier.classify(events)

        home_intervals = compute_home_intervals(params.wake_time, params.sleep_time, anchors)

        chains, dropped = build_chains(
            anchors,
            home_intervals,
            params.wake_time,
            params.sleep_time,
            params.current_time,
            energy=params.energy,
            preferences=self.preferences,
            completed_ids=params.completed_ids,
        )

        wake_ramp = None
        if self.preferences.wake_ramp_enabled:
            wake_ramp = generate_wake_ramp(
                params.plan_start,
                params.wake_time,
                params.energy,
                anchors=anchors,
                sleep_time=params.sleep_time,
                busy=chain_spans(chains) + wind_down_spans(anchors, self.preferences),
            )

        plan = assemble(
            params.date,
            anchors,
            chains,
            home_intervals,
            wake_ramp,
            dropped=dropped,
            calendar_available=calendar_available,
        )

        logger.info(
            f"Plan for {plan.date}: {len(anchors)} anchors, {len(plan.chains)} chains, "
            f"{len(dropped)} dropped, {len(home_intervals)} home intervals, "
            f"wake ramp {'on' if wake_ramp else 'skipped'}"
        )
        return plan
