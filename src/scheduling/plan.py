from datetime import date
from typing import List, Optional, Sequence

from chain_planner.models import (
    Anchor,
    Chain,
    DailyPlanResponse,
    DroppedChain,
    HomeInterval,
    WakeRamp,
)


def chain_sort_key(chain: Chain):
    if chain.anchor is not None:
        return chain.anchor.start_time
    return chain.start


def assemble(
    day: date,
    anchors: Sequence[Anchor],
    chains: Sequence[Chain],
    home_intervals: Sequence[HomeInterval],
    wake_ramp: Optional[WakeRamp],
    dropped: Sequence[DroppedChain] = (),
    calendar_available: bool = True,
) -> DailyPlanResponse:
    """Compose the response. Chains follow their anchors' start order."""
    ordered: List[Chain] = sorted(chains, key=chain_sort_key)
    return DailyPlanResponse(
        date=day.isoformat(),
        anchors=list(anchors),
        chains=ordered,
        home_intervals=list(home_intervals),
        wake_ramp=wake_ramp,
        dropped=list(dropped),
        calendar_available=calendar_available,
    )


def to_payload(plan: DailyPlanResponse) -> dict:
    """JSON-ready dict with the wire field names."""
    return plan.model_dump(mode="json", by_alias=True)
