from datetime import datetime
from typing import Collection

from chain_planner.models import Chain, ChainStatus


def chain_status(
    chain: Chain,
    current_time: datetime,
    completed_ids: Collection[str] = (),
) -> ChainStatus:
    """Status of a chain as seen at ``current_time``."""
    if chain.chain_id in completed_ids:
        return "completed"
    if current_time < chain.start:
        return "pending"
    if current_time < chain.chain_completion_deadline:
        return "active"
    return "missed"


def with_status(
    chain: Chain,
    current_time: datetime,
    completed_ids: Collection[str] = (),
) -> Chain:
    return chain.model_copy(update={"status": chain_status(chain, current_time, completed_ids)})
