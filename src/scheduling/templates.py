"""
Preparation step templates per anchor type.

Steps are listed earliest first and end when the person is ready to leave.
The energy buffer and the commute are appended by the chain builder.
"""

from typing import Dict, List, NamedTuple

from chain_planner.models import AnchorType, EnergyLevel


class StepTemplate(NamedTuple):
    name: str
    duration_minutes: int
    required: bool = True


_BASE_PREP: List[StepTemplate] = [
    StepTemplate("Bathroom", 10),
    StepTemplate("Hygiene (brush teeth)", 5),
    StepTemplate("Shower", 15, required=False),
    StepTemplate("Get dressed", 10),
    StepTemplate("Pack bag", 10),
    StepTemplate("Exit readiness check", 2),
]


def _with_review(label: str) -> List[StepTemplate]:
    steps = list(_BASE_PREP)
    # review goes right before packing the bag
    steps.insert(4, StepTemplate(f"Review {label} materials", 15, required=False))
    return steps


CHAIN_TEMPLATES: Dict[AnchorType, List[StepTemplate]] = {
    "class": list(_BASE_PREP),
    "seminar": _with_review("seminar"),
    "workshop": _with_review("workshop"),
    "appointment": [
        StepTemplate("Bathroom", 10),
        StepTemplate("Hygiene (brush teeth)", 5),
        StepTemplate("Get dressed", 10),
        StepTemplate("Pack bag", 10),
        StepTemplate("Exit readiness check", 2),
    ],
    "generic": list(_BASE_PREP),
}

# Low energy needs more slack between getting ready and leaving.
BUFFER_MINUTES: Dict[EnergyLevel, int] = {
    "low": 20,
    "medium": 10,
    "high": 5,
}


def get_chain_template(anchor_type: AnchorType) -> List[StepTemplate]:
    return CHAIN_TEMPLATES.get(anchor_type, CHAIN_TEMPLATES["generic"])


def template_duration(steps: List[StepTemplate]) -> int:
    return sum(s.duration_minutes for s in steps)


def minimum_duration(steps: List[StepTemplate]) -> int:
    return sum(s.duration_minutes for s in steps if s.required)


# Recovery after an anchor, longer for anchors of two hours or more.
RECOVERY_SHORT_MINUTES = 10
RECOVERY_LONG_MINUTES = 20
LONG_ANCHOR_MINUTES = 120


def recovery_minutes(anchor_minutes: int) -> int:
    if anchor_minutes >= LONG_ANCHOR_MINUTES:
        return RECOVERY_LONG_MINUTES
    return RECOVERY_SHORT_MINUTES
