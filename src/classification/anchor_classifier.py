import logging
from typing import Iterable, List, Sequence, Tuple

from chain_planner.models import Anchor, AnchorType, CalendarEvent

logger = logging.getLogger(__name__)

# First match wins. Workshop is checked before class so that
# "Workshop: lecture capture" stays a workshop.
KEYWORD_RULES: Sequence[Tuple[AnchorType, Tuple[str, ...]]] = (
    ("workshop", ("workshop",)),
    ("class", ("lecture", "class", "tutorial")),
    ("seminar", ("seminar",)),
    ("appointment", ("appointment", "doctor", "dentist")),
)


def classify(event: CalendarEvent) -> AnchorType:
    """Best-effort anchor type from the event title and description."""
    text = f"{event.title or ''} {event.description or ''}".lower()

    for anchor_type, keywords in KEYWORD_RULES:
        if any(keyword in text for keyword in keywords):
            return anchor_type
    return "generic"


def has_location(event: CalendarEvent) -> bool:
    return event.location is not None and len(event.location.strip()) > 0


def to_anchor(event: CalendarEvent) -> Anchor:
    anchor_type = classify(event)
    must_attend = has_location(event)

    logger.debug(
        f"Classified event {event.id} ({event.title!r}) as {anchor_type}, "
        f"must_attend={must_attend}"
    )

    return Anchor(
        id=event.id,
        title=event.title,
        type=anchor_type,
        location=event.location.strip() if must_attend else None,
        start_time=event.start_time,
        end_time=event.end_time,
        must_attend=must_attend,
    )


def sort_anchors(anchors: Iterable[Anchor]) -> List[Anchor]:
    # sorted() is stable, so ties keep their original order
    return sorted(anchors, key=lambda a: a.start_time)


class AnchorClassifier:
    """Turns the day's calendar events into anchors, earliest first."""

    def classify(self, events: Iterable[CalendarEvent]) -> List[Anchor]:
        return sort_anchors(to_anchor(e) for e in events)
