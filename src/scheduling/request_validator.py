"""
Query parameter validation for the daily chain plan.

Turns the raw query string values into timezone-aware instants in the
user's timezone, filling in defaults from the scheduling preferences.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from typing import FrozenSet, Mapping, Optional, Tuple
from zoneinfo import ZoneInfo

from chain_planner.models import EnergyLevel, SchedulingPreferences
from scheduling.errors import InvalidParameter, InvalidWindow

ENERGY_LEVELS = ("low", "medium", "high")
DEFAULT_ENERGY: EnergyLevel = "medium"


@dataclass(frozen=True)
class ValidatedParams:
    date: date
    wake_time: datetime
    sleep_time: datetime
    energy: EnergyLevel
    current_time: datetime
    completed_ids: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def plan_start(self) -> datetime:
        return max(self.wake_time, self.current_time)

    @property
    def calendar_window(self) -> Tuple[datetime, datetime]:
        """The local day, widened to cover wake and sleep (e.g. a bedtime after midnight)."""
        day_start = datetime.combine(self.date, time(0, 0)).replace(tzinfo=self.wake_time.tzinfo)
        day_end = day_start + timedelta(days=1)
        return min(day_start, self.wake_time), max(day_end, self.sleep_time)


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Attach ``tz`` to naive values, convert aware ones into it."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def parse_date(raw: Optional[str], today: date) -> date:
    if raw is None or not raw.strip():
        return today
    try:
        return datetime.strptime(raw.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidParameter("date", "date must be a valid ISO date string (YYYY-MM-DD)")


def parse_instant(name: str, raw: Optional[str], tz: tzinfo) -> Optional[datetime]:
    if raw is None or not raw.strip():
        return None
    try:
        return localize(datetime.fromisoformat(raw.strip()), tz)
    except ValueError:
        raise InvalidParameter(name, f"{name} must be a valid ISO datetime string")


def parse_energy(raw: Optional[str]) -> EnergyLevel:
    if raw is None or not raw.strip():
        return DEFAULT_ENERGY
    value = raw.strip()
    if value not in ENERGY_LEVELS:
        raise InvalidParameter("energy", "energy must be one of: low, medium, high")
    return value  # type: ignore[return-value]


def parse_completed(raw: Optional[str]) -> FrozenSet[str]:
    if not raw:
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def _at(day: date, t: time, tz: tzinfo) -> datetime:
    return datetime.combine(day, t).replace(tzinfo=tz)


def validate(
    raw_params: Mapping[str, Optional[str]],
    current_time: datetime,
    preferences: Optional[SchedulingPreferences] = None,
) -> ValidatedParams:
    """Validate ``date``, ``wakeTime``, ``sleepTime``, ``energy`` and ``completed``."""
    prefs = preferences or SchedulingPreferences()
    tz = ZoneInfo(prefs.timezone)
    now = localize(current_time, tz)

    day = parse_date(raw_params.get("date"), now.date())

    wake_time = parse_instant("wakeTime", raw_params.get("wakeTime"), tz)
    if wake_time is None:
        wake_time = _at(day, prefs.default_wake_time, tz)

    sleep_time = parse_instant("sleepTime", raw_params.get("sleepTime"), tz)
    if sleep_time is None:
        sleep_time = _at(day, prefs.default_sleep_time, tz)
        if prefs.default_sleep_time <= prefs.default_wake_time:
            # e.g. a 00:30 bedtime belongs to the following night
            sleep_time += timedelta(days=1)

    energy = parse_energy(raw_params.get("energy"))

    if wake_time >= sleep_time:
        raise InvalidWindow(
            f"wakeTime ({wake_time.isoformat()}) must be before sleepTime ({sleep_time.isoformat()})"
        )

    return ValidatedParams(
        date=day,
        wake_time=wake_time,
        sleep_time=sleep_time,
        energy=energy,
        current_time=now,
        completed_ids=parse_completed(raw_params.get("completed")),
    )
