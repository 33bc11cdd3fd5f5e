from __future__ import annotations

from datetime import datetime, time
from typing import Literal, Optional, List, Dict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


AnchorType = Literal["class", "appointment", "workshop", "seminar", "generic"]

EnergyLevel = Literal["low", "medium", "high"]

ChainStatus = Literal["pending", "active", "missed", "completed"]

ChainPolicy = Literal["must_attend", "all"]


class CalendarEvent(BaseModel):
    """Read-only event as delivered by the calendar collaborator."""

    id: str
    title: str = ""
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: datetime
    end_time: datetime

    @field_validator("title", mode="before")
    @classmethod
    def title_none_to_empty(cls, v):
        return v if v is not None else ""

    @model_validator(mode="after")
    def times_are_aware(self) -> "CalendarEvent":
        if self.start_time.tzinfo is None or self.end_time.tzinfo is None:
            raise ValueError("event start_time and end_time must be timezone-aware")
        return self


class Anchor(BaseModel):
    id: str
    title: str
    type: AnchorType = "generic"
    location: Optional[str] = None
    start_time: datetime
    end_time: datetime
    must_attend: bool = False

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)


class HomeInterval(BaseModel):
    # wire name is "duration"
    model_config = ConfigDict(populate_by_name=True)

    start: datetime
    end: datetime
    duration_minutes: int = Field(0, ge=0, serialization_alias="duration")

    @model_validator(mode="after")
    def end_not_before_start(self) -> "HomeInterval":
        if self.end < self.start:
            raise ValueError("interval end must not precede its start")
        return self

    def contains(self, start: datetime, end: datetime) -> bool:
        return self.start <= start and end <= self.end


class ChainStep(BaseModel):
    name: str = Field(..., min_length=1)
    duration_minutes: int = Field(..., ge=0)
    order: int = Field(..., ge=0)
    required: bool = True


class Chain(BaseModel):
    chain_id: str
    kind: Literal["anchor", "evening_routine"] = "anchor"
    anchor: Optional[Anchor] = None
    steps: List[ChainStep] = Field(default_factory=list)
    start: datetime
    chain_completion_deadline: datetime
    status: ChainStatus = "pending"
    trimmed: bool = False
    # travel back and recovery after the anchor ends
    wind_down: List[ChainStep] = Field(default_factory=list)
    wind_down_end: Optional[datetime] = None

    @field_validator("steps", "wind_down")
    @classmethod
    def steps_strictly_ordered(cls, v: List[ChainStep]) -> List[ChainStep]:
        orders = [s.order for s in v]
        if any(b <= a for a, b in zip(orders, orders[1:])):
            raise ValueError("step order must be strictly increasing")
        return v

    @model_validator(mode="after")
    def deadline_within_anchor(self) -> "Chain":
        if self.start > self.chain_completion_deadline:
            raise ValueError("chain cannot start after its completion deadline")
        if self.anchor is not None and self.chain_completion_deadline > self.anchor.start_time:
            raise ValueError("chain deadline must not exceed the anchor start")
        if self.anchor is not None and self.wind_down_end is not None:
            if self.wind_down_end < self.anchor.end_time:
                raise ValueError("wind-down cannot end before the anchor does")
        return self

    @property
    def total_minutes(self) -> int:
        return sum(s.duration_minutes for s in self.steps)


class WakeRamp(BaseModel):
    start: datetime
    end: datetime
    duration_minutes: int = Field(..., ge=0)
    # toilet / hygiene / shower / dress / buffer
    components: Dict[str, int] = Field(default_factory=dict)


class DroppedChain(BaseModel):
    anchor_id: Optional[str] = None
    kind: Literal["anchor", "evening_routine"] = "anchor"
    reason: str


class DailyPlanResponse(BaseModel):
    date: str
    anchors: List[Anchor] = Field(default_factory=list)
    chains: List[Chain] = Field(default_factory=list)
    home_intervals: List[HomeInterval] = Field(default_factory=list)
    wake_ramp: Optional[WakeRamp] = None
    dropped: List[DroppedChain] = Field(default_factory=list)
    calendar_available: bool = True


class SchedulingPreferences(BaseModel):
    timezone: str = "Europe/London"

    default_wake_time: time = Field(default_factory=lambda: time(7, 0))
    default_sleep_time: time = Field(default_factory=lambda: time(23, 0))

    chain_policy: ChainPolicy = "must_attend"
    commute_minutes: int = Field(30, ge=0)

    evening_routine_enabled: bool = True
    evening_routine_earliest: time = Field(default_factory=lambda: time(18, 0))
    evening_routine_minutes: int = Field(20, gt=0)

    wake_ramp_enabled: bool = True

    @field_validator("timezone")
    @classmethod
    def timezone_known(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("timezone must not be blank")
        try:
            ZoneInfo(v2)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown timezone: {v2}")
        return v2
