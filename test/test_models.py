from datetime import datetime, time

import pytest
from pydantic import ValidationError

from chain_planner.models import CalendarEvent, Chain, ChainStep, HomeInterval, SchedulingPreferences
from classification.anchor_classifier import to_anchor
from conftest import at, make_event


def test_event_title_defaults_to_empty():
    e = make_event("e1", "09:00", "10:00", title=None)
    assert e.title == ""


def test_home_interval_serialises_duration():
    hi = HomeInterval(start=at("07:00"), end=at("09:00"), duration_minutes=120)
    assert hi.model_dump(by_alias=True)["duration"] == 120
    assert hi.contains(at("07:30"), at("09:00"))
    assert not hi.contains(at("06:59"), at("08:00"))


def test_home_interval_rejects_inverted_bounds():
    with pytest.raises(ValidationError):
        HomeInterval(start=at("09:00"), end=at("08:00"))


def test_chain_steps_must_be_strictly_ordered():
    with pytest.raises(ValidationError):
        Chain(
            chain_id="x",
            steps=[
                ChainStep(name="a", duration_minutes=5, order=0),
                ChainStep(name="b", duration_minutes=5, order=0),
            ],
            start=at("07:00"),
            chain_completion_deadline=at("07:10"),
        )


def test_chain_deadline_cannot_pass_anchor_start():
    anchor = to_anchor(make_event("a", "09:00", "10:00", location="Room 1"))
    with pytest.raises(ValidationError):
        Chain(
            chain_id="chain-a",
            anchor=anchor,
            steps=[ChainStep(name="Commute", duration_minutes=30, order=0)],
            start=at("08:45"),
            chain_completion_deadline=at("09:15"),
        )


def test_preferences_defaults():
    p = SchedulingPreferences()
    assert p.timezone == "Europe/London"
    assert p.default_wake_time == time(7, 0)
    assert p.default_sleep_time == time(23, 0)
    assert p.chain_policy == "must_attend"
    assert p.evening_routine_minutes == 20


@pytest.mark.parametrize("tz", ["", "Mars/Olympus_Mons"])
def test_preferences_reject_unknown_timezone(tz):
    with pytest.raises(ValidationError):
        SchedulingPreferences(timezone=tz)


def test_event_times_must_be_timezone_aware():
    with pytest.raises(ValidationError):
        CalendarEvent(
            id="naive",
            title="Lecture",
            start_time=datetime(2025, 1, 18, 9, 0),
            end_time=datetime(2025, 1, 18, 10, 0),
        )


def test_wind_down_cannot_end_before_anchor():
    anchor = to_anchor(make_event("a", "09:00", "10:00", location="Room 1"))
    with pytest.raises(ValidationError):
        Chain(
            chain_id="chain-a",
            anchor=anchor,
            steps=[ChainStep(name="Commute", duration_minutes=30, order=0)],
            start=at("08:30"),
            chain_completion_deadline=at("09:00"),
            wind_down_end=at("09:30"),
        )
