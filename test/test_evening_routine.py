from datetime import time, timedelta

from chain_planner.models import SchedulingPreferences
from conftest import at
from scheduling.intervals import make_interval
from scheduling.request_validator import validate
from scheduling.evening_routine import evening_routine_start, place_evening_routine
from scheduling.status import chain_status


def test_normal_case_waits_for_six_pm():
    routine = place_evening_routine(at("07:00"), at("23:00"), at("17:00"))
    assert routine is not None
    assert routine.start >= at("18:00")
    assert routine.chain_completion_deadline <= at("23:00")
    assert routine.start == at("18:00")


def test_early_sleep_relaxes_six_pm_floor():
    routine = place_evening_routine(at("07:00"), at("17:00"), at("15:00"))
    assert routine is not None
    assert routine.start == at("15:00")
    assert routine.chain_completion_deadline == at("15:20")


def test_tight_schedule_drops_routine():
    assert place_evening_routine(at("07:00"), at("18:10"), at("18:00")) is None


def test_late_generation_starts_immediately():
    routine = place_evening_routine(at("07:00"), at("23:00"), at("21:00"))
    assert routine.start == at("21:00")
    assert routine.chain_completion_deadline == at("21:20")
    assert chain_status(routine, at("21:00")) == "active"


def test_routine_never_starts_before_wake():
    # plan generated before waking up with an early bedtime
    assert evening_routine_start(at("07:00"), at("17:00"), at("05:00")) == at("07:00")


def test_routine_that_exactly_fills_the_gap_is_kept():
    routine = place_evening_routine(at("07:00"), at("18:20"), at("12:00"))
    assert routine is not None
    assert routine.chain_completion_deadline == at("18:20")


def test_custom_duration():
    prefs = SchedulingPreferences(evening_routine_minutes=45)
    routine = place_evening_routine(at("07:00"), at("23:00"), at("10:00"), prefs)
    assert routine.chain_completion_deadline - routine.start == timedelta(minutes=45)
    assert routine.steps[0].duration_minutes == 45
    assert routine.anchor is None
    assert routine.kind == "evening_routine"


def test_bedtime_after_midnight_keeps_six_pm_floor():
    prefs = SchedulingPreferences(default_sleep_time=time(0, 30))
    params = validate({"date": "2025-01-18"}, at("10:00"), prefs)
    assert params.sleep_time == at("00:30", day="2025-01-19")

    routine = place_evening_routine(params.wake_time, params.sleep_time, params.current_time, prefs)
    assert routine.start == at("18:00")
    assert chain_status(routine, at("10:00")) == "pending"


def test_moves_to_next_free_window():
    free = [make_interval(at("07:00"), at("16:00")), make_interval(at("21:30"), at("23:00"))]
    routine = place_evening_routine(at("07:00"), at("23:00"), at("12:00"), free_windows=free)
    assert routine.start == at("21:30")
    assert routine.chain_completion_deadline == at("21:50")


def test_no_free_window_drops_routine():
    free = [make_interval(at("07:00"), at("16:00")), make_interval(at("22:50"), at("23:00"))]
    assert place_evening_routine(at("07:00"), at("23:00"), at("12:00"), free_windows=free) is None
