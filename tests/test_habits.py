"""Tests for habit scoring and the habit tracker."""

import json
from datetime import date, timedelta

from planner.domain.entities import Habit
from planner.domain.habits import (
    HABITS_KEY,
    HabitTracker,
    build_dashboard,
    current_streak,
    round_half_up,
    score,
)

AS_OF = date(2025, 6, 15)


def _habit(checkins=(), mastery=0, **overrides):
    values = dict(
        id="h1",
        name="Read",
        created_at_iso="2025-01-01",
        mastery=mastery,
        checkins_iso=tuple(checkins),
    )
    values.update(overrides)
    return Habit(**values)


def _days_back(n, end=AS_OF):
    return [(end - timedelta(days=i)).isoformat() for i in range(n)]


def test_round_half_up():
    """Test halves round away from zero for positive values."""
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_score_without_checkins_is_zero():
    """Test an untouched habit has no momentum."""
    result = score(_habit(), AS_OF)

    assert result.strength == 0
    assert result.streak == 0
    assert result.last7_done == 0
    assert result.last7_rate == 0


def test_score_perfect_habit_is_full():
    """Test 28 straight days and full mastery give full strength."""
    result = score(_habit(_days_back(28), mastery=100), AS_OF)

    assert result.strength == 100
    assert result.streak == 28
    assert result.last7_done == 7
    assert result.last7_rate == 100


def test_score_single_checkin_today():
    """Test the composite for one check-in today."""
    result = score(_habit([AS_OF.isoformat()]), AS_OF)

    assert result.strength == 13
    assert result.streak == 1
    assert result.last7_done == 1
    assert result.last7_rate == 14


def test_three_day_streak():
    """Test consecutive days ending today count as a streak."""
    result = score(_habit(_days_back(3)), AS_OF)

    assert result.streak == 3
    assert result.last7_done == 3


def test_streak_resets_after_missed_day():
    """Test the streak is zero when today has no check-in."""
    checkins = set(_days_back(5, end=AS_OF - timedelta(days=1)))

    assert current_streak(checkins, AS_OF - timedelta(days=1)) == 5
    assert current_streak(checkins, AS_OF) == 0


def test_old_checkins_outside_window_ignored():
    """Test check-ins older than the scoring window do not count."""
    old = _days_back(10, end=AS_OF - timedelta(days=40))

    assert score(_habit(old), AS_OF).strength == 0


def test_score_is_pure():
    """Test scoring does not mutate the habit and repeats exactly."""
    habit = _habit(_days_back(4), mastery=50)

    first = score(habit, AS_OF)
    second = score(habit, AS_OF)

    assert first == second
    assert habit.checkins_iso == tuple(_days_back(4))


def test_strength_grows_with_mastery():
    """Test mastery contributes to strength."""
    checkins = _days_back(3)
    low = score(_habit(checkins, mastery=0), AS_OF).strength
    high = score(_habit(checkins, mastery=100), AS_OF).strength

    assert high - low == 35


def test_empty_dashboard():
    """Test an empty collection has zero overall strength."""
    dashboard = build_dashboard([], AS_OF)

    assert dashboard.computed == ()
    assert dashboard.overall_strength == 0
    assert dashboard.mastered_count == 0


def test_dashboard_summary():
    """Test dashboard aggregates and per-habit weekly progress."""
    habits = [
        _habit(_days_back(28), mastery=100, id="a"),
        _habit(mastery=80, id="b", target_per_week=2),
        _habit(mastery=79, id="c"),
    ]

    dashboard = build_dashboard(habits, AS_OF)

    assert dashboard.mastered_count == 2
    first = dashboard.computed[0]
    assert first.done_today is True
    assert first.week_done == 7
    assert first.compliance == 100
    assert dashboard.computed[1].done_today is False
    assert dashboard.overall_strength == round_half_up(
        sum(c.score.strength for c in dashboard.computed) / 3
    )


def test_compliance_capped():
    """Test weekly compliance never exceeds 200%."""
    habit = _habit(_days_back(7), target_per_week=1)

    summary = build_dashboard([habit], AS_OF).computed[0]

    assert summary.compliance == 200


def test_tracker_add_and_toggle(habit_tracker, memory_storage):
    """Test check-in toggling persists under the habits key."""
    habit = habit_tracker.add("Stretch", target_per_week=5)

    habit_tracker.toggle_checkin(habit.id)
    assert habit_tracker.get(habit.id).checkins_iso == ("2025-06-15",)
    saved = json.loads(memory_storage.get(HABITS_KEY))
    assert saved[0]["checkinsISO"] == ["2025-06-15"]
    assert saved[0]["targetPerWeek"] == 5

    habit_tracker.toggle_checkin(habit.id)
    assert habit_tracker.get(habit.id).checkins_iso == ()


def test_tracker_toggle_specific_day(habit_tracker):
    """Test checking in for a past day keeps check-ins sorted."""
    habit = habit_tracker.add("Stretch")

    habit_tracker.toggle_checkin(habit.id)
    habit_tracker.toggle_checkin(habit.id, on=date(2025, 6, 10))

    assert habit_tracker.get(habit.id).checkins_iso == ("2025-06-10", "2025-06-15")


def test_tracker_set_mastery_clamps(habit_tracker):
    """Test mastery is kept within 0-100."""
    habit = habit_tracker.add("Stretch")

    habit_tracker.set_mastery(habit.id, 150)
    assert habit_tracker.get(habit.id).mastery == 100

    habit_tracker.set_mastery(habit.id, -3)
    assert habit_tracker.get(habit.id).mastery == 0


def test_tracker_remove(habit_tracker):
    """Test removing a habit, and ignoring unknown ids."""
    habit = habit_tracker.add("Stretch")

    habit_tracker.remove("missing")
    assert len(habit_tracker.habits) == 1

    habit_tracker.remove(habit.id)
    assert habit_tracker.habits == []


def test_tracker_load_normalizes_records(memory_storage, clock):
    """Test saved habits are clamped, defaulted and deduplicated."""
    memory_storage.set(HABITS_KEY, json.dumps([
        {
            "id": "h9",
            "frequency": "monthly",
            "targetPerWeek": 12,
            "mastery": -5,
            "checkinsISO": ["2025-06-02", "2025-06-01", "2025-06-02", 7],
        },
        "not a habit",
    ]))

    tracker = HabitTracker(memory_storage, clock=clock)

    assert len(tracker.habits) == 1
    habit = tracker.habits[0]
    assert habit.name == "New habit"
    assert habit.frequency == "daily"
    assert habit.target_per_week == 7
    assert habit.mastery == 0
    assert habit.created_at_iso == "2025-06-15"
    assert habit.checkins_iso == ("2025-06-01", "2025-06-02")


def test_tracker_load_corrupt_data(memory_storage, clock):
    """Test unreadable habit data starts an empty tracker."""
    memory_storage.set(HABITS_KEY, "[{broken")

    tracker = HabitTracker(memory_storage, clock=clock)

    assert tracker.habits == []


def test_tracker_dashboard_defaults_to_now(habit_tracker):
    """Test the dashboard uses the tracker clock when no day is given."""
    habit = habit_tracker.add("Stretch")
    habit_tracker.toggle_checkin(habit.id)

    dashboard = habit_tracker.dashboard()

    assert dashboard.computed[0].done_today is True
    assert dashboard.computed[0].score.streak == 1


def test_tracker_load_keeps_explicit_values(memory_storage, clock):
    """Test stored zero targets and empty names are kept, not defaulted."""
    memory_storage.set(HABITS_KEY, json.dumps([
        {"id": "h1", "name": "", "targetPerWeek": 0, "mastery": 0},
    ]))

    habit = HabitTracker(memory_storage, clock=clock).habits[0]

    assert habit.name == ""
    assert habit.target_per_week == 1
    assert habit.mastery == 0


def test_tracker_load_clamps_infinite_mastery(memory_storage, clock):
    """Test non-finite numbers are clamped instead of failing the load."""
    memory_storage.set(HABITS_KEY, '[{"id": "h1", "name": "x", "mastery": Infinity}]')

    tracker = HabitTracker(memory_storage, clock=clock)

    assert [h.mastery for h in tracker.habits] == [100]


def test_tracker_load_deeply_nested_data(memory_storage, clock):
    """Test data too deeply nested to decode starts an empty tracker."""
    memory_storage.set(HABITS_KEY, "[" * 100000 + "]" * 100000)

    tracker = HabitTracker(memory_storage, clock=clock)

    assert tracker.habits == []
