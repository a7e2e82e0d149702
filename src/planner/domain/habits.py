"""Habit momentum scoring and the habit tracker.

Scores are derived from the last 28 local calendar days of check-ins:

    strength = 100 * clamp(0.45 * ema
                           + 0.35 * mastery / 100
                           + 0.20 * (0.6 * last7_rate + 0.4 * streak_bonus), 0, 1)

where ``ema`` is an exponential moving average (alpha 0.22, seeded at 0,
oldest day first) of the 0/1 check-in series and ``streak_bonus`` is
``1 - exp(-streak / 6)``. Scoring is pure: it never mutates the habit and
the only notion of "now" is the ``as_of`` argument.
"""

import json
import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, UTC
from typing import Any, Callable, Optional, Sequence

from planner.database.base import Storage
from planner.domain.entities import Habit, HabitFrequency
from planner.domain.errors import StorageError
from planner.utils.date_parser import DateLike, last_n_days_iso, local_date
from planner.utils.ids import new_id

logger = logging.getLogger(__name__)

HABITS_KEY = "planner.statistics.habits.v1"

WINDOW_DAYS = 28
EMA_ALPHA = 0.22
STREAK_CAP = 365
STREAK_DECAY = 6
EMA_WEIGHT = 0.45
MASTERY_WEIGHT = 0.35
SHORT_TERM_WEIGHT = 0.20
MASTERED_THRESHOLD = 80


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class HabitScore:
    """Derived momentum metrics for one habit."""

    strength: int
    streak: int
    last7_done: int
    last7_rate: int


@dataclass(frozen=True)
class HabitSummary:
    """Habit together with its score and this week's progress."""

    habit: Habit
    score: HabitScore
    done_today: bool
    week_done: int
    compliance: int


@dataclass(frozen=True)
class HabitDashboard:
    """View model over a habit collection."""

    computed: tuple[HabitSummary, ...]
    overall_strength: int
    mastered_count: int


def current_streak(checkins: set[str], as_of: DateLike) -> int:
    """Count consecutive checked-in days ending on as_of."""
    cursor = local_date(as_of)
    streak = 0
    while cursor.isoformat() in checkins and streak < STREAK_CAP:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def score(habit: Habit, as_of: DateLike) -> HabitScore:
    """Compute a habit's momentum as of a given day.

    Args:
        habit: Habit to score
        as_of: Reference instant; its local calendar day is "today"

    Returns:
        HabitScore with strength 0-100, streak, last-7 count and rate (%)
    """
    checkins = set(habit.checkins_iso)

    ema = 0.0
    for day in last_n_days_iso(WINDOW_DAYS, as_of):
        x = 1.0 if day in checkins else 0.0
        ema = EMA_ALPHA * x + (1 - EMA_ALPHA) * ema

    streak = current_streak(checkins, as_of)
    last7_done = sum(1 for day in last_n_days_iso(7, as_of) if day in checkins)
    last7_rate = last7_done / 7

    streak_bonus = 1 - math.exp(-streak / STREAK_DECAY)
    mastery = habit.mastery / 100
    composite = (
        EMA_WEIGHT * ema
        + MASTERY_WEIGHT * mastery
        + SHORT_TERM_WEIGHT * (0.6 * last7_rate + 0.4 * streak_bonus)
    )
    strength = 100 * clamp(composite, 0, 1)

    return HabitScore(
        strength=round_half_up(strength),
        streak=streak,
        last7_done=last7_done,
        last7_rate=round_half_up(last7_rate * 100),
    )


def overall_strength(scores: Sequence[HabitScore]) -> int:
    """Mean strength across habits, 0 for none."""
    if not scores:
        return 0
    return round_half_up(sum(s.strength for s in scores) / len(scores))


def mastered_count(habits: Sequence[Habit]) -> int:
    return sum(1 for h in habits if h.mastery >= MASTERED_THRESHOLD)


def summarize(habit: Habit, as_of: DateLike) -> HabitSummary:
    """Score a habit and add today's/this week's completion."""
    checkins = set(habit.checkins_iso)
    week_done = sum(1 for day in last_n_days_iso(7, as_of) if day in checkins)
    target = clamp(habit.target_per_week, 1, 7)
    compliance = round_half_up(week_done / target * 100)
    return HabitSummary(
        habit=habit,
        score=score(habit, as_of),
        done_today=local_date(as_of).isoformat() in checkins,
        week_done=week_done,
        compliance=int(clamp(compliance, 0, 200)),
    )


def build_dashboard(habits: Sequence[Habit], as_of: DateLike) -> HabitDashboard:
    """Compute the habit view model for as_of."""
    computed = tuple(summarize(h, as_of) for h in habits)
    return HabitDashboard(
        computed=computed,
        overall_strength=overall_strength([c.score for c in computed]),
        mastered_count=mastered_count(habits),
    )


def _bounded_int(value: Any, default: int, low: int, high: int) -> int:
    if value is None:
        return default
    return int(clamp(float(value), low, high))


def habit_from_record(record: dict[str, Any], today: date) -> Habit:
    """Normalize a stored habit record, filling and clamping fields."""
    checkins = record.get("checkinsISO")
    if not isinstance(checkins, list):
        checkins = []
    name = record.get("name")
    description = record.get("description")
    created = record.get("createdAtISO")
    return Habit(
        id=str(record.get("id") or new_id("h")),
        name="New habit" if name is None else str(name),
        description=description if isinstance(description, str) else "",
        frequency=(
            HabitFrequency.WEEKLY.value
            if record.get("frequency") == HabitFrequency.WEEKLY.value
            else HabitFrequency.DAILY.value
        ),
        target_per_week=_bounded_int(record.get("targetPerWeek"), 7, 1, 7),
        mastery=_bounded_int(record.get("mastery"), 0, 0, 100),
        created_at_iso=created if isinstance(created, str) else today.isoformat(),
        checkins_iso=tuple(sorted({c for c in checkins if isinstance(c, str)})),
    )


def habit_to_record(habit: Habit) -> dict[str, Any]:
    return {
        "id": habit.id,
        "name": habit.name,
        "description": habit.description,
        "frequency": habit.frequency,
        "targetPerWeek": habit.target_per_week,
        "mastery": habit.mastery,
        "createdAtISO": habit.created_at_iso,
        "checkinsISO": list(habit.checkins_iso),
    }


class HabitTracker:
    """Owns the habit collection and its storage key."""

    def __init__(self, storage: Storage, clock: Optional[Callable[[], datetime]] = None):
        """Initialize the tracker and load saved habits.

        Args:
            storage: Durable storage port
            clock: Optional source of the current time
        """
        self.storage = storage
        self._clock = clock or (lambda: datetime.now(UTC))
        self.habits: list[Habit] = self._load()

    def today(self) -> date:
        return local_date(self._clock())

    def get(self, habit_id: str) -> Optional[Habit]:
        for habit in self.habits:
            if habit.id == habit_id:
                return habit
        return None

    def add(
        self,
        name: str,
        description: str = "",
        frequency: str = HabitFrequency.DAILY.value,
        target_per_week: int = 7,
        mastery: int = 0,
    ) -> Habit:
        """Create a habit with no check-ins."""
        habit = Habit(
            id=new_id("h"),
            name=name,
            description=description,
            frequency=HabitFrequency(frequency).value,
            target_per_week=int(clamp(target_per_week, 1, 7)),
            mastery=int(clamp(mastery, 0, 100)),
            created_at_iso=self.today().isoformat(),
        )
        self.habits = self.habits + [habit]
        self._save()
        return habit

    def toggle_checkin(self, habit_id: str, on: Optional[DateLike] = None) -> None:
        """Check in (or undo the check-in) for a day, today by default."""
        day = local_date(on) if on is not None else self.today()
        iso = day.isoformat()

        def toggle(habit: Habit) -> Habit:
            checkins = set(habit.checkins_iso)
            if iso in checkins:
                checkins.remove(iso)
            else:
                checkins.add(iso)
            return replace(habit, checkins_iso=tuple(sorted(checkins)))

        self._update(habit_id, toggle)

    def set_mastery(self, habit_id: str, value: float) -> None:
        """Set self-reported mastery, clamped to 0-100."""
        self._update(habit_id, lambda h: replace(h, mastery=int(clamp(value, 0, 100))))

    def remove(self, habit_id: str) -> None:
        if self.get(habit_id) is None:
            return
        self.habits = [h for h in self.habits if h.id != habit_id]
        self._save()

    def dashboard(self, as_of: Optional[DateLike] = None) -> HabitDashboard:
        """Compute the view model, as of now by default."""
        return build_dashboard(self.habits, as_of if as_of is not None else self._clock())

    def _update(self, habit_id: str, change: Callable[[Habit], Habit]) -> None:
        if self.get(habit_id) is None:
            return
        self.habits = [change(h) if h.id == habit_id else h for h in self.habits]
        self._save()

    def _load(self) -> list[Habit]:
        try:
            raw = self.storage.get(HABITS_KEY)
        except StorageError as e:
            logger.warning("Failed to read %s: %s", HABITS_KEY, e)
            return []
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
            if not isinstance(parsed, list):
                raise TypeError("expected a list of habits")
            today = self.today()
            return [habit_from_record(r, today) for r in parsed if isinstance(r, dict)]
        except (TypeError, ValueError, OverflowError, RecursionError) as e:
            logger.warning("Failed to load %s, starting empty: %s", HABITS_KEY, e)
            return []

    def _save(self) -> None:
        payload = json.dumps([habit_to_record(h) for h in self.habits])
        try:
            self.storage.set(HABITS_KEY, payload)
        except StorageError as e:
            logger.error("Failed to save %s: %s", HABITS_KEY, e)
