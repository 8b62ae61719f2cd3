from __future__ import annotations

from datetime import timedelta
from typing import Any, Awaitable, Callable, Iterator, Mapping

from packages.greetings.context import GreetingContext
from packages.greetings.history import BrushingHistory

Predicate = Callable[[GreetingContext], "bool | Awaitable[bool]"]

BRUSH_COUNT_MILESTONES = (10, 50, 100)
MONTHLY_BRUSH_TARGET = 20
RETURNING_USER_BREAK_DAYS = 5
DAY_30_WINDOW = (28, 32)
RECOVERY_MIN_LOGS = 10


class PredicateRegistry:
    """Named eligibility predicates referenced by the category table."""

    def __init__(self, predicates: Mapping[str, Predicate] | None = None) -> None:
        self._predicates: dict[str, Predicate] = dict(predicates or {})

    def register(self, name: str, predicate: Predicate) -> None:
        self._predicates[name] = predicate

    def get(self, name: str) -> Predicate | None:
        return self._predicates.get(name)

    def names(self) -> set[str]:
        return set(self._predicates)

    def missing(self, names: set[str]) -> set[str]:
        return names - set(self._predicates)

    def __contains__(self, name: object) -> bool:
        return name in self._predicates

    def __iter__(self) -> Iterator[str]:
        return iter(self._predicates)


# Time of day. Hours come from context.current_time, defaulting to now.

def is_morning(context: GreetingContext) -> bool:
    return 5 <= context.hour() < 12


def is_afternoon(context: GreetingContext) -> bool:
    return 12 <= context.hour() < 19


def is_evening(context: GreetingContext) -> bool:
    return 19 <= context.hour() < 24


def is_late_night(context: GreetingContext) -> bool:
    return 0 <= context.hour() < 5


def is_weekday(context: GreetingContext) -> bool:
    return not context.is_weekend()


def is_weekend(context: GreetingContext) -> bool:
    return context.is_weekend()


# Streak state. Missing streak_days counts as 0.

def is_new_streak(context: GreetingContext) -> bool:
    return context.streak() == 1


def is_almost_week_streak(context: GreetingContext) -> bool:
    return 5 <= context.streak() <= 7


def is_over_ten_day_streak(context: GreetingContext) -> bool:
    return context.streak() >= 10


def is_streak_broken(context: GreetingContext) -> bool:
    return (
        context.streak() == 0
        and context.last_brush_date is not None
        and context.total_brushes() > 1
    )


# Brushing behaviour.

def is_first_brush_ever(context: GreetingContext) -> bool:
    return context.is_first_brush_ever is True


def missed_yesterday(context: GreetingContext) -> bool:
    if context.last_brush_date is None:
        return False
    return context.last_brush_date < context.today() - timedelta(days=1)


def is_back_after_break(context: GreetingContext) -> bool:
    return missed_yesterday(context) and context.total_brushes() > 5


def is_consistent_habit(context: GreetingContext) -> bool:
    return context.streak() >= 7


def is_perfect_week(context: GreetingContext) -> bool:
    streak = context.streak()
    return streak >= 7 and streak % 7 == 0


def is_struggling_consistency(context: GreetingContext) -> bool:
    return context.streak() < 3 and context.total_brushes() > 10


def met_target_duration(context: GreetingContext) -> bool:
    if context.actual_duration_seconds is None or not context.target_duration_seconds:
        return False
    return context.actual_duration_seconds >= context.target_duration_seconds


def brushed_twice_today(context: GreetingContext) -> bool:
    return (context.brushes_today or 0) >= 2


# Milestones answered from the context alone.

def is_brush_count_milestone(context: GreetingContext) -> bool:
    return context.total_brushes() in BRUSH_COUNT_MILESTONES


def is_brush_count_10(context: GreetingContext) -> bool:
    return context.total_brushes() == 10


def is_brush_count_50(context: GreetingContext) -> bool:
    return context.total_brushes() == 50


def is_brush_count_100(context: GreetingContext) -> bool:
    return context.total_brushes() == 100


def is_returning_user_milestone(context: GreetingContext) -> bool:
    days = context.days_since_last_brush()
    if days is None or context.total_brushes() <= 5:
        return False
    return days >= RETURNING_USER_BREAK_DAYS


def always(context: GreetingContext) -> bool:
    return True


def never(context: GreetingContext) -> bool:
    return False


class HistoryPredicates:
    """Predicates that need a BrushingHistory lookup.

    Guests (no user id) never match; provider errors propagate to the
    condition evaluator, which treats them as a non-match.
    """

    def __init__(self, history: BrushingHistory) -> None:
        self.history = history

    async def is_best_streak_reached(self, context: GreetingContext) -> bool:
        user_id = context.known_user_id()
        streak = context.streak()
        if user_id is None or streak < 2:
            return False
        return streak > await self.history.best_streak(user_id)

    async def is_monthly_brush_20(self, context: GreetingContext) -> bool:
        user_id = context.known_user_id()
        if user_id is None:
            return False
        count = await self.history.monthly_brush_count(user_id, context.today())
        return count >= MONTHLY_BRUSH_TARGET

    async def is_brushed_7_of_10(self, context: GreetingContext) -> bool:
        user_id = context.known_user_id()
        if user_id is None:
            return False
        since = context.today() - timedelta(days=10)
        return len(await self.history.brushed_days_since(user_id, since)) >= 7

    async def is_day_7_install(self, context: GreetingContext) -> bool:
        days = await self._days_since_signup(context)
        return days == 7

    async def is_day_30_install(self, context: GreetingContext) -> bool:
        days = await self._days_since_signup(context)
        low, high = DAY_30_WINDOW
        return days is not None and low <= days <= high

    async def is_milestone_streak_recovery(self, context: GreetingContext) -> bool:
        user_id = context.known_user_id()
        streak = context.streak()
        if user_id is None or not (1 <= streak <= 4) or context.total_brushes() < 20:
            return False
        if await self.history.log_count(user_id) < RECOVERY_MIN_LOGS:
            return False
        return await self.history.longest_streak(user_id) >= streak + 5

    async def _days_since_signup(self, context: GreetingContext) -> int | None:
        user_id = context.known_user_id()
        if user_id is None:
            return None
        return await self.history.days_since_signup(user_id, context.today())

    def as_mapping(self) -> dict[str, Predicate]:
        return {
            "is_best_streak_reached": self.is_best_streak_reached,
            "is_monthly_brush_20": self.is_monthly_brush_20,
            "is_brushed_7_of_10": self.is_brushed_7_of_10,
            "is_day_7_install": self.is_day_7_install,
            "is_day_30_install": self.is_day_30_install,
            "is_milestone_streak_recovery": self.is_milestone_streak_recovery,
        }


CONTEXT_PREDICATES: dict[str, Predicate] = {
    "is_morning": is_morning,
    "is_afternoon": is_afternoon,
    "is_evening": is_evening,
    "is_late_night": is_late_night,
    "is_weekday": is_weekday,
    "is_weekend": is_weekend,
    "is_new_streak": is_new_streak,
    "is_almost_week_streak": is_almost_week_streak,
    "is_over_ten_day_streak": is_over_ten_day_streak,
    "is_streak_broken": is_streak_broken,
    "is_first_brush_ever": is_first_brush_ever,
    "missed_yesterday": missed_yesterday,
    "is_back_after_break": is_back_after_break,
    "is_consistent_habit": is_consistent_habit,
    "is_perfect_week": is_perfect_week,
    "is_struggling_consistency": is_struggling_consistency,
    "met_target_duration": met_target_duration,
    "brushed_twice_today": brushed_twice_today,
    "is_brush_count_milestone": is_brush_count_milestone,
    "is_brush_count_10": is_brush_count_10,
    "is_brush_count_50": is_brush_count_50,
    "is_brush_count_100": is_brush_count_100,
    "is_returning_user_milestone": is_returning_user_milestone,
    "always": always,
    "never": never,
}


def builtin_predicates(history: BrushingHistory | None = None, **extra: Any) -> PredicateRegistry:
    """Registry with every context predicate, plus history-backed ones when a provider is given."""
    registry = PredicateRegistry(CONTEXT_PREDICATES)
    if history is not None:
        for name, predicate in HistoryPredicates(history).as_mapping().items():
            registry.register(name, predicate)
    for name, predicate in extra.items():
        registry.register(name, predicate)
    return registry
