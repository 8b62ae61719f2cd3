from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

GUEST_USER_ID = "guest"

# 0 = Sunday, matching the numeric day convention used by the mobile client.
DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")
WEEKEND_DAYS = {"saturday", "sunday"}


@dataclass(frozen=True)
class GreetingContext:
    """Snapshot of the user's brushing state for a single selection call.

    Every field is optional. Predicates apply their own defaults, so an empty
    context is valid and simply matches fewer subcases.
    """

    current_time: datetime | None = None
    day_of_week: str | int | None = None
    streak_days: int | None = None
    total_brush_count: int | None = None
    last_brush_date: date | None = None
    brushes_today: int | None = None
    actual_duration_seconds: int | None = None
    target_duration_seconds: int | None = None
    is_first_brush_ever: bool | None = None
    user_id: str | None = None
    timezone: str = "UTC"

    def now(self) -> datetime:
        if self.current_time is not None:
            return self.current_time
        return datetime.now(ZoneInfo(self.timezone))

    def today(self) -> date:
        return self.now().date()

    def day_name(self) -> str:
        day = self.day_of_week
        if isinstance(day, str):
            return day.strip().lower()
        if isinstance(day, int):
            return DAY_NAMES[day % 7]
        # isoweekday(): Monday = 1 ... Sunday = 7
        return DAY_NAMES[self.now().isoweekday() % 7]

    def is_weekend(self) -> bool:
        return self.day_name() in WEEKEND_DAYS

    def hour(self) -> int:
        return self.now().hour

    def streak(self) -> int:
        return self.streak_days or 0

    def total_brushes(self) -> int:
        return self.total_brush_count or 0

    def days_since_last_brush(self) -> int | None:
        if self.last_brush_date is None:
            return None
        return (self.today() - self.last_brush_date).days

    def known_user_id(self) -> str | None:
        """User id usable for history lookups, or None for guests."""
        if not self.user_id or self.user_id == GUEST_USER_ID:
            return None
        return self.user_id


def detect_context(
    user_id: str | None = None,
    streak_days: int | None = None,
    total_brush_count: int | None = None,
    last_brush_date: date | None = None,
    is_first_brush_ever: bool | None = None,
    brushes_today: int | None = None,
    actual_duration_seconds: int | None = None,
    target_duration_seconds: int | None = None,
    now: datetime | None = None,
    timezone: str = "UTC",
) -> GreetingContext:
    current = now or datetime.now(ZoneInfo(timezone))
    if current.tzinfo is None:
        current = current.replace(tzinfo=ZoneInfo(timezone))
    return GreetingContext(
        current_time=current,
        day_of_week=DAY_NAMES[current.isoweekday() % 7],
        streak_days=streak_days,
        total_brush_count=total_brush_count,
        last_brush_date=last_brush_date,
        brushes_today=brushes_today,
        actual_duration_seconds=actual_duration_seconds,
        target_duration_seconds=target_duration_seconds,
        is_first_brush_ever=is_first_brush_ever,
        user_id=user_id,
        timezone=timezone,
    )
