import asyncio
from datetime import date, datetime, timedelta, timezone

from packages.db.database import SessionLocal
from packages.db.models import AppUser, BrushingLog
from packages.greetings.history import SqlBrushingHistory, longest_run

TODAY = date(2025, 1, 20)


def _seed(user_id: str, days: list[date], best_streak: int = 0, signup: date | None = None) -> None:
    with SessionLocal() as session:
        created = datetime.combine(signup or TODAY, datetime.min.time(), tzinfo=timezone.utc)
        session.add(AppUser(id=user_id, best_streak=best_streak, created_at=created))
        session.flush()
        for day in days:
            session.add(BrushingLog(user_id=user_id, brushed_on=day, session_index=1, duration_seconds=120))
        session.commit()


def test_longest_run_counts_consecutive_days() -> None:
    days = [date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 2), date(2025, 1, 3), date(2025, 1, 10)]
    assert longest_run(days) == 3
    assert longest_run([]) == 0


def test_monthly_count_and_recent_days() -> None:
    days = [TODAY - timedelta(days=offset) for offset in range(25)]
    _seed("u-1", days, best_streak=9, signup=TODAY - timedelta(days=30))
    history = SqlBrushingHistory(SessionLocal)

    assert asyncio.run(history.monthly_brush_count("u-1", TODAY)) == 20
    assert len(asyncio.run(history.brushed_days_since("u-1", TODAY - timedelta(days=10)))) == 11
    assert asyncio.run(history.best_streak("u-1")) == 9
    assert asyncio.run(history.longest_streak("u-1")) == 25
    assert asyncio.run(history.log_count("u-1")) == 25
    assert asyncio.run(history.days_since_signup("u-1", TODAY)) == 30


def test_unknown_user_has_no_history() -> None:
    history = SqlBrushingHistory(SessionLocal)
    assert asyncio.run(history.best_streak("missing")) == 0
    assert asyncio.run(history.longest_streak("missing")) == 0
    assert asyncio.run(history.log_count("missing")) == 0
    assert asyncio.run(history.days_since_signup("missing", TODAY)) is None
    assert asyncio.run(history.brushed_days_since("missing", TODAY)) == set()
