from __future__ import annotations

import asyncio
from datetime import date, timedelta
from typing import Callable, Protocol

from sqlalchemy import func
from sqlalchemy.orm import Session

from packages.db.models import AppUser, BrushingLog


class BrushingHistory(Protocol):
    async def best_streak(self, user_id: str) -> int: ...

    async def longest_streak(self, user_id: str) -> int: ...

    async def log_count(self, user_id: str) -> int: ...

    async def monthly_brush_count(self, user_id: str, today: date) -> int: ...

    async def days_since_signup(self, user_id: str, today: date) -> int | None: ...

    async def brushed_days_since(self, user_id: str, since: date) -> set[date]: ...


class SqlBrushingHistory:
    """BrushingHistory backed by the brushing_logs and app_users tables.

    Queries are synchronous SQLAlchemy calls pushed to a worker thread so that
    sibling predicates awaiting this provider run concurrently.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.session_factory = session_factory

    async def best_streak(self, user_id: str) -> int:
        return await asyncio.to_thread(self._best_streak, user_id)

    async def longest_streak(self, user_id: str) -> int:
        return await asyncio.to_thread(self._longest_streak, user_id)

    async def log_count(self, user_id: str) -> int:
        return await asyncio.to_thread(self._log_count, user_id)

    async def monthly_brush_count(self, user_id: str, today: date) -> int:
        return await asyncio.to_thread(self._monthly_brush_count, user_id, today)

    async def days_since_signup(self, user_id: str, today: date) -> int | None:
        return await asyncio.to_thread(self._days_since_signup, user_id, today)

    async def brushed_days_since(self, user_id: str, since: date) -> set[date]:
        return await asyncio.to_thread(self._brushed_days_since, user_id, since)

    def _best_streak(self, user_id: str) -> int:
        with self.session_factory() as session:
            user = session.get(AppUser, user_id)
            return user.best_streak if user is not None else 0

    def _longest_streak(self, user_id: str) -> int:
        with self.session_factory() as session:
            rows = (
                session.query(BrushingLog.brushed_on)
                .filter(BrushingLog.user_id == user_id)
                .distinct()
                .order_by(BrushingLog.brushed_on.asc())
                .all()
            )
        return longest_run([row.brushed_on for row in rows])

    def _log_count(self, user_id: str) -> int:
        with self.session_factory() as session:
            return (
                session.query(func.count(BrushingLog.id))
                .filter(BrushingLog.user_id == user_id)
                .scalar()
                or 0
            )

    def _monthly_brush_count(self, user_id: str, today: date) -> int:
        month_start = today.replace(day=1)
        with self.session_factory() as session:
            return (
                session.query(func.count(BrushingLog.id))
                .filter(
                    BrushingLog.user_id == user_id,
                    BrushingLog.brushed_on >= month_start,
                    BrushingLog.brushed_on <= today,
                )
                .scalar()
                or 0
            )

    def _days_since_signup(self, user_id: str, today: date) -> int | None:
        with self.session_factory() as session:
            user = session.get(AppUser, user_id)
            if user is None:
                return None
            return (today - user.created_at.date()).days

    def _brushed_days_since(self, user_id: str, since: date) -> set[date]:
        with self.session_factory() as session:
            rows = (
                session.query(BrushingLog.brushed_on)
                .filter(BrushingLog.user_id == user_id, BrushingLog.brushed_on >= since)
                .distinct()
                .all()
            )
        return {row.brushed_on for row in rows}


def longest_run(days: list[date]) -> int:
    """Length of the longest run of consecutive calendar days in sorted input."""
    best = 0
    current = 0
    previous: date | None = None
    for day in days:
        if previous is not None and day == previous:
            continue
        if previous is not None and day - previous == timedelta(days=1):
            current += 1
        else:
            current = 1
        best = max(best, current)
        previous = day
    return best
