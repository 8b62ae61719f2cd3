from __future__ import annotations

from datetime import date, datetime
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, validator

from packages.db.database import SessionLocal
from packages.greetings.config import GreetingsConfig, load_greetings_config
from packages.greetings.content import PERSONALITIES, MascotContentTable
from packages.greetings.context import detect_context
from packages.greetings.errors import EmptyRegistryError
from packages.greetings.selector import GreetingSelector
from packages.greetings.service import build_greeting_selector

router = APIRouter()


class GreetingRequest(BaseModel):
    user_id: str | None = None
    personality: str | None = None
    current_time: datetime | None = None
    streak_days: int | None = None
    total_brush_count: int | None = None
    last_brush_date: date | None = None
    brushes_today: int | None = None
    actual_duration_seconds: int | None = None
    target_duration_seconds: int | None = None
    is_first_brush_ever: bool | None = None
    seed: int | None = None
    force_category: str | None = None
    force_subcase: str | None = None

    @validator("personality")
    def validate_personality(cls, value: str | None) -> str | None:
        if value is not None and value not in PERSONALITIES:
            raise ValueError("Unknown personality")
        return value

    @validator("streak_days", "total_brush_count", "brushes_today")
    def validate_counts(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("Counts must be >= 0")
        return value


@lru_cache(maxsize=1)
def get_greetings_config() -> GreetingsConfig:
    return load_greetings_config()


@lru_cache(maxsize=1)
def get_greeting_selector() -> GreetingSelector:
    return build_greeting_selector(SessionLocal, get_greetings_config())


@router.post("/greetings/select")
async def select_greeting(request: GreetingRequest) -> dict[str, Any]:
    selector = get_greeting_selector()
    context = detect_context(
        user_id=request.user_id,
        streak_days=request.streak_days,
        total_brush_count=request.total_brush_count,
        last_brush_date=request.last_brush_date,
        is_first_brush_ever=request.is_first_brush_ever,
        brushes_today=request.brushes_today,
        actual_duration_seconds=request.actual_duration_seconds,
        target_duration_seconds=request.target_duration_seconds,
        now=request.current_time,
        timezone=get_greetings_config().timezone,
    )
    content = MascotContentTable(request.personality) if request.personality else None
    try:
        result = await selector.select(
            context,
            content=content,
            seed=request.seed,
            force_category=request.force_category,
            force_subcase=request.force_subcase,
        )
    except EmptyRegistryError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return {"status": "ok", "greeting": result.as_dict()}


@router.get("/greetings/categories")
def list_categories() -> dict[str, Any]:
    selector = get_greeting_selector()
    return {
        "status": "ok",
        "version": selector.registry.version,
        "items": [
            {
                "id": category.id,
                "name": category.name,
                "base_weight": category.base_weight,
                "subcases": list(category.subcases),
            }
            for category in selector.available_categories()
        ],
    }
