from datetime import date, datetime, timedelta, timezone

from fastapi.testclient import TestClient

from apps.api.app.main import app
from apps.api.app.routers import greetings as greetings_router
from packages.db.database import SessionLocal
from packages.db.models import AppUser, BrushingLog
from packages.greetings.predicates import builtin_predicates
from packages.greetings.registry import CategoryRegistry
from packages.greetings.selector import GreetingSelector

client = TestClient(app)


def test_health() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_select_streak_broken_greeting() -> None:
    payload = {
        "user_id": "guest",
        "personality": "wise",
        "current_time": "2025-01-08T21:00:00+00:00",
        "streak_days": 0,
        "last_brush_date": "2024-12-29",
        "total_brush_count": 5,
        "force_category": "streak_state",
        "seed": 11,
    }

    response = client.post("/greetings/select", json=payload)

    assert response.status_code == 200
    greeting = response.json()["greeting"]
    assert greeting["category_id"] == "streak_state"
    assert greeting["subcase_id"] == "streak_broken"
    assert greeting["content_key"] == "mascotGreetings.v2.wise.streak_state.streak_broken.1"
    assert greeting["visual_variant_key"] == "nubo-wise-1"
    assert greeting["is_fallback"] is False


def test_select_uses_brushing_history() -> None:
    today = date(2025, 1, 20)
    with SessionLocal() as session:
        session.add(
            AppUser(
                id="u-7",
                best_streak=0,
                created_at=datetime(2025, 1, 13, 9, 0, tzinfo=timezone.utc),
            )
        )
        session.flush()
        for offset in range(3):
            session.add(BrushingLog(user_id="u-7", brushed_on=today - timedelta(days=offset)))
        session.commit()

    payload = {
        "user_id": "u-7",
        "current_time": "2025-01-20T08:00:00+00:00",
        "streak_days": 3,
        "total_brush_count": 3,
        "force_category": "milestone_enhancements",
        "seed": 5,
    }
    response = client.post("/greetings/select", json=payload)

    assert response.status_code == 200
    greeting = response.json()["greeting"]
    assert greeting["subcase_id"] == "day_7"
    assert greeting["sub_condition_id"] == "day_7"


def test_select_rejects_unknown_personality() -> None:
    response = client.post("/greetings/select", json={"personality": "grumpy"})
    assert response.status_code == 422


def test_select_reports_empty_registry(monkeypatch) -> None:
    empty = GreetingSelector(CategoryRegistry([]), builtin_predicates())
    monkeypatch.setattr(greetings_router, "get_greeting_selector", lambda: empty)

    response = client.post("/greetings/select", json={})

    assert response.status_code == 503


def test_list_categories() -> None:
    response = client.get("/greetings/categories")
    assert response.status_code == 200
    ids = [item["id"] for item in response.json()["items"]]
    assert "time_context" in ids
    assert "brushing_behaviour" not in ids
