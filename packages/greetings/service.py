from __future__ import annotations

from typing import Callable

from sqlalchemy.orm import Session

from packages.greetings.config import GreetingsConfig, load_configured_registry, load_greetings_config
from packages.greetings.content import MascotContentTable
from packages.greetings.history import SqlBrushingHistory
from packages.greetings.predicates import builtin_predicates
from packages.greetings.selector import GreetingSelector


def build_greeting_selector(
    session_factory: Callable[[], Session] | None = None,
    config: GreetingsConfig | None = None,
) -> GreetingSelector:
    config = config or load_greetings_config()
    history = SqlBrushingHistory(session_factory) if session_factory is not None else None
    return GreetingSelector(
        registry=load_configured_registry(config),
        predicates=builtin_predicates(history),
        content=MascotContentTable(config.default_personality),
        timeout=config.predicate_timeout,
    )
