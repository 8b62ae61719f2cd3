from __future__ import annotations

import os
from dataclasses import dataclass

from packages.greetings.categories import default_registry
from packages.greetings.conditions import DEFAULT_PREDICATE_TIMEOUT
from packages.greetings.content import DEFAULT_PERSONALITY
from packages.greetings.registry import CategoryRegistry, load_registry


@dataclass
class GreetingsConfig:
    predicate_timeout: float
    registry_path: str | None
    timezone: str
    default_personality: str


def load_greetings_config() -> GreetingsConfig:
    return GreetingsConfig(
        predicate_timeout=float(
            os.getenv("GREETINGS_PREDICATE_TIMEOUT", str(DEFAULT_PREDICATE_TIMEOUT))
        ),
        registry_path=os.getenv("GREETINGS_REGISTRY_PATH") or None,
        timezone=os.getenv("GREETINGS_TIMEZONE", "UTC"),
        default_personality=os.getenv("GREETINGS_DEFAULT_PERSONALITY", DEFAULT_PERSONALITY),
    )


def load_configured_registry(config: GreetingsConfig) -> CategoryRegistry:
    if config.registry_path:
        return load_registry(config.registry_path)
    return default_registry()
