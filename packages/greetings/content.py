from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Collection, Mapping, Protocol

logger = logging.getLogger(__name__)

KEY_PREFIX = "mascotGreetings.v2"
TEXT_VARIANTS = (1, 2)

PERSONALITIES = ("supportive", "playful", "cool", "wise")
DEFAULT_PERSONALITY = "supportive"

VISUAL_VARIANTS = {
    "supportive": "nubo-welcoming-1",
    "playful": "nubo-welcoming-wave",
    "cool": "nubo-cool-3",
    "wise": "nubo-wise-1",
}
COOL_POSES = ("nubo-cool-1", "nubo-cool-2", "nubo-cool-3", "nubo-cool-4")


@dataclass(frozen=True)
class Leaf:
    category_id: str
    subcase_id: str | None
    sub_condition_id: str | None = None

    @property
    def path(self) -> str:
        return ".".join(part for part in (self.category_id, self.subcase_id, self.sub_condition_id) if part)


@dataclass(frozen=True)
class ContentChoice:
    content_key: str
    visual_variant_key: str


class ContentTable(Protocol):
    def resolve(self, leaf: Leaf, rng: random.Random) -> ContentChoice: ...

    def fallback(self, rng: random.Random) -> ContentChoice: ...


class StaticContentTable:
    """Explicit leaf-path to content mapping with a single default entry."""

    def __init__(self, entries: Mapping[str, ContentChoice], default: ContentChoice) -> None:
        self.entries = dict(entries)
        self.default = default

    def resolve(self, leaf: Leaf, rng: random.Random) -> ContentChoice:
        choice = self.entries.get(leaf.path)
        if choice is None:
            logger.warning("No greeting content mapped for %s, using default", leaf.path)
            return self.default
        return choice

    def fallback(self, rng: random.Random) -> ContentChoice:
        return self.default


class MascotContentTable:
    """Builds i18n keys of the form mascotGreetings.v2.<personality>.<category>.<subcase>[.<n>].

    Leaves with a sub-condition map to a single key. Without ``available_keys``
    other leaves map to their first numbered variant. With it, they pick one
    of the numbered variants present, and leaves with no matching key get the
    personality fallback.

    Only the expanded mascot pose is returned as the visual variant. The
    collapsed ``-pp`` pictures are left to the client.
    """

    def __init__(
        self,
        personality: str = DEFAULT_PERSONALITY,
        available_keys: Collection[str] | None = None,
    ) -> None:
        if personality not in PERSONALITIES:
            logger.warning("Unknown mascot personality %s, using %s", personality, DEFAULT_PERSONALITY)
            personality = DEFAULT_PERSONALITY
        self.personality = personality
        self.available_keys = set(available_keys) if available_keys is not None else None

    @property
    def fallback_key(self) -> str:
        return f"mascotGreetings.{self.personality}.fallback"

    def resolve(self, leaf: Leaf, rng: random.Random) -> ContentChoice:
        content_key = self._content_key(leaf, rng)
        if content_key is None:
            logger.warning(
                "No greeting text for %s (%s), using %s", leaf.path, self.personality, self.fallback_key
            )
            content_key = self.fallback_key
        return ContentChoice(content_key=content_key, visual_variant_key=self._visual_variant(rng))

    def fallback(self, rng: random.Random) -> ContentChoice:
        return ContentChoice(content_key=self.fallback_key, visual_variant_key=self._visual_variant(rng))

    def _content_key(self, leaf: Leaf, rng: random.Random) -> str | None:
        if leaf.subcase_id is None:
            return None
        base = f"{KEY_PREFIX}.{self.personality}.{leaf.category_id}.{leaf.subcase_id}"
        if leaf.sub_condition_id:
            key = f"{base}.{leaf.sub_condition_id}"
            return key if self._exists(key) else None
        if self.available_keys is None:
            return f"{base}.{TEXT_VARIANTS[0]}"
        candidates = [f"{base}.{n}" for n in TEXT_VARIANTS if self._exists(f"{base}.{n}")]
        if not candidates:
            return None
        return candidates[rng.randrange(len(candidates))]

    def _exists(self, key: str) -> bool:
        return self.available_keys is None or key in self.available_keys

    def _visual_variant(self, rng: random.Random) -> str:
        if self.personality == "cool":
            return COOL_POSES[rng.randrange(len(COOL_POSES))]
        return VISUAL_VARIANTS[self.personality]
