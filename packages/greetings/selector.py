from __future__ import annotations

import logging
import random
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from packages.greetings.conditions import DEFAULT_PREDICATE_TIMEOUT, ConditionEvaluator
from packages.greetings.content import ContentChoice, ContentTable, Leaf, MascotContentTable
from packages.greetings.context import GreetingContext
from packages.greetings.errors import EmptyRegistryError
from packages.greetings.predicates import PredicateRegistry
from packages.greetings.registry import Category, CategoryRegistry, Subcase
from packages.greetings.sampler import WeightedSampler
from packages.greetings.weights import CategoryScore, WeightCalculator

logger = logging.getLogger(__name__)


class SelectionState(str, Enum):
    INIT = "init"
    CATEGORIES_SCORED = "categories_scored"
    CATEGORY_CHOSEN = "category_chosen"
    SUBCASES_SCORED = "subcases_scored"
    SUBCASE_CHOSEN = "subcase_chosen"
    SUBCONDITIONS_SCORED = "subconditions_scored"
    SUBCONDITION_CHOSEN = "subcondition_chosen"
    RESOLVED = "resolved"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class SelectionResult:
    category_id: str
    subcase_id: str | None
    sub_condition_id: str | None
    content_key: str
    visual_variant_key: str
    is_fallback: bool = False

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class GreetingSelector:
    """Picks one greeting leaf: category, then subcase, then optional sub-condition.

    The registry and content table are injected and never mutated, so one
    selector can serve concurrent calls. Pass ``seed`` to ``select`` for a
    reproducible draw.
    """

    def __init__(
        self,
        registry: CategoryRegistry,
        predicates: PredicateRegistry,
        content: ContentTable | None = None,
        timeout: float = DEFAULT_PREDICATE_TIMEOUT,
        rng: random.Random | None = None,
    ) -> None:
        self.registry = registry
        self.predicates = predicates
        self.content = content or MascotContentTable()
        self.calculator = WeightCalculator(ConditionEvaluator(predicates, timeout=timeout))
        self.rng = rng or random.Random()
        missing = predicates.missing(registry.predicate_names())
        if missing:
            logger.warning("Greeting predicates not registered, they never match: %s", sorted(missing))

    def available_categories(self) -> list[Category]:
        return self.registry.available()

    async def select(
        self,
        context: GreetingContext,
        content: ContentTable | None = None,
        seed: int | None = None,
        force_category: str | None = None,
        force_subcase: str | None = None,
    ) -> SelectionResult:
        if self.registry.is_empty:
            raise EmptyRegistryError("Greeting registry has no categories")

        rng = random.Random(seed) if seed is not None else self.rng
        sampler = WeightedSampler(rng)
        table = content or self.content
        trace = [SelectionState.INIT]

        category, scored_subcases = await self._pick_category(context, sampler, force_category, trace)
        if category is None:
            return self._fallback(table, rng, trace)
        trace.append(SelectionState.CATEGORY_CHOSEN)

        chosen = self._forced_subcase(category, force_subcase)
        if chosen is None:
            if scored_subcases is None:
                scored_subcases = await self.calculator.subcase_weights(category, context)
            trace.append(SelectionState.SUBCASES_SCORED)
            subcase_id = sampler.choose(scored_subcases)
            if subcase_id is None:
                return self._fallback(table, rng, trace)
            chosen = category.subcases[subcase_id]
        trace.append(SelectionState.SUBCASE_CHOSEN)

        sub_condition_id = None
        if chosen.has_sub_conditions:
            sub_condition_id = await self._pick_sub_condition(category, chosen, context, sampler)
            trace += [SelectionState.SUBCONDITIONS_SCORED, SelectionState.SUBCONDITION_CHOSEN]

        leaf = Leaf(category.id, chosen.id, sub_condition_id)
        choice = table.resolve(leaf, rng)
        trace.append(SelectionState.RESOLVED)
        logger.debug("Greeting selected %s (%s)", leaf.path, _format_trace(trace))
        return _result(leaf, choice, is_fallback=False)

    async def score_categories(self, context: GreetingContext) -> list[CategoryScore]:
        return await self.calculator.category_weights(self.registry, context)

    async def _pick_category(
        self,
        context: GreetingContext,
        sampler: WeightedSampler,
        force_category: str | None,
        trace: list[SelectionState],
    ) -> tuple[Category | None, list[tuple[str, float]] | None]:
        if force_category:
            forced = self.registry.get(force_category)
            if forced is not None:
                return forced, None
            logger.warning("Forced greeting category %s is not registered", force_category)

        scores = await self.score_categories(context)
        trace.append(SelectionState.CATEGORIES_SCORED)
        category_id = sampler.choose([(score.category.id, score.weight) for score in scores])
        if category_id is None:
            return None, None
        score = next(score for score in scores if score.category.id == category_id)
        return score.category, score.subcase_weights

    def _forced_subcase(self, category: Category, force_subcase: str | None) -> Subcase | None:
        if not force_subcase:
            return None
        forced = category.subcases.get(force_subcase)
        if forced is None:
            logger.warning("Forced greeting subcase %s is not in %s", force_subcase, category.id)
        return forced

    async def _pick_sub_condition(
        self,
        category: Category,
        subcase: Subcase,
        context: GreetingContext,
        sampler: WeightedSampler,
    ) -> str:
        weights = await self.calculator.sub_condition_weights(subcase, context)
        picked = sampler.choose(weights)
        if picked is not None:
            return picked
        first = next(iter(subcase.sub_conditions))
        logger.warning(
            "No sub-condition eligible for %s.%s, using %s", category.id, subcase.id, first
        )
        return first

    def _fallback(
        self, table: ContentTable, rng: random.Random, trace: list[SelectionState]
    ) -> SelectionResult:
        category = self.registry.first()
        first_subcase = next(iter(category.subcases), None)
        trace.append(SelectionState.FALLBACK)
        logger.info("No greeting eligible, using fallback (%s)", _format_trace(trace))
        leaf = Leaf(category.id, first_subcase)
        return _result(leaf, table.fallback(rng), is_fallback=True)


def _result(leaf: Leaf, choice: ContentChoice, is_fallback: bool) -> SelectionResult:
    return SelectionResult(
        category_id=leaf.category_id,
        subcase_id=leaf.subcase_id,
        sub_condition_id=leaf.sub_condition_id,
        content_key=choice.content_key,
        visual_variant_key=choice.visual_variant_key,
        is_fallback=is_fallback,
    )


def _format_trace(trace: list[SelectionState]) -> str:
    return " -> ".join(state.value for state in trace)
