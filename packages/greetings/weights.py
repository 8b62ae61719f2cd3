from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from packages.greetings.conditions import ConditionEvaluator
from packages.greetings.context import GreetingContext
from packages.greetings.registry import Category, Subcase, SubCondition


@dataclass(frozen=True)
class CategoryScore:
    category: Category
    weight: float
    subcase_weights: list[tuple[str, float]] = field(default_factory=list)


class WeightCalculator:
    """Effective weights for each selection tier.

    Entries with weight <= 0 are not evaluated and score 0. All other
    predicates of a tier are evaluated concurrently and joined before the
    tier's weights are returned.
    """

    def __init__(self, evaluator: ConditionEvaluator) -> None:
        self.evaluator = evaluator

    async def category_weight(self, category: Category, context: GreetingContext) -> CategoryScore:
        if not category.enabled:
            return CategoryScore(category=category, weight=0.0)
        subcase_weights = await self.subcase_weights(category, context)
        total = sum(weight for _, weight in subcase_weights)
        return CategoryScore(
            category=category,
            weight=total * category.base_weight,
            subcase_weights=subcase_weights,
        )

    async def category_weights(
        self, categories: Iterable[Category], context: GreetingContext
    ) -> list[CategoryScore]:
        return list(
            await asyncio.gather(*(self.category_weight(category, context) for category in categories))
        )

    async def subcase_weights(
        self, category: Category, context: GreetingContext
    ) -> list[tuple[str, float]]:
        return await self._tier_weights(category.subcases, context)

    async def sub_condition_weights(
        self, subcase: Subcase, context: GreetingContext
    ) -> list[tuple[str, float]]:
        return await self._tier_weights(subcase.sub_conditions, context)

    async def _tier_weights(
        self, entries: Mapping[str, Subcase | SubCondition], context: GreetingContext
    ) -> list[tuple[str, float]]:
        candidates = [entry for entry in entries.values() if entry.weight > 0]
        results = await self.evaluator.evaluate_all([entry.predicate for entry in candidates], context)
        eligible = {entry.id for entry, ok in zip(candidates, results) if ok}
        return [
            (entry_id, entry.weight if entry_id in eligible else 0.0)
            for entry_id, entry in entries.items()
        ]
