import asyncio

from packages.greetings.conditions import ConditionEvaluator
from packages.greetings.context import GreetingContext
from packages.greetings.predicates import PredicateRegistry
from packages.greetings.registry import SubCondition, category, subcase
from packages.greetings.weights import WeightCalculator


def _calculator(calls: list[str] | None = None) -> WeightCalculator:
    def tracked(name: str, value: bool):
        def predicate(context: GreetingContext) -> bool:
            if calls is not None:
                calls.append(name)
            return value

        return predicate

    predicates = PredicateRegistry(
        {
            "yes": tracked("yes", True),
            "yes_again": tracked("yes_again", True),
            "no": tracked("no", False),
        }
    )
    return WeightCalculator(ConditionEvaluator(predicates, timeout=1.0))


def test_category_weight_sums_eligible_subcases_times_base_weight() -> None:
    cat = category(
        "time_context",
        3.0,
        [subcase("morning", 1.0, "yes"), subcase("weekday", 1.5, "yes_again"), subcase("evening", 1.0, "no")],
    )
    score = asyncio.run(_calculator().category_weight(cat, GreetingContext()))
    assert score.weight == 7.5
    assert score.subcase_weights == [("morning", 1.0), ("weekday", 1.5), ("evening", 0.0)]


def test_category_weight_evaluates_every_positive_subcase() -> None:
    calls: list[str] = []
    cat = category(
        "streak_state",
        1.0,
        [subcase("a", 1.0, "yes"), subcase("b", 1.0, "yes_again"), subcase("c", 1.0, "no")],
    )
    asyncio.run(_calculator(calls).category_weight(cat, GreetingContext()))
    assert sorted(calls) == ["no", "yes", "yes_again"]


def test_zero_base_weight_disables_category_without_evaluating() -> None:
    calls: list[str] = []
    cat = category("brushing_behaviour", 0, [subcase("a", 5.0, "yes")])
    score = asyncio.run(_calculator(calls).category_weight(cat, GreetingContext()))
    assert score.weight == 0
    assert calls == []


def test_zero_weight_subcase_is_skipped() -> None:
    calls: list[str] = []
    cat = category("reminder", 1.0, [subcase("gentle_nudge", 0, "yes"), subcase("other", 2.0, "no")])
    score = asyncio.run(_calculator(calls).category_weight(cat, GreetingContext()))
    assert score.weight == 0
    assert calls == ["no"]
    assert dict(score.subcase_weights)["gentle_nudge"] == 0.0


def test_subcase_weights_have_no_base_multiplier() -> None:
    cat = category("milestones", 3.0, [subcase("a", 4.0, "yes"), subcase("b", 5.0, "no")])
    weights = asyncio.run(_calculator().subcase_weights(cat, GreetingContext()))
    assert weights == [("a", 4.0), ("b", 0.0)]


def test_sub_condition_weights() -> None:
    sub = subcase(
        "brush_count_milestones",
        4.0,
        "yes",
        [SubCondition("exactly_10", 1.0, "yes"), SubCondition("exactly_50", 1.0, "no")],
    )
    weights = asyncio.run(_calculator().sub_condition_weights(sub, GreetingContext()))
    assert weights == [("exactly_10", 1.0), ("exactly_50", 0.0)]
