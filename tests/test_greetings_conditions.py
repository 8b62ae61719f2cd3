import asyncio
import logging
import time

from packages.greetings.conditions import ConditionEvaluator
from packages.greetings.context import GreetingContext
from packages.greetings.predicates import PredicateRegistry


async def _slow_true(context: GreetingContext) -> bool:
    await asyncio.sleep(1)
    return True


async def _async_true(context: GreetingContext) -> bool:
    await asyncio.sleep(0)
    return True


async def _async_boom(context: GreetingContext) -> bool:
    raise ConnectionError("history unavailable")


def _blocking_true(context: GreetingContext) -> bool:
    time.sleep(0.3)
    return True


def _boom(context: GreetingContext) -> bool:
    raise ValueError("bad data")


def _evaluator(timeout: float = 0.05) -> ConditionEvaluator:
    return ConditionEvaluator(
        PredicateRegistry(
            {
                "sync_true": lambda context: True,
                "sync_false": lambda context: False,
                "async_true": _async_true,
                "async_boom": _async_boom,
                "boom": _boom,
                "slow_true": _slow_true,
                "blocking_true": _blocking_true,
                "streak_value": lambda context: context.streak(),
            }
        ),
        timeout=timeout,
    )


def test_missing_predicate_is_eligible() -> None:
    assert asyncio.run(_evaluator().evaluate(None, GreetingContext())) is True


def test_sync_and_async_predicates_share_one_interface() -> None:
    evaluator = _evaluator()
    context = GreetingContext()
    assert asyncio.run(evaluator.evaluate("sync_true", context)) is True
    assert asyncio.run(evaluator.evaluate("sync_false", context)) is False
    assert asyncio.run(evaluator.evaluate("async_true", context)) is True


def test_callable_predicate_is_accepted() -> None:
    assert asyncio.run(_evaluator().evaluate(_async_true, GreetingContext())) is True


def test_truthy_results_are_coerced_to_bool() -> None:
    evaluator = _evaluator()
    assert asyncio.run(evaluator.evaluate("streak_value", GreetingContext(streak_days=3))) is True
    assert asyncio.run(evaluator.evaluate("streak_value", GreetingContext())) is False


def test_failures_degrade_to_false(caplog) -> None:
    evaluator = _evaluator()
    with caplog.at_level(logging.WARNING, logger="packages.greetings.conditions"):
        assert asyncio.run(evaluator.evaluate("boom", GreetingContext())) is False
        assert asyncio.run(evaluator.evaluate("async_boom", GreetingContext())) is False
    assert "ValueError" in caplog.text
    assert "ConnectionError" in caplog.text


def test_timeout_is_indistinguishable_from_false() -> None:
    evaluator = _evaluator(timeout=0.01)
    context = GreetingContext()
    timed_out = asyncio.run(evaluator.evaluate("slow_true", context))
    plain_false = asyncio.run(evaluator.evaluate("sync_false", context))
    assert timed_out is False
    assert timed_out == plain_false


def test_unknown_predicate_is_false() -> None:
    assert asyncio.run(_evaluator().evaluate("does_not_exist", GreetingContext())) is False


def test_evaluate_all_runs_predicates_concurrently() -> None:
    evaluator = _evaluator(timeout=1)

    async def _sleepy(context: GreetingContext) -> bool:
        await asyncio.sleep(0.2)
        return True

    async def _timed() -> tuple[list[bool], float]:
        loop = asyncio.get_running_loop()
        started = loop.time()
        results = await evaluator.evaluate_all([_sleepy] * 5, GreetingContext())
        return results, loop.time() - started

    results, elapsed = asyncio.run(_timed())
    assert results == [True] * 5
    assert elapsed < 0.8


def test_blocking_sync_predicate_times_out() -> None:
    evaluator = _evaluator(timeout=0.05)
    assert asyncio.run(evaluator.evaluate("blocking_true", GreetingContext())) is False


def test_blocking_sync_predicates_run_concurrently() -> None:
    evaluator = _evaluator(timeout=1)

    async def _timed() -> tuple[list[bool], float]:
        loop = asyncio.get_running_loop()
        started = loop.time()
        results = await evaluator.evaluate_all(["blocking_true"] * 4, GreetingContext())
        return results, loop.time() - started

    results, elapsed = asyncio.run(_timed())
    assert results == [True] * 4
    assert elapsed < 0.9


def test_unknown_predicate_is_logged(caplog) -> None:
    evaluator = _evaluator()
    with caplog.at_level(logging.WARNING, logger="packages.greetings.conditions"):
        for _ in range(3):
            assert asyncio.run(evaluator.evaluate("does_not_exist", GreetingContext())) is False
    assert caplog.text.count("does_not_exist") == 1
