from __future__ import annotations

import asyncio
import inspect
import logging

from packages.greetings.context import GreetingContext
from packages.greetings.predicates import Predicate, PredicateRegistry

logger = logging.getLogger(__name__)

DEFAULT_PREDICATE_TIMEOUT = 3.0


class ConditionEvaluator:
    """Runs predicates, sync or async, and always yields a plain bool.

    Raised exceptions, rejected awaitables, unknown predicate names and
    deadline overruns all come back as False.
    """

    def __init__(
        self,
        predicates: PredicateRegistry,
        timeout: float = DEFAULT_PREDICATE_TIMEOUT,
    ) -> None:
        self.predicates = predicates
        self.timeout = timeout
        self._unknown: set[str] = set()

    async def evaluate(self, predicate: str | Predicate | None, context: GreetingContext) -> bool:
        if predicate is None:
            return True
        name, func = self._resolve(predicate)
        if func is None:
            if name not in self._unknown:
                self._unknown.add(name)
                logger.warning("Unknown greeting predicate %s, treated as False", name)
            return False
        try:
            result = await asyncio.wait_for(self._call(func, context), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Greeting predicate %s timed out after %ss", name, self.timeout)
            return False
        except Exception as exc:
            logger.warning("Greeting predicate %s failed: %s", name, exc.__class__.__name__)
            return False
        return bool(result)

    async def evaluate_all(
        self, predicates: list[str | Predicate | None], context: GreetingContext
    ) -> list[bool]:
        if not predicates:
            return []
        return list(await asyncio.gather(*(self.evaluate(p, context) for p in predicates)))

    @staticmethod
    async def _call(func: Predicate, context: GreetingContext):
        # Sync predicates run in a worker thread so the deadline applies to them too.
        if inspect.iscoroutinefunction(func):
            result = func(context)
        else:
            result = await asyncio.to_thread(func, context)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _resolve(self, predicate: str | Predicate) -> tuple[str, Predicate | None]:
        if isinstance(predicate, str):
            return predicate, self.predicates.get(predicate)
        return getattr(predicate, "__name__", repr(predicate)), predicate
