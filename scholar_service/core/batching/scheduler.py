"""Resolution scheduler: drives loader flushes until deferred values settle.

Resolvers run as sibling coroutines under graphql-core. Each obtains
``Deferred`` values from the request's loaders and awaits
``scheduler.resolve(value)``. The scheduler batches their work into rounds:

1. A round first yields to the event loop ``settle_ticks`` times so sibling
   resolvers get to register their keys.
2. It takes the pending batch of every loader and runs the adapter calls,
   concurrently when the store allows it.
3. Only after all calls finish are the waiters settled. Continuations run
   synchronously and may queue keys for the next round.

At most one round is in flight per request; every waiting resolver shares
it. A resolver whose value is still pending after a round with no work at
all can never make progress, which is reported as a deadlock.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from scholar_service.core.batching.deferred import Deferred
from scholar_service.core.exceptions import SchedulerDeadlockError, SchedulerPassLimitError
from scholar_service.infra.metrics import scheduler_failures_total, scheduler_passes_total

if TYPE_CHECKING:
    from scholar_service.core.batching.registry import RequestLoaders

logger = logging.getLogger(__name__)


class ResolutionScheduler:
    """Cooperative pass loop over a request's loaders.

    Args:
        loaders: The request's loader registry.
        max_passes: Upper bound on rounds that flush at least one loader.
        settle_ticks: Event-loop yields before each round.
        concurrent_flush: Run a round's adapter calls with ``asyncio.gather``
            when the store supports concurrent calls.

    Usage:
        scheduler = ResolutionScheduler(loaders)
        name = loaders.load_one(Unit, "lbnl").then_present(lambda u: u.name)
        await scheduler.resolve(name)
    """

    def __init__(
        self,
        loaders: RequestLoaders,
        *,
        max_passes: int = 100,
        settle_ticks: int = 3,
        concurrent_flush: bool = True,
    ) -> None:
        self.loaders = loaders
        self.max_passes = max_passes
        self.settle_ticks = settle_ticks
        self.concurrent_flush = concurrent_flush
        self.passes = 0
        self._round: asyncio.Task[int] | None = None

    @property
    def _concurrent(self) -> bool:
        return self.concurrent_flush and bool(
            getattr(self.loaders.store, "supports_concurrency", False)
        )

    async def run_pass(self) -> int:
        """Flush every loader with pending keys once.

        Returns:
            Number of loaders flushed. Zero means there was no work.

        Raises:
            SchedulerPassLimitError: If this pass would exceed ``max_passes``.
        """
        batches = [
            (loader, batch)
            for loader in self.loaders.pending_loaders()
            if (batch := loader.take_batch()) is not None
        ]
        if not batches:
            return 0

        if self.passes >= self.max_passes:
            scheduler_failures_total.labels(reason="pass_limit").inc()
            error = SchedulerPassLimitError(self.max_passes)
            for loader, batch in batches:
                for deferred in batch.waiters.values():
                    deferred.reject(error)
            raise error

        self.passes += 1
        scheduler_passes_total.inc()
        logger.debug(
            "Scheduler pass %d flushing %d loader(s)",
            self.passes,
            len(batches),
            extra={"loaders": [str(loader.identity) for loader, _ in batches]},
        )

        if self._concurrent and len(batches) > 1:
            outcomes = await asyncio.gather(
                *(loader.dispatch(batch) for loader, batch in batches)
            )
        else:
            outcomes = [await loader.dispatch(batch) for loader, batch in batches]

        for (loader, batch), outcome in zip(batches, outcomes, strict=True):
            loader.settle(batch, outcome)
        return len(batches)

    async def _next_round(self) -> int:
        for _ in range(self.settle_ticks):
            await asyncio.sleep(0)
        return await self.run_pass()

    async def _shared_round(self) -> int:
        if self._round is None or self._round.done():
            self._round = asyncio.ensure_future(self._next_round())
        # Shielded so one cancelled resolver does not cancel its siblings' round.
        return await asyncio.shield(self._round)

    async def resolve(self, value: Deferred[Any] | Any) -> Any:
        """Drive rounds until ``value`` settles and return its result.

        Plain values are returned unchanged.

        Raises:
            SchedulerDeadlockError: If the value stays pending with no work left.
            SchedulerPassLimitError: If resolution needs more than ``max_passes``.
            Exception: The rejection error of ``value``.
        """
        if not isinstance(value, Deferred):
            return value
        while value.is_pending:
            flushed = await self._shared_round()
            if flushed == 0 and value.is_pending and not self.loaders.pending_loaders():
                # A sibling's round may have settled us; only a truly idle round counts.
                raise self._deadlock(value)
        return value.result()

    def _deadlock(self, value: Deferred[Any]) -> SchedulerDeadlockError:
        unresolved = self.loaders.unresolved()
        if not unresolved:
            unresolved = {value.label or repr(value): []}
        scheduler_failures_total.labels(reason="deadlock").inc()
        logger.error(
            "Scheduler deadlock: %d loader(s) hold unresolved values",
            len(unresolved),
            extra={"unresolved": {k: [repr(v) for v in vs] for k, vs in unresolved.items()}},
        )
        names = ", ".join(sorted(unresolved))
        return SchedulerDeadlockError(
            f"Deferred value can never resolve; unresolved: {names}",
            unresolved=unresolved,
        )


__all__ = ["ResolutionScheduler"]
