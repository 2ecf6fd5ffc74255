"""
data_client/invalidation.py
───────────────────────────
Cache invalidation after mutations.

Producers (mutation call sites, usually :class:`~data_client.api_client.ApiClient`)
publish an :class:`InvalidationSignal` on an :class:`InvalidationBus`.
Exactly one :class:`CacheInvalidationCoordinator` consumes the bus and, for
each signal:

1. revalidates the targeted key (``/api/<resource>/<id>``) when an id is set;
2. revalidates every cached key containing ``/api/<resource>``, skipping
   the key already handled in step 1;
3. returns to ``IDLE`` with ``last_signal`` cleared.

Signals are queued rather than overwritten, so two mutations landing before
the coordinator runs produce two passes, not one.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from data_client.fetch_cache import FetchCache
from data_client.keys import Resource, build_key, keys_for_resource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvalidationSignal:
    resource: Resource
    resource_id: Optional[str] = None

    @property
    def target_key(self) -> Optional[str]:
        if not self.resource_id:
            return None
        return build_key(self.resource, self.resource_id)


class CoordinatorState(str, Enum):
    IDLE = "idle"
    SIGNALED = "signaled"


class InvalidationBus:
    """
    Single-consumer channel of :class:`InvalidationSignal` objects.

    Any number of producers may :meth:`publish`; only one consumer may
    :meth:`attach`.
    """

    def __init__(self) -> None:
        self._queue: "asyncio.Queue[InvalidationSignal]" = asyncio.Queue()
        self._consumer: Optional[object] = None

    def attach(self, consumer: object) -> None:
        if self._consumer is not None and self._consumer is not consumer:
            raise RuntimeError("InvalidationBus already has a consumer")
        self._consumer = consumer

    def detach(self, consumer: object) -> None:
        if self._consumer is consumer:
            self._consumer = None

    def publish(self, resource: Resource, resource_id: Optional[str] = None) -> InvalidationSignal:
        """Queue a signal; safe to call from synchronous code on the loop thread."""
        signal = InvalidationSignal(
            resource=Resource(resource),
            resource_id=str(resource_id) if resource_id not in (None, "") else None,
        )
        self._queue.put_nowait(signal)
        logger.debug("Invalidation published: %s %s", signal.resource.value, signal.resource_id)
        return signal

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def get_nowait(self) -> Optional[InvalidationSignal]:
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    async def get(self) -> InvalidationSignal:
        return await self._queue.get()


class CacheInvalidationCoordinator:
    """
    The one consumer of an :class:`InvalidationBus`.

    Use :meth:`process_pending` to drain the bus on demand (one "effect
    pass"), or :meth:`start` to consume it from a background task.

    Args:
        cache: Cache whose entries get revalidated.
        bus:   Channel to consume.
    """

    def __init__(self, cache: FetchCache, bus: InvalidationBus) -> None:
        self._cache = cache
        self._bus = bus
        self._bus.attach(self)
        self._task: Optional["asyncio.Task[None]"] = None
        self.last_signal: Optional[InvalidationSignal] = None
        self.revalidation_count = 0

    @property
    def state(self) -> CoordinatorState:
        if self._bus.pending or self.last_signal is not None:
            return CoordinatorState.SIGNALED
        return CoordinatorState.IDLE

    async def process_pending(self) -> List[str]:
        """
        Handle every queued signal.

        Returns:
            Keys revalidated during this pass, in the order they were issued.
            Empty when the bus was idle.
        """
        revalidated: List[str] = []
        while True:
            signal = self._bus.get_nowait()
            if signal is None:
                break
            revalidated.extend(await self._apply(signal))
        return revalidated

    async def _apply(self, signal: InvalidationSignal) -> List[str]:
        self.last_signal = signal
        revalidated: List[str] = []
        try:
            target = signal.target_key
            if target is not None and await self._cache.revalidate(target) is not None:
                revalidated.append(target)

            matching = set(keys_for_resource(self._cache.keys(), signal.resource))
            revalidated.extend(
                await self._cache.revalidate_matching(
                    lambda key: key in matching,
                    exclude=[target] if target else (),
                )
            )
        finally:
            self.last_signal = None

        self.revalidation_count += len(revalidated)
        logger.info(
            "Invalidated %s (id=%s): %d key(s) revalidated",
            signal.resource.value,
            signal.resource_id,
            len(revalidated),
        )
        return revalidated

    # ── background consumption ────────────────────────────────────────────

    def start(self) -> "asyncio.Task[None]":
        if self._task is None or self._task.done():
            self._task = asyncio.ensure_future(self._consume())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def close(self) -> None:
        """Release the bus so another coordinator can attach."""
        self._bus.detach(self)

    async def _consume(self) -> None:
        while True:
            signal = await self._bus.get()
            try:
                await self._apply(signal)
            except Exception:
                logger.exception("Invalidation pass failed for %s", signal)
