"""
data_client/batch.py
────────────────────
Fan out independent queries and collect their results in input order.

Query functions report failures as values (``QueryResult(error=...)``), so
one failing query only blanks its own slot.  A query function that *raises*
breaks that contract and fails the whole batch.
"""

import asyncio
import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Outcome of one query: either ``data`` or ``error`` is meaningful."""

    data: Any = None
    error: Optional[BaseException] = None
    count: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None


Query = Callable[[], Awaitable[QueryResult]]


async def batch_fetch(queries: Sequence[Tuple[str, Query]]) -> List[Any]:
    """
    Run every query concurrently and return their data in input order.

    Args:
        queries: ``(label, query)`` pairs.  ``label`` only appears in logs.

    Returns:
        One element per query: the query's ``data``, or ``None`` when the
        query returned an error result.

    Raises:
        Exception: Whatever a query function raised; the batch as a whole
                   fails in that case.
    """
    if not queries:
        return []

    pending = []
    try:
        for _, query in queries:
            pending.append(query())
    except Exception:
        for coro in pending:
            coro.close()
        raise

    results = await asyncio.gather(*pending)

    values: List[Any] = []
    for (label, _), result in zip(queries, results):
        if result.error is not None:
            logger.error("Batch query '%s' failed: %s", label, result.error)
            values.append(None)
        else:
            values.append(result.data)
    return values


async def run_query(builder: Any, executor: Optional[Executor] = None) -> QueryResult:
    """
    Execute a Supabase query builder without blocking the event loop.

    ``supabase-py``'s ``execute()`` is synchronous, so it runs in a thread
    pool.  PostgREST errors come back as ``QueryResult(error=...)``; any
    other exception propagates.

    Args:
        builder:  A fully-configured query builder (``db.table(...).select(...)``).
        executor: Optional executor; defaults to the loop's default pool.
    """
    loop = asyncio.get_running_loop()
    try:
        response = await loop.run_in_executor(executor, builder.execute)
    except APIError as exc:
        return QueryResult(error=exc)
    return QueryResult(data=response.data, count=getattr(response, "count", None))
