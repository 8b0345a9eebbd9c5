#!/usr/bin/env python
"""
Resolver clients - send all queries of a plan and gather the answers
within one time budget.

Queries still unanswered when the time is up are dropped silently; the
services depending on them will simply not be found.  Failing to send a
query aborts the whole collection with DispatchError.
"""
import asyncio
import logging
import time
from typing import Any, Iterable, List

from davdiscovery.io.base import AsyncResolverProtocol, SyncResolverProtocol
from davdiscovery.lib.error import DispatchError
from davdiscovery.protocol.types import AnswerRecord, Query, normalize_record

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5
DEFAULT_POLL_INTERVAL = 0.1


class ResolverClient:
    """
    Cooperative polling over all in-flight queries of one discovery.

    The resolver handles are owned by one collect() call at a time; the
    client must not be used from several threads at once.
    """

    def __init__(
        self,
        resolver: SyncResolverProtocol,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.resolver = resolver
        self.timeout = timeout
        self.poll_interval = poll_interval

    def _send_all(self, queries: Iterable[Query]) -> List[Any]:
        pending = []
        for query in queries:
            try:
                pending.append(self.resolver.send_query(query.owner, query.kind))
            except Exception as e:
                for handle in pending:
                    self.resolver.cancel(handle)
                if isinstance(e, DispatchError):
                    raise
                raise DispatchError(
                    domain=query.owner,
                    reason=f"Failed to send {query.kind.value} query for {query.owner}: {e}",
                ) from e
        return pending

    def collect(self, queries: Iterable[Query]) -> List[AnswerRecord]:
        """
        Send all queries and gather the answers until all are in or the
        timeout expires.

        Returns:
            Normalized answer records received before the deadline

        Raises:
            DispatchError: If any query could not be sent
        """
        pending = self._send_all(queries)
        records: List[AnswerRecord] = []

        deadline = time.monotonic() + self.timeout
        try:
            while pending:
                ready = [handle for handle in pending if self.resolver.is_ready(handle)]
                for handle in ready:
                    pending.remove(handle)
                    records.extend(
                        normalize_record(r) for r in self.resolver.read_answer(handle)
                    )
                if not pending:
                    break
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    log.debug(f"{len(pending)} queries unanswered after {self.timeout}s")
                    break
                if not ready:
                    time.sleep(min(self.poll_interval, remaining))
        finally:
            for handle in pending:
                self.resolver.cancel(handle)

        log.debug(f"Collected {len(records)} answer records")
        return records


class AsyncResolverClient:
    """
    One task per query, joined against a single deadline.
    """

    def __init__(
        self, resolver: AsyncResolverProtocol, timeout: float = DEFAULT_TIMEOUT
    ) -> None:
        self.resolver = resolver
        self.timeout = timeout

    async def collect(self, queries: Iterable[Query]) -> List[AnswerRecord]:
        """
        Run all queries concurrently and gather the answers until all are
        in or the timeout expires.

        Returns:
            Normalized answer records, in query order

        Raises:
            DispatchError: If any query could not be sent
        """
        queries = list(queries)
        tasks = [
            asyncio.ensure_future(self.resolver.query(query.owner, query.kind))
            for query in queries
        ]
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        pending = set(tasks)
        try:
            while pending:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    log.debug(f"{len(pending)} queries unanswered after {self.timeout}s")
                    break
                done, pending = await asyncio.wait(
                    pending, timeout=remaining, return_when=asyncio.FIRST_EXCEPTION
                )
                ## retrieve every exception, not only the one raised
                errors = [
                    (task, task.exception())
                    for task in tasks
                    if task in done and task.exception() is not None
                ]
                if errors:
                    task, e = errors[0]
                    if isinstance(e, DispatchError):
                        raise e
                    query = queries[tasks.index(task)]
                    raise DispatchError(
                        domain=query.owner,
                        reason=f"Failed to send {query.kind.value} query for {query.owner}: {e}",
                    ) from e
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        records: List[AnswerRecord] = []
        for task in tasks:
            if task.done() and not task.cancelled():
                records.extend(normalize_record(r) for r in task.result())
        log.debug(f"Collected {len(records)} answer records")
        return records
