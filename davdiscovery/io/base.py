"""
Abstract resolver protocol definitions.

This module defines the interface a DNS resolver must offer to be used
for discovery.  The resolver is always passed in by the caller.
"""

from typing import Any, Protocol, Sequence, runtime_checkable

from davdiscovery.protocol.types import AnswerRecord, RecordKind


@runtime_checkable
class SyncResolverProtocol(Protocol):
    """
    Protocol defining the non-blocking, poll-driven resolver interface.

    Queries are sent up front, each returning an opaque handle which is
    then polled with is_ready() and read with read_answer().
    """

    def send_query(self, owner: str, kind: RecordKind) -> Any:
        """
        Send a query without waiting for the answer.

        Args:
            owner: Owner name to query
            kind: Record kind to query

        Returns:
            An opaque handle for the pending query

        Raises:
            DispatchError: If the query could not be sent
        """
        ...

    def is_ready(self, handle: Any) -> bool:
        """True if the answer for handle can be read without blocking."""
        ...

    def read_answer(self, handle: Any) -> Sequence[AnswerRecord]:
        """
        Read the answer records for a ready handle.

        The handle is finished afterwards, whatever the outcome.
        """
        ...

    def cancel(self, handle: Any) -> None:
        """Release a handle that is still pending."""
        ...


@runtime_checkable
class AsyncResolverProtocol(Protocol):
    """
    Protocol defining the asyncio resolver interface.
    """

    async def query(self, owner: str, kind: RecordKind) -> Sequence[AnswerRecord]:
        """
        Query owner/kind and return the answer records.

        Negative answers give an empty sequence.

        Raises:
            DispatchError: If the query could not be sent
        """
        ...
