"""
Resolver layer for RFC 6764 discovery.

This module provides the resolver interfaces and dnspython based sync and
async implementations returning answer records.

The resolver layer is intentionally thin - it only handles DNS transport.
All discovery logic (planning, selection, URLs) is in davdiscovery.protocol.

Example (sync):
    from davdiscovery.io import DnsPythonResolver
    from davdiscovery.resolver_client import ResolverClient

    client = ResolverClient(DnsPythonResolver(), timeout=5)
    records = client.collect(plan.queries)

Example (async):
    from davdiscovery.io import AsyncDnsPythonResolver
    from davdiscovery.resolver_client import AsyncResolverClient

    client = AsyncResolverClient(AsyncDnsPythonResolver(), timeout=5)
    records = await client.collect(plan.queries)
"""

from .async_ import AsyncDnsPythonResolver
from .base import AsyncResolverProtocol, SyncResolverProtocol
from .message import records_from_message
from .sync import DnsPythonResolver, PendingQuery, system_nameservers

__all__ = [
    # Protocols
    "SyncResolverProtocol",
    "AsyncResolverProtocol",
    # Implementations
    "DnsPythonResolver",
    "AsyncDnsPythonResolver",
    "PendingQuery",
    # Helpers
    "records_from_message",
    "system_nameservers",
]
