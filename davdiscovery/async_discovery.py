#!/usr/bin/env python
"""
Async RFC 6764 discovery.

Same as davdiscovery.discovery, but the DNS queries run as asyncio tasks:

    from davdiscovery.async_discovery import AsyncServiceDiscoverer

    discoverer = AsyncServiceDiscoverer()
    urls = await discoverer.discover("foo@example.net")
"""
import logging
from typing import Dict, Mapping, Optional

from davdiscovery.discovery import DiscoveryOptions, _urls
from davdiscovery.io.base import AsyncResolverProtocol
from davdiscovery.protocol.selector import select_records
from davdiscovery.protocol.types import ServiceInfo, ServiceKind
from davdiscovery.resolver_client import DEFAULT_TIMEOUT, AsyncResolverClient

log = logging.getLogger(__name__)


class AsyncServiceDiscoverer(DiscoveryOptions):
    """
    Discover CalDAV and CardDAV URLs for an email address, asynchronously.
    """

    def __init__(
        self,
        resolver: Optional[AsyncResolverProtocol] = None,
        timeout: float = DEFAULT_TIMEOUT,
        secure_only: bool = False,
        check_caldav: bool = True,
        check_carddav: bool = True,
        require_same_domain: bool = False,
    ) -> None:
        """
        Args:
            resolver: Resolver to query with (an AsyncDnsPythonResolver if None)
            timeout: Seconds to wait for DNS answers
            secure_only: Only look for https endpoints
            check_caldav: Look for a CalDAV service
            check_carddav: Look for a CardDAV service
            require_same_domain: Drop services whose SRV target is outside
                                 the queried domain
        """
        super().__init__(
            timeout=timeout,
            secure_only=secure_only,
            check_caldav=check_caldav,
            check_carddav=check_carddav,
            require_same_domain=require_same_domain,
        )
        if resolver is None:
            from davdiscovery.io.async_ import AsyncDnsPythonResolver

            resolver = AsyncDnsPythonResolver()
        self.resolver = resolver

    async def discover_services(
        self,
        email: str,
        overrides: Optional[Mapping[str, bool]] = None,
        **kwargs: bool,
    ) -> Dict[ServiceKind, ServiceInfo]:
        plan = self.plan(email, overrides, **kwargs)
        client = AsyncResolverClient(self.resolver, timeout=self.timeout)
        records = await client.collect(plan.queries)
        return self._services(plan, select_records(records, plan))

    async def discover(
        self,
        email: str,
        overrides: Optional[Mapping[str, bool]] = None,
        **kwargs: bool,
    ) -> Dict[str, str]:
        """
        Discover the CalDAV/CardDAV URLs for an email address.

        See ServiceDiscoverer.discover()
        """
        return _urls(await self.discover_services(email, overrides, **kwargs))
