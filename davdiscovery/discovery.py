#!/usr/bin/env python
"""
RFC 6764 - Locating Services for Calendaring and Contacts (CalDAV/CardDAV)

This module implements DNS-based service discovery for CalDAV and CardDAV
servers as specified in RFC 6764.  Given an email address, it looks up the
SRV and TXT records published for the domain and builds the service URLs.

Discovery steps:
1. Plan the SRV and TXT queries (_caldavs._tcp / _caldav._tcp /
   _carddavs._tcp / _carddav._tcp)
2. Send them all at once and collect the answers within the timeout
3. Pick one SRV record per service, TLS variant preferred, and the
   TXT record of the same owner
4. Build the URL; the TXT ``path`` attribute gives the context path,
   otherwise /.well-known/caldav or /.well-known/carddav is used

The well-known URLs are never fetched, and no credentials are looked up.

SECURITY CONSIDERATIONS:
    DNS-based discovery is vulnerable to spoofing if DNS is not secured with
    DNSSEC.  secure_only=True keeps plain http endpoints out of the result,
    and require_same_domain=True rejects SRV targets outside the queried
    domain (RFC 6764 Section 8).

See: https://datatracker.ietf.org/doc/html/rfc6764
"""
import logging
from typing import Dict, Mapping, Optional

from davdiscovery.io.base import SyncResolverProtocol
from davdiscovery.lib.error import ConfigurationError, InvalidInputError
from davdiscovery.protocol.planner import plan_queries
from davdiscovery.protocol.selector import select_records
from davdiscovery.protocol.types import QueryPlan, Selection, ServiceInfo, ServiceKind
from davdiscovery.protocol.url import service_info
from davdiscovery.resolver_client import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TIMEOUT,
    ResolverClient,
)

log = logging.getLogger(__name__)

OVERRIDE_KEYS = ("check_caldav", "check_carddav", "secure_only")


def extract_domain(email: str) -> str:
    """
    Extract the lower-cased domain part of an email address.

    Raises:
        InvalidInputError: If there is no domain part

    Examples:
        >>> extract_domain('foo@Example.NET')
        'example.net'
    """
    parts = email.split("@")
    domain = parts[1].strip() if len(parts) > 1 else ""
    if not domain:
        raise InvalidInputError(
            domain=email,
            reason=f"Invalid email '{email}'? No domain part detected"
        )
    return domain.lower()


def _is_subdomain_or_same(discovered_domain: str, original_domain: str) -> bool:
    """
    Check if discovered domain is the same as or a subdomain of the original domain.

    This prevents DNS hijacking attacks where malicious DNS records redirect
    to completely different domains (e.g., acme.com -> evil.hackers.are.us).

    Examples:
        >>> _is_subdomain_or_same('calendar.example.com', 'example.com')
        True
        >>> _is_subdomain_or_same('example.com', 'example.com')
        True
        >>> _is_subdomain_or_same('evil.com', 'example.com')
        False
        >>> _is_subdomain_or_same('exampleXcom.evil.com', 'example.com')
        False
    """
    discovered = discovered_domain.lower().strip(".")
    original = original_domain.lower().strip(".")
    return discovered == original or discovered.endswith("." + original)


class DiscoveryOptions:
    """
    Instance defaults shared by the sync and async discoverers, and the
    resolution of per-call overrides against them.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        secure_only: bool = False,
        check_caldav: bool = True,
        check_carddav: bool = True,
        require_same_domain: bool = False,
    ) -> None:
        self.timeout = timeout
        self.secure_only = secure_only
        self.check_caldav = check_caldav
        self.check_carddav = check_carddav
        self.require_same_domain = require_same_domain

    def _resolve_overrides(
        self,
        domain: str,
        overrides: Optional[Mapping[str, bool]],
        kwargs: Mapping[str, bool],
    ) -> Dict[str, bool]:
        merged = dict(overrides or {})
        merged.update(kwargs)
        unknown = set(merged) - set(OVERRIDE_KEYS)
        if unknown:
            raise ConfigurationError(
                domain=domain,
                reason=f"Unknown discovery option(s): {', '.join(sorted(unknown))}"
            )
        return {
            key: bool(merged[key]) if merged.get(key) is not None else getattr(self, key)
            for key in OVERRIDE_KEYS
        }

    def plan(
        self,
        email: str,
        overrides: Optional[Mapping[str, bool]] = None,
        **kwargs: bool,
    ) -> QueryPlan:
        """
        Validate the input and plan the queries for one discovery.

        Nothing is sent; both InvalidInputError and ConfigurationError
        surface here before any DNS traffic.
        """
        domain = extract_domain(email)
        options = self._resolve_overrides(domain, overrides, kwargs)
        log.info(f"Discovering CalDAV/CardDAV services for domain: {domain}")
        return plan_queries(domain, **options)

    def _services(
        self, plan: QueryPlan, selections: Dict[ServiceKind, Selection]
    ) -> Dict[ServiceKind, ServiceInfo]:
        services = {}
        for service, selection in selections.items():
            info = service_info(selection)
            if self.require_same_domain and not _is_subdomain_or_same(
                info.hostname, plan.domain
            ):
                log.warning(
                    f"RFC 6764 Security: Rejecting SRV record pointing to different domain. "
                    f"Queried domain: {plan.domain}, Target FQDN: {info.hostname}. "
                    f"This may indicate DNS hijacking or misconfiguration."
                )
                continue
            log.info(f"Discovered {service.value} service via SRV: {info.url}")
            services[service] = info
        return services


def _urls(services: Dict[ServiceKind, ServiceInfo]) -> Dict[str, str]:
    return {service.value: info.url for service, info in services.items()}


class ServiceDiscoverer(DiscoveryOptions):
    """
    Discover CalDAV and CardDAV URLs for an email address.

    The resolver may be reused for sequential discoveries, but one
    discoverer must not run several discover() calls concurrently.

    Example:
        discoverer = ServiceDiscoverer(secure_only=True)
        urls = discoverer.discover("foo@example.net")
        caldav_url = urls.get("caldav")

        # Only care about carddav, for this call
        urls = discoverer.discover("foo@example.net", check_caldav=False)
    """

    def __init__(
        self,
        resolver: Optional[SyncResolverProtocol] = None,
        timeout: float = DEFAULT_TIMEOUT,
        secure_only: bool = False,
        check_caldav: bool = True,
        check_carddav: bool = True,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        require_same_domain: bool = False,
    ) -> None:
        """
        Args:
            resolver: Resolver to send the queries with (a DnsPythonResolver
                      using the system nameservers if None)
            timeout: Seconds to wait for DNS answers
            secure_only: Only look for https endpoints
            check_caldav: Look for a CalDAV service
            check_carddav: Look for a CardDAV service
            poll_interval: Max seconds between two readiness checks
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
            from davdiscovery.io.sync import DnsPythonResolver

            resolver = DnsPythonResolver()
        self.resolver = resolver
        self.poll_interval = poll_interval

    def discover_services(
        self,
        email: str,
        overrides: Optional[Mapping[str, bool]] = None,
        **kwargs: bool,
    ) -> Dict[ServiceKind, ServiceInfo]:
        """
        Like discover(), but returns a ServiceInfo per service.
        """
        plan = self.plan(email, overrides, **kwargs)
        client = ResolverClient(
            self.resolver, timeout=self.timeout, poll_interval=self.poll_interval
        )
        records = client.collect(plan.queries)
        return self._services(plan, select_records(records, plan))

    def discover(
        self,
        email: str,
        overrides: Optional[Mapping[str, bool]] = None,
        **kwargs: bool,
    ) -> Dict[str, str]:
        """
        Discover the CalDAV/CardDAV URLs for an email address.

        Args:
            email: Email address (user@example.net)
            overrides: check_caldav, check_carddav and/or secure_only for
                       this call only; may also be given as keyword arguments

        Returns:
            Dict with "caldav" and/or "carddav" URLs; a service is left out
            when no SRV record was found for it

        Raises:
            InvalidInputError: If the email address has no domain part
            ConfigurationError: If both services are switched off
            DispatchError: If the resolver failed to send a query
        """
        return _urls(self.discover_services(email, overrides, **kwargs))


def discover(
    email: str,
    resolver: Optional[SyncResolverProtocol] = None,
    **options,
) -> Dict[str, str]:
    """
    Convenience function for a one-off discovery.

    Options are passed on to ServiceDiscoverer.
    """
    return ServiceDiscoverer(resolver=resolver, **options).discover(email)
