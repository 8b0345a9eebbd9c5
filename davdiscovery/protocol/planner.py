"""
Query planning - turns a domain and the feature flags into DNS queries.

Pure data transformation, no I/O.
"""

import logging

from davdiscovery.lib.error import ConfigurationError
from davdiscovery.protocol.types import Query, QueryPlan, RecordKind, ServiceKind

log = logging.getLogger(__name__)


def plan_queries(
    domain: str,
    check_caldav: bool = True,
    check_carddav: bool = True,
    secure_only: bool = False,
) -> QueryPlan:
    """
    Build the minimal set of DNS queries for the requested services.

    For every requested service, SRV and TXT are queried for the TLS owner
    name (``_caldavs._tcp.<domain>``) and, unless ``secure_only`` is set,
    also for the plain one (``_caldav._tcp.<domain>``).

    Args:
        domain: Lower-cased domain to look up
        check_caldav: Look for a CalDAV service
        check_carddav: Look for a CardDAV service
        secure_only: Only look for the TLS variants

    Returns:
        QueryPlan with the queries and the candidate owner names per service

    Raises:
        ConfigurationError: If neither CalDAV nor CardDAV is requested
    """
    if not (check_caldav or check_carddav):
        raise ConfigurationError(
            domain=domain,
            reason="Need at least one of check_caldav or check_carddav",
        )

    wanted = (
        (ServiceKind.CALDAV, check_caldav),
        (ServiceKind.CARDDAV, check_carddav),
    )
    queries = []
    candidates = {}
    for service, check in wanted:
        if not check:
            continue
        owners = [service.owner(domain, secure=True)]
        if not secure_only:
            owners.append(service.owner(domain, secure=False))
        candidates[service] = tuple(owners)
        for owner in owners:
            for kind in RecordKind:
                queries.append(Query(owner=owner, kind=kind))

    log.debug(f"Planned {len(queries)} queries for {domain}")
    return QueryPlan(domain=domain, queries=tuple(queries), candidates=candidates)
