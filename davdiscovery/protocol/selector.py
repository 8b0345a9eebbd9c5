"""
Record selection - picks the SRV and TXT record to use per service.

Pure functions working on the full set of collected answers, so the
result does not depend on the order the answers arrived in.
"""

import logging
from typing import Dict, Iterable, Optional, Sequence

from davdiscovery.lib.error import assert_
from davdiscovery.protocol.types import (
    AnswerRecord,
    QueryPlan,
    Selection,
    ServiceKind,
    SRVRecord,
    TXTRecord,
)

log = logging.getLogger(__name__)


def _srv_sort_key(record: SRVRecord):
    ## Low priority is the pick, otherwise highest weight if identical priority.
    ## Target and port only make the order total.
    return (record.priority, -record.weight, record.target, record.port)


def pick_srv(records: Iterable[AnswerRecord], owner: str) -> Optional[SRVRecord]:
    """
    Pick the preferred SRV record for an owner name.

    No weighted random selection is done among records of equal priority
    (as RFC 2782 would have it); the one with the highest weight wins.

    Args:
        records: Normalized answer records
        owner: Normalized owner name

    Returns:
        The chosen SRVRecord or None if the owner has no SRV record
    """
    matches = [r for r in records if isinstance(r, SRVRecord) and r.owner == owner]
    if not matches:
        return None
    return min(matches, key=_srv_sort_key)


def pick_txt(records: Iterable[AnswerRecord], owner: str) -> Optional[TXTRecord]:
    """First TXT record for the owner name, or None."""
    for record in records:
        if isinstance(record, TXTRecord) and record.owner == owner:
            return record
    return None


def select_service(
    records: Sequence[AnswerRecord], service: ServiceKind, owners: Sequence[str]
) -> Optional[Selection]:
    """
    Select the SRV/TXT records for one service.

    The candidate owners are tried in order (secure first).  The first
    owner having any SRV record wins; records of different owners are
    never compared with each other.  The TXT record is only looked up for
    the winning owner.
    """
    for owner in owners:
        srv = pick_srv(records, owner)
        if srv is None:
            log.debug(f"No SRV record for {owner}")
            continue
        txt = pick_txt(records, owner)
        assert_(srv.owner == owner and (txt is None or txt.owner == owner))
        log.debug(
            f"Picked SRV record for {owner}: {srv.target}:{srv.port} "
            f"(priority={srv.priority}, weight={srv.weight}), "
            f"TXT record {'found' if txt else 'not found'}"
        )
        return Selection(service=service, owner=owner, srv=srv, txt=txt)
    return None


def select_records(
    records: Sequence[AnswerRecord], plan: QueryPlan
) -> Dict[ServiceKind, Selection]:
    """
    Select records for every service in the plan.

    Returns:
        Mapping from service kind to its Selection; services without any
        matching SRV record are left out.
    """
    records = list(records)
    selections = {}
    for service, owners in plan.candidates.items():
        selection = select_service(records, service, owners)
        if selection is not None:
            selections[service] = selection
    return selections
