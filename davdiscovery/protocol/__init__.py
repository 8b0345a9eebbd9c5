"""
Sans-I/O RFC 6764 discovery.

This package holds the discovery logic without any DNS traffic: which
queries to send, which of the answers to use and what URL they make up.

- types: Core data structures (queries, answer records, selections)
- planner: Builds the DNS queries for a domain
- selector: Picks SRV/TXT records out of the collected answers
- url: Turns a selection into a service URL

Example usage:

    from davdiscovery.protocol import plan_queries, select_records, service_url

    plan = plan_queries("example.net", secure_only=True)

    # Send plan.queries via your preferred resolver
    records = your_resolver_client.collect(plan.queries)

    for service, selection in select_records(records, plan).items():
        print(service.value, service_url(selection))
"""

from .planner import plan_queries
from .selector import pick_srv, pick_txt, select_records, select_service
from .types import (
    AnswerRecord,
    Query,
    QueryPlan,
    RecordKind,
    Selection,
    ServiceInfo,
    ServiceKind,
    SRVRecord,
    TXTRecord,
    is_secure_owner,
    normalize_name,
    normalize_record,
)
from .url import port_part, service_info, service_url, txt_path

__all__ = [
    # Types
    "AnswerRecord",
    "Query",
    "QueryPlan",
    "RecordKind",
    "Selection",
    "ServiceInfo",
    "ServiceKind",
    "SRVRecord",
    "TXTRecord",
    "is_secure_owner",
    "normalize_name",
    "normalize_record",
    # Planning
    "plan_queries",
    # Selection
    "pick_srv",
    "pick_txt",
    "select_records",
    "select_service",
    # URLs
    "port_part",
    "service_info",
    "service_url",
    "txt_path",
]
