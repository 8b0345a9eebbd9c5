"""
Core types for Sans-I/O RFC 6764 discovery.

These dataclasses describe DNS queries, the answers coming back and the
selections made from them, independent of any resolver implementation.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, Optional, Union


class RecordKind(Enum):
    """DNS record types used by RFC 6764 discovery."""

    SRV = "SRV"
    TXT = "TXT"


class ServiceKind(Enum):
    """Services that can be discovered."""

    CALDAV = "caldav"
    CARDDAV = "carddav"

    def owner(self, domain: str, secure: bool = True) -> str:
        """
        Owner name of the SRV/TXT records for this service.

        >>> ServiceKind.CALDAV.owner("example.net")
        '_caldavs._tcp.example.net'
        >>> ServiceKind.CARDDAV.owner("example.net", secure=False)
        '_carddav._tcp.example.net'
        """
        suffix = "s" if secure else ""
        return f"_{self.value}{suffix}._tcp.{domain}"

    @property
    def well_known_path(self) -> str:
        return f"/.well-known/{self.value}"


def is_secure_owner(owner: str) -> bool:
    """
    True if the owner name is the TLS variant (``_caldavs``/``_carddavs``).

    >>> is_secure_owner("_caldavs._tcp.example.net")
    True
    >>> is_secure_owner("_caldav._tcp.example.net")
    False
    """
    return owner.lower().split(".", 1)[0].endswith("s")


def normalize_name(name: str) -> str:
    """Lower-case a DNS name and drop the trailing root dot."""
    return name.lower().rstrip(".")


@dataclass(frozen=True)
class Query:
    """A single DNS question: one owner name, one record kind."""

    owner: str
    kind: RecordKind


@dataclass(frozen=True)
class SRVRecord:
    """
    SRV answer record.

    Attributes:
        owner: Owner name the record answers for
        priority: Lower is preferred
        weight: Higher is preferred among equal priorities
        target: Host name of the service
        port: TCP port of the service
    """

    kind: ClassVar[RecordKind] = RecordKind.SRV

    owner: str
    priority: int
    weight: int
    target: str
    port: int


@dataclass(frozen=True)
class TXTRecord:
    """
    TXT answer record.

    Attributes:
        owner: Owner name the record answers for
        strings: The character-strings of the record, in order
    """

    kind: ClassVar[RecordKind] = RecordKind.TXT

    owner: str
    strings: tuple[str, ...] = ()


AnswerRecord = Union[SRVRecord, TXTRecord]


def normalize_record(record: AnswerRecord) -> AnswerRecord:
    """
    Return the record with its owner name (and SRV target) normalized.

    All owner comparisons further down work on normalized names only.
    """
    if isinstance(record, SRVRecord):
        return replace(
            record,
            owner=normalize_name(record.owner),
            target=record.target.rstrip("."),
        )
    return replace(record, owner=normalize_name(record.owner))


@dataclass(frozen=True)
class QueryPlan:
    """
    The DNS queries needed for one discovery call.

    Attributes:
        domain: Lower-cased domain taken from the email address
        queries: Unique queries to send
        candidates: Owner names per requested service, secure one first
    """

    domain: str
    queries: tuple[Query, ...]
    candidates: dict[ServiceKind, tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class Selection:
    """The SRV record (and TXT record, if any) chosen for one service."""

    service: ServiceKind
    owner: str
    srv: SRVRecord
    txt: Optional[TXTRecord] = None

    @property
    def secure(self) -> bool:
        return is_secure_owner(self.owner)


@dataclass
class ServiceInfo:
    """Information about a discovered CalDAV/CardDAV service"""

    url: str
    hostname: str
    port: int
    path: str
    tls: bool
    priority: int = 0
    weight: int = 0
    source: str = "srv"

    def __str__(self) -> str:
        return f"ServiceInfo(url={self.url}, source={self.source}, priority={self.priority})"
