"""
Non-blocking resolver using dnspython.

Every query gets its own UDP socket, so the answers can be polled for
independently of each other.
"""

import logging
import select
import socket
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

import dns.exception
import dns.inet
import dns.message
import dns.query
import dns.rcode
import dns.resolver

from davdiscovery.io.message import records_from_message
from davdiscovery.lib.error import ConfigurationError, DispatchError
from davdiscovery.protocol.types import AnswerRecord, RecordKind

log = logging.getLogger(__name__)

## Max seconds read_answer() waits; the socket is readable when it is called,
## only stray datagrams make it wait at all
READ_GRACE = 0.01


def _nameserver_address(nameserver) -> Optional[str]:
    ## dnspython may hand out Nameserver objects rather than plain addresses
    if isinstance(nameserver, str):
        return nameserver
    return getattr(nameserver, "address", None)


def system_nameservers() -> List[str]:
    """Nameserver addresses from the system configuration (resolv.conf etc.)"""
    resolver = dns.resolver.Resolver()
    addresses = [_nameserver_address(ns) for ns in resolver.nameservers]
    return [a for a in addresses if a]


@dataclass
class PendingQuery:
    """Handle of a query sent by DnsPythonResolver"""

    owner: str
    kind: RecordKind
    message: dns.message.Message
    sock: socket.socket
    destination: tuple


class DnsPythonResolver:
    """
    Poll-driven resolver shell using the dnspython library.

    Queries are sent to the first configured nameserver over UDP.

    Example:
        resolver = DnsPythonResolver(nameservers=["192.0.2.53"])
        handle = resolver.send_query("_caldavs._tcp.example.net", RecordKind.SRV)
        if resolver.is_ready(handle):
            records = resolver.read_answer(handle)
    """

    def __init__(
        self,
        nameservers: Optional[Sequence[str]] = None,
        port: int = 53,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            nameservers: Nameserver addresses (defaults to the system ones)
            port: Nameserver port

        Raises:
            ConfigurationError: If no nameserver is available
        """
        if nameservers is None:
            nameservers = system_nameservers()
        if not nameservers:
            raise ConfigurationError(reason="No nameservers configured")
        self.nameservers = list(nameservers)
        self.port = port

    def send_query(self, owner: str, kind: RecordKind) -> PendingQuery:
        address = self.nameservers[0]
        destination = (address, self.port)
        try:
            message = dns.message.make_query(owner, kind.value)
            sock = socket.socket(dns.inet.af_for_address(address), socket.SOCK_DGRAM)
        except (dns.exception.DNSException, ValueError, OSError) as e:
            raise DispatchError(
                domain=owner,
                reason=f"Failed to send {kind.value} query for {owner}: {e}",
            ) from e

        sock.setblocking(False)
        try:
            dns.query.send_udp(sock, message, destination)
        except OSError as e:
            sock.close()
            raise DispatchError(
                domain=owner,
                reason=f"Failed to send {kind.value} query for {owner}: {e}",
            ) from e

        log.debug(f"Sent {kind.value} query for {owner} to {address}:{self.port}")
        return PendingQuery(
            owner=owner,
            kind=kind,
            message=message,
            sock=sock,
            destination=destination,
        )

    def is_ready(self, handle: PendingQuery) -> bool:
        readable, _, _ = select.select([handle.sock], [], [], 0)
        return bool(readable)

    def read_answer(self, handle: PendingQuery) -> List[AnswerRecord]:
        try:
            response, _ = dns.query.receive_udp(
                handle.sock,
                handle.destination,
                expiration=time.time() + READ_GRACE,
                ignore_unexpected=True,
                query=handle.message,
            )
        except (dns.exception.DNSException, OSError) as e:
            log.debug(
                f"Reading {handle.kind.value} answer for {handle.owner} failed: {e}"
            )
            return []
        finally:
            handle.sock.close()

        rcode = response.rcode()
        if rcode != dns.rcode.NOERROR:
            log.debug(
                f"{handle.kind.value} lookup for {handle.owner} gave {dns.rcode.to_text(rcode)}"
            )
            return []
        return records_from_message(response)

    def cancel(self, handle: PendingQuery) -> None:
        log.debug(f"Giving up on {handle.kind.value} query for {handle.owner}")
        handle.sock.close()
