"""
Asynchronous resolver using dnspython's asyncresolver.
"""

import logging
from typing import List, Optional

import dns.asyncresolver
import dns.exception
import dns.resolver

from davdiscovery.io.message import records_from_message
from davdiscovery.lib.error import DispatchError
from davdiscovery.protocol.types import AnswerRecord, RecordKind

log = logging.getLogger(__name__)


class AsyncDnsPythonResolver:
    """
    Asynchronous resolver shell using dns.asyncresolver.

    Example:
        resolver = AsyncDnsPythonResolver()
        records = await resolver.query("_caldavs._tcp.example.net", RecordKind.SRV)
    """

    def __init__(self, resolver: Optional[dns.asyncresolver.Resolver] = None) -> None:
        """
        Initialize the async resolver.

        Args:
            resolver: Existing dns.asyncresolver.Resolver to use (creates new if None)
        """
        self.resolver = resolver if resolver is not None else dns.asyncresolver.Resolver()

    async def query(self, owner: str, kind: RecordKind) -> List[AnswerRecord]:
        log.debug(f"Performing {kind.value} lookup for {owner}")
        try:
            answer = await self.resolver.resolve(owner, kind.value)
        except (
            dns.resolver.NXDOMAIN,
            dns.resolver.NoAnswer,
            dns.resolver.NoNameservers,
        ) as e:
            ## NoNameservers: the nameservers answered SERVFAIL, REFUSED etc.
            log.debug(f"{kind.value} lookup failed for {owner}: {e}")
            return []
        except dns.exception.Timeout as e:
            log.debug(f"{kind.value} lookup timed out for {owner}: {e}")
            return []
        except (dns.exception.DNSException, OSError) as e:
            raise DispatchError(
                domain=owner,
                reason=f"Failed to send {kind.value} query for {owner}: {e}",
            ) from e
        return records_from_message(answer.response)
