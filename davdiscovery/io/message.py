"""
Conversion of dnspython messages into answer records.
"""

import logging
from typing import List

import dns.message
import dns.rdatatype

from davdiscovery.protocol.types import AnswerRecord, SRVRecord, TXTRecord

log = logging.getLogger(__name__)


def _txt_string(data) -> str:
    return data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data


def records_from_message(message: dns.message.Message) -> List[AnswerRecord]:
    """
    Extract the SRV and TXT records of the answer section.

    Other record types (e.g. CNAME) are skipped.
    """
    records: List[AnswerRecord] = []
    for rrset in message.answer:
        owner = rrset.name.to_text(omit_final_dot=True)
        if rrset.rdtype == dns.rdatatype.SRV:
            for rdata in rrset:
                records.append(
                    SRVRecord(
                        owner=owner,
                        priority=int(rdata.priority),
                        weight=int(rdata.weight),
                        target=rdata.target.to_text(omit_final_dot=True),
                        port=int(rdata.port),
                    )
                )
        elif rrset.rdtype == dns.rdatatype.TXT:
            for rdata in rrset:
                records.append(
                    TXTRecord(
                        owner=owner,
                        strings=tuple(_txt_string(s) for s in rdata.strings),
                    )
                )
        else:
            log.debug(
                f"Skipping {dns.rdatatype.to_text(rrset.rdtype)} record for {owner}"
            )
    return records
