#!/usr/bin/env python
"""
Tests for the dnspython based resolvers.

The sync resolver is exercised against a DNS responder on the loopback
interface; nothing leaves the host.
"""
import select
import socket
from unittest.mock import AsyncMock, Mock, patch

import dns.asyncresolver
import dns.exception
import dns.message
import dns.name
import dns.rcode
import dns.resolver
import dns.rrset
import pytest

from davdiscovery import AsyncServiceDiscoverer
from davdiscovery.io import (
    AsyncDnsPythonResolver,
    AsyncResolverProtocol,
    DnsPythonResolver,
    SyncResolverProtocol,
    records_from_message,
)
from davdiscovery.io.sync import READ_GRACE
from davdiscovery.lib.error import ConfigurationError, DiscoveryError, DispatchError
from davdiscovery.protocol import RecordKind, SRVRecord, TXTRecord
from davdiscovery.resolver_client import DEFAULT_POLL_INTERVAL
from fake_resolvers import FakeAsyncResolver, FakeResolver

CALDAVS = "_caldavs._tcp.example.net"


def make_response(query: dns.message.Message, *rrsets: dns.rrset.RRset) -> dns.message.Message:
    response = dns.message.make_response(query)
    response.answer.extend(rrsets)
    return response


def srv_rrset(owner=CALDAVS, *rdatas):
    return dns.rrset.from_text(owner + ".", 300, "IN", "SRV", *rdatas)


def txt_rrset(owner=CALDAVS, *rdatas):
    return dns.rrset.from_text(owner + ".", 300, "IN", "TXT", *rdatas)


class TestProtocols:
    def test_fakes_and_adapters_implement_protocols(self) -> None:
        assert isinstance(FakeResolver(), SyncResolverProtocol)
        assert isinstance(DnsPythonResolver(nameservers=["127.0.0.1"]), SyncResolverProtocol)
        assert isinstance(FakeAsyncResolver(), AsyncResolverProtocol)
        assert isinstance(AsyncDnsPythonResolver(resolver=Mock()), AsyncResolverProtocol)


class TestRecordsFromMessage:
    def test_srv_and_txt(self) -> None:
        query = dns.message.make_query(CALDAVS, "SRV")
        response = make_response(
            query,
            srv_rrset(CALDAVS, "10 5 443 calsecure.example.net.", "20 0 8443 backup.example.net."),
            txt_rrset(CALDAVS, '"path=/dav/" "other=1"'),
        )
        records = records_from_message(response)
        assert records == [
            SRVRecord(CALDAVS, 10, 5, "calsecure.example.net", 443),
            SRVRecord(CALDAVS, 20, 0, "backup.example.net", 8443),
            TXTRecord(CALDAVS, ("path=/dav/", "other=1")),
        ]

    def test_other_types_skipped(self) -> None:
        query = dns.message.make_query(CALDAVS, "SRV")
        response = make_response(
            query,
            dns.rrset.from_text(CALDAVS + ".", 300, "IN", "CNAME", "alias.example.net."),
        )
        assert records_from_message(response) == []


class TestDnsPythonResolver:
    def test_no_nameservers(self) -> None:
        with patch("davdiscovery.io.sync.system_nameservers", return_value=[]):
            with pytest.raises(ConfigurationError):
                DnsPythonResolver()

    def test_system_nameservers_by_default(self) -> None:
        with patch("davdiscovery.io.sync.system_nameservers", return_value=["192.0.2.53"]):
            assert DnsPythonResolver().nameservers == ["192.0.2.53"]

    def test_send_failure(self) -> None:
        resolver = DnsPythonResolver(nameservers=["127.0.0.1"])
        with patch(
            "davdiscovery.io.sync.dns.query.send_udp",
            side_effect=OSError("Network is unreachable"),
        ):
            with pytest.raises(DispatchError, match="Network is unreachable") as excinfo:
                resolver.send_query(CALDAVS, RecordKind.SRV)
        assert excinfo.value.domain == CALDAVS

    def test_invalid_owner(self) -> None:
        resolver = DnsPythonResolver(nameservers=["127.0.0.1"])
        with pytest.raises(DispatchError):
            resolver.send_query("x" * 64 + ".example.net", RecordKind.SRV)

    def test_read_answer_closes_socket(self) -> None:
        resolver = DnsPythonResolver(nameservers=["127.0.0.1"])
        with patch("davdiscovery.io.sync.dns.query.send_udp"):
            handle = resolver.send_query(CALDAVS, RecordKind.TXT)
        response = make_response(handle.message, txt_rrset(CALDAVS, '"path=/dav/"'))
        with patch(
            "davdiscovery.io.sync.dns.query.receive_udp", return_value=(response, 0.0)
        ):
            records = resolver.read_answer(handle)
        assert records == [TXTRecord(CALDAVS, ("path=/dav/",))]
        assert handle.sock.fileno() == -1

    def test_negative_answer(self) -> None:
        resolver = DnsPythonResolver(nameservers=["127.0.0.1"])
        with patch("davdiscovery.io.sync.dns.query.send_udp"):
            handle = resolver.send_query(CALDAVS, RecordKind.SRV)
        response = make_response(handle.message)
        response.set_rcode(dns.rcode.NXDOMAIN)
        with patch(
            "davdiscovery.io.sync.dns.query.receive_udp", return_value=(response, 0.0)
        ):
            assert resolver.read_answer(handle) == []

    def test_bad_response(self) -> None:
        resolver = DnsPythonResolver(nameservers=["127.0.0.1"])
        with patch("davdiscovery.io.sync.dns.query.send_udp"):
            handle = resolver.send_query(CALDAVS, RecordKind.SRV)
        with patch(
            "davdiscovery.io.sync.dns.query.receive_udp",
            side_effect=dns.exception.Timeout(),
        ):
            assert resolver.read_answer(handle) == []
        assert handle.sock.fileno() == -1

    def test_read_answer_does_not_wait(self) -> None:
        resolver = DnsPythonResolver(nameservers=["127.0.0.1"])
        with patch("davdiscovery.io.sync.dns.query.send_udp"):
            handle = resolver.send_query(CALDAVS, RecordKind.SRV)
        with patch("davdiscovery.io.sync.time.time", return_value=1000.0):
            with patch(
                "davdiscovery.io.sync.dns.query.receive_udp",
                side_effect=dns.exception.Timeout(),
            ) as receive_udp:
                assert resolver.read_answer(handle) == []
        ## a stray datagram must not hold up the poll loop
        assert receive_udp.call_args.kwargs["expiration"] == 1000.0 + READ_GRACE
        assert READ_GRACE < DEFAULT_POLL_INTERVAL

    def test_cancel_closes_socket(self) -> None:
        resolver = DnsPythonResolver(nameservers=["127.0.0.1"])
        with patch("davdiscovery.io.sync.dns.query.send_udp"):
            handle = resolver.send_query(CALDAVS, RecordKind.SRV)
        resolver.cancel(handle)
        assert handle.sock.fileno() == -1

    def test_loopback_roundtrip(self) -> None:
        server = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        server.bind(("127.0.0.1", 0))
        server.settimeout(5)
        try:
            resolver = DnsPythonResolver(
                nameservers=["127.0.0.1"], port=server.getsockname()[1]
            )
            handle = resolver.send_query(CALDAVS, RecordKind.SRV)
            assert not resolver.is_ready(handle)

            wire, client_address = server.recvfrom(65535)
            query = dns.message.from_wire(wire)
            assert query.question[0].name.to_text() == CALDAVS + "."
            response = make_response(query, srv_rrset(CALDAVS, "10 5 443 calsecure.example.net."))
            server.sendto(response.to_wire(), client_address)

            select.select([handle.sock], [], [], 5)
            assert resolver.is_ready(handle)
            assert resolver.read_answer(handle) == [
                SRVRecord(CALDAVS, 10, 5, "calsecure.example.net", 443)
            ]
        finally:
            server.close()


class TestAsyncDnsPythonResolver:
    @pytest.mark.asyncio
    async def test_answer(self) -> None:
        query = dns.message.make_query(CALDAVS, "SRV")
        answer = Mock()
        answer.response = make_response(query, srv_rrset(CALDAVS, "0 1 443 cal.example.net."))
        dns_resolver = Mock()
        dns_resolver.resolve = AsyncMock(return_value=answer)

        records = await AsyncDnsPythonResolver(dns_resolver).query(CALDAVS, RecordKind.SRV)

        assert records == [SRVRecord(CALDAVS, 0, 1, "cal.example.net", 443)]
        dns_resolver.resolve.assert_awaited_once_with(CALDAVS, "SRV")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [dns.resolver.NXDOMAIN(), dns.resolver.NoAnswer(), dns.exception.Timeout()],
    )
    async def test_negative_answers(self, error) -> None:
        dns_resolver = Mock()
        dns_resolver.resolve = AsyncMock(side_effect=error)
        resolver = AsyncDnsPythonResolver(dns_resolver)
        assert await resolver.query(CALDAVS, RecordKind.TXT) == []

    @pytest.mark.asyncio
    async def test_servfail_is_negative_answer(self) -> None:
        ## dnspython raises NoNameservers when every nameserver gave SERVFAIL or REFUSED
        dns_resolver = Mock()
        dns_resolver.resolve = AsyncMock(side_effect=dns.resolver.NoNameservers())
        resolver = AsyncDnsPythonResolver(dns_resolver)
        assert await resolver.query(CALDAVS, RecordKind.SRV) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [dns.name.EmptyLabel(), dns.name.LabelTooLong(), OSError("Network is unreachable")],
    )
    async def test_resolver_failure(self, error) -> None:
        dns_resolver = Mock()
        dns_resolver.resolve = AsyncMock(side_effect=error)
        with pytest.raises(DispatchError) as excinfo:
            await AsyncDnsPythonResolver(dns_resolver).query(CALDAVS, RecordKind.SRV)
        assert excinfo.value.__cause__ is error
        assert excinfo.value.domain == CALDAVS

    @pytest.mark.asyncio
    async def test_empty_label_end_to_end(self) -> None:
        ## a real resolver refuses the owner name before sending anything
        discoverer = AsyncServiceDiscoverer(
            resolver=AsyncDnsPythonResolver(dns.asyncresolver.Resolver(configure=False))
        )
        with pytest.raises(DiscoveryError):
            await discoverer.discover("foo@a..b")
