"""pytest fixtures for testing."""

import ipaddress

import dns.rdata
import dns.resolver
import pytest
from unittest.mock import MagicMock


def ptr_answer(*targets):
    """Build a resolver answer stand-in: a list of real PTR rdatas."""
    return [dns.rdata.from_text("IN", "PTR", target) for target in targets]


def make_resolver(responses):
    """Mock resolver answering PTR queries from a {reverse_name: response} map.

    A response is either a list of PTR targets, an exception (class or
    instance), or a tuple of those to return/raise on successive queries.
    Unknown names raise NXDOMAIN.
    """
    calls = {}

    def resolve(qname, rdtype):
        assert rdtype == "PTR"
        response = responses.get(str(qname), dns.resolver.NXDOMAIN())
        if isinstance(response, tuple):
            index = calls.get(str(qname), 0)
            calls[str(qname)] = index + 1
            response = response[min(index, len(response) - 1)]
        if isinstance(response, type) and issubclass(response, Exception):
            raise response()
        if isinstance(response, Exception):
            raise response
        return ptr_answer(*response)

    resolver = MagicMock()
    resolver.resolve.side_effect = resolve
    return resolver


@pytest.fixture
def sample_zone_records():
    """Zone records as received from an AXFR of example.com."""
    from ptr_audit.models.zone_record import ZoneRecord

    return [
        ZoneRecord(
            "example.com.",
            "SOA",
            "ns1.example.com. hostmaster.example.com. 1 7200 3600 1209600 3600",
            3600,
        ),
        ZoneRecord("example.com.", "NS", "ns1.example.com.", 3600),
        ZoneRecord("host1.example.com.", "A", "203.0.113.5", 300),
        ZoneRecord("example.com.", "MX", "10 mail.example.com.", 3600),
        ZoneRecord("host2.example.com.", "A", "203.0.113.6", 300),
        ZoneRecord("host3.example.com.", "AAAA", "2001:db8::1", 300),
        ZoneRecord("www.example.com.", "CNAME", "host1.example.com.", 300),
    ]


@pytest.fixture
def sample_address_record():
    """Sample IPv4 address record for testing."""
    from ptr_audit.models.zone_record import AddressFamily, AddressRecord

    return AddressRecord(
        name="host1.example.com.",
        ip=ipaddress.ip_address("203.0.113.5"),
        family=AddressFamily.IPV4,
    )


@pytest.fixture
def make_context():
    """Factory for an AuditContext around a mock resolver."""
    from ptr_audit.services.audit_context import AuditContext, PTRPolicy
    from ptr_audit.utils.content_match import compile_bad_pattern

    def factory(
        responses=None,
        bad_regex=None,
        policy=PTRPolicy.ALL,
        max_retries=2,
        concurrency=4,
        run_timeout=0,
        resolver=None,
    ):
        return AuditContext(
            resolver=resolver or make_resolver(responses or {}),
            bad_pattern=compile_bad_pattern(bad_regex),
            policy=policy,
            max_retries=max_retries,
            retry_delays=[0, 0, 0],
            concurrency=concurrency,
            run_timeout=run_timeout,
            sleep=lambda _: None,
        )

    return factory


@pytest.fixture
def mock_transfer_client(sample_zone_records):
    """Zone transfer client returning the sample zone."""
    client = MagicMock()
    client.transfer.return_value = sample_zone_records
    return client


@pytest.fixture
def resolver_for():
    """Factory building a mock resolver from a response map."""
    return make_resolver


@pytest.fixture
def ptr_rdatas():
    """Factory building PTR rdatas from target names."""
    return ptr_answer
