"""Unit tests for the verification engine."""

import threading
import time
from unittest.mock import MagicMock

import dns.exception
import pytest

from ptr_audit.errors import TransferRefused, TransferTimeout
from ptr_audit.models.ptr_outcome import OutcomeKind
from ptr_audit.models.run_state import RunState
from ptr_audit.models.verification_report import Verdict
from ptr_audit.models.zone_record import ZoneRecord
from ptr_audit.services.verification_engine import VerificationEngine
from ptr_audit.utils.ip_utils import reverse_query_name


HOST1 = reverse_query_name("203.0.113.5")
HOST2 = reverse_query_name("203.0.113.6")
HOST3 = reverse_query_name("2001:db8::1")


def transfer_client(records):
    client = MagicMock()
    client.transfer.return_value = records
    return client


def address_zone(count):
    records = [ZoneRecord("example.com.", "SOA", "ns1. h. 1 2 3 4 5")]
    records += [
        ZoneRecord(f"h{i}.example.com.", "A", f"192.0.2.{i}") for i in range(count)
    ]
    return records


class TestVerificationEngineRun:
    """Test VerificationEngine.run() end to end with mocks."""

    def test_all_good(self, make_context, mock_transfer_client):
        context = make_context(
            {
                HOST1: ["host1.example.com."],
                HOST2: ["host2.example.com."],
                HOST3: ["host3.example.com."],
            }
        )
        engine = VerificationEngine(context, mock_transfer_client)

        report = engine.run("192.0.2.53:53", "example.com.")

        assert report.verdict == Verdict.ALL_GOOD
        assert report.exit_code == 0
        assert report.zone_record_count == 7
        assert engine.state == RunState.REPORTED
        assert [t.new_state for t in engine.transitions] == [
            RunState.TRANSFER_IN_PROGRESS,
            RunState.TRANSFER_COMPLETE,
            RunState.CLASSIFYING,
            RunState.REPORTED,
        ]
        mock_transfer_client.transfer.assert_called_once_with(
            "192.0.2.53:53", "example.com."
        )

    def test_entries_in_zone_order_with_mixed_outcomes(
        self, make_context, mock_transfer_client
    ):
        context = make_context(
            {
                HOST1: ["host1.example.com."],
                HOST3: dns.exception.Timeout(),
            },
            max_retries=1,
        )

        report = VerificationEngine(context, mock_transfer_client).run(
            "192.0.2.53:53", "example.com."
        )

        assert [e.address.name for e in report.entries] == [
            "host1.example.com.",
            "host2.example.com.",
            "host3.example.com.",
        ]
        assert [e.outcome.kind for e in report.entries] == [
            OutcomeKind.GOOD,
            OutcomeKind.MISSING_PTR,
            OutcomeKind.UNQUERYABLE,
        ]
        assert report.total_retries == 1
        assert report.exit_code == 1

    def test_transfer_refused_never_classifies(self, make_context):
        context = make_context()
        client = MagicMock()
        client.transfer.side_effect = TransferRefused(
            "DNS server at 192.0.2.53:53 refused our AXFR (REFUSED)",
            server="192.0.2.53:53",
            zone="example.com.",
        )
        engine = VerificationEngine(context, client)

        report = engine.run("192.0.2.53:53", "example.com.")

        assert engine.state == RunState.TRANSFER_REFUSED
        assert report.transfer_failed is True
        assert report.verdict is None
        assert report.exit_code == 2
        assert report.entries == []
        context.resolver.resolve.assert_not_called()

    def test_transfer_timeout_exit_code(self, make_context):
        client = MagicMock()
        client.transfer.side_effect = TransferTimeout("timed out")

        report = VerificationEngine(make_context(), client).run(
            "192.0.2.53:53", "example.com."
        )

        assert report.exit_code == 2

    def test_zone_without_addresses_is_all_good(self, make_context):
        context = make_context()

        report = VerificationEngine(context, transfer_client(address_zone(0))).run(
            "192.0.2.53:53", "example.com."
        )

        assert report.entries == []
        assert report.verdict == Verdict.ALL_GOOD
        assert report.exit_code == 0
        context.resolver.resolve.assert_not_called()

    def test_malformed_address_record_is_reported_and_skipped(self, make_context):
        records = address_zone(1) + [ZoneRecord("bad.example.com.", "A", "999.1.1.1")]

        report = VerificationEngine(make_context(), transfer_client(records)).run(
            "192.0.2.53:53", "example.com."
        )

        assert len(report.entries) == 1
        assert report.malformed_records == ["bad.example.com. A 999.1.1.1"]

    def test_engine_runs_once(self, make_context, mock_transfer_client):
        engine = VerificationEngine(make_context(), mock_transfer_client)
        engine.run("192.0.2.53:53", "example.com.")

        with pytest.raises(ValueError, match="Illegal run state transition"):
            engine.run("192.0.2.53:53", "example.com.")

    def test_unexpected_worker_error_affects_one_address(
        self, make_context, mock_transfer_client
    ):
        """Test a crash in one lookup leaves other outcomes intact."""
        context = make_context(
            {
                HOST1: ["host1.example.com."],
                HOST2: RuntimeError("boom"),
                HOST3: ["host3.example.com."],
            }
        )

        report = VerificationEngine(context, mock_transfer_client).run(
            "192.0.2.53:53", "example.com."
        )

        outcomes = [e.outcome for e in report.entries]
        assert outcomes[0].is_good() and outcomes[2].is_good()
        assert outcomes[1].kind == OutcomeKind.UNQUERYABLE
        assert outcomes[1].reason == "unknown_error"


class TestVerificationEngineConcurrency:
    """Test bounded concurrency, cancellation and the run deadline."""

    def test_in_flight_lookups_never_exceed_concurrency(self, make_context):
        lock = threading.Lock()
        in_flight = 0
        peak = 0

        def resolve(qname, rdtype):
            nonlocal in_flight, peak
            with lock:
                in_flight += 1
                peak = max(peak, in_flight)
            time.sleep(0.01)
            with lock:
                in_flight -= 1
            raise dns.exception.DNSException("no answer here")

        resolver = MagicMock()
        resolver.resolve.side_effect = resolve
        context = make_context(resolver=resolver, concurrency=3)

        report = VerificationEngine(context, transfer_client(address_zone(30))).run(
            "192.0.2.53:53", "example.com."
        )

        assert 1 <= peak <= 3
        assert len(report.entries) == 30
        assert report.counts[OutcomeKind.UNQUERYABLE] == 30
        assert report.incomplete is False

    def test_cancel_reports_unchecked_addresses(self, make_context, ptr_rdatas):
        context = make_context(concurrency=1)

        def resolve(qname, rdtype):
            context.cancel_event.set()
            return ptr_rdatas("h0.example.com.")

        context.resolver.resolve.side_effect = resolve

        report = VerificationEngine(context, transfer_client(address_zone(5))).run(
            "192.0.2.53:53", "example.com."
        )

        assert report.incomplete is True
        assert len(report.entries) == 5
        assert report.counts[OutcomeKind.NOT_CHECKED] >= 4
        assert report.exit_code == 1
        assert context.resolver.resolve.call_count == 1

    def test_cancel_logs_unchecked_count(self, make_context, ptr_rdatas, caplog):
        context = make_context(concurrency=1)

        def resolve(qname, rdtype):
            context.cancel_event.set()
            return ptr_rdatas("h0.example.com.")

        context.resolver.resolve.side_effect = resolve

        with caplog.at_level("WARNING"):
            VerificationEngine(context, transfer_client(address_zone(5))).run(
                "192.0.2.53:53", "example.com."
            )

        assert any(
            message.endswith("address record(s) not checked")
            for message in caplog.messages
        )

    def test_cancel_before_run_checks_nothing(self, make_context):
        context = make_context()
        context.cancel_event.set()

        report = VerificationEngine(context, transfer_client(address_zone(3))).run(
            "192.0.2.53:53", "example.com."
        )

        assert report.incomplete is True
        assert report.counts[OutcomeKind.NOT_CHECKED] == 3
        assert report.verdict == Verdict.PROBLEMS_FOUND

    def test_run_timeout_stops_waiting(self, make_context, ptr_rdatas):
        release = threading.Event()

        def resolve(qname, rdtype):
            release.wait(5)
            return ptr_rdatas("slow.example.com.")

        context = make_context(concurrency=2, run_timeout=0.3)
        context.resolver.resolve.side_effect = resolve

        start = time.time()
        try:
            report = VerificationEngine(
                context, transfer_client(address_zone(3))
            ).run("192.0.2.53:53", "example.com.")
        finally:
            release.set()

        assert time.time() - start < 3
        assert report.incomplete is True
        assert report.counts[OutcomeKind.NOT_CHECKED] == 3
        assert report.exit_code == 1

    def test_run_timeout_aborts_retry_backoff(self, make_context):
        """Test the deadline cancels lookups waiting to retry."""
        context = make_context(concurrency=2, run_timeout=0.3)
        context.resolver.resolve.side_effect = dns.exception.Timeout
        context.retry_delays = [10]
        context.sleep = None

        report = VerificationEngine(context, transfer_client(address_zone(2))).run(
            "192.0.2.53:53", "example.com."
        )
        time.sleep(0.5)

        assert report.incomplete is True
        assert context.cancel_event.is_set()
        assert context.resolver.resolve.call_count == 2
