"""Verification engine driving transfer, extraction and classification."""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Dict, List

from ptr_audit.errors import TransferError
from ptr_audit.models.ptr_outcome import PTROutcome
from ptr_audit.models.run_state import (
    RunState,
    StateTransition,
    determine_state_transition,
)
from ptr_audit.models.verification_report import VerificationReport
from ptr_audit.models.zone_record import AddressRecord
from ptr_audit.services.address_extractor import AddressExtractor
from ptr_audit.services.audit_context import AuditContext
from ptr_audit.services.logger import log_run_summary, log_transfer_failure
from ptr_audit.services.ptr_classifier import classify_address
from ptr_audit.services.report_builder import ReportBuilder
from ptr_audit.services.zone_transfer import ZoneTransferClient


logger = logging.getLogger(__name__)


# How often the collector wakes up to check the deadline and cancel signal
POLL_INTERVAL = 0.2


class VerificationEngine:
    """Runs one PTR verification over a whole zone.

    The zone is transferred in full first; address records are then
    classified on a bounded thread pool and collected back here, the only
    place that writes to the report.

    Attributes:
        context: Shared resolver, pattern and run settings.
        transfer_client: Client used for the AXFR.
        state: Current run state.
        transitions: State transitions taken so far.

    Example:
        >>> engine = VerificationEngine(context, ZoneTransferClient())
        >>> report = engine.run("192.0.2.53", "example.com.")
        >>> report.exit_code
        0
    """

    def __init__(self, context: AuditContext, transfer_client: ZoneTransferClient):
        self.context = context
        self.transfer_client = transfer_client
        self.state = RunState.NOT_STARTED
        self.transitions: List[StateTransition] = []

    def _advance(self, new_state: RunState) -> None:
        transition = determine_state_transition(self.state, new_state)
        self.transitions.append(transition)
        self.state = new_state
        logger.debug(
            f"Run state {transition.previous_state.value} -> {new_state.value}"
        )

    def run(self, server: str, zone: str) -> VerificationReport:
        """Transfer the zone and classify every address record in it.

        Args:
            server: AXFR server address.
            zone: Zone name.

        Returns:
            VerificationReport: Finalized report. On transfer failure the
                report is empty and its exit code is 2.

        Raises:
            ValueError: If the engine has already been run.
        """
        start_time = time.time()
        self._advance(RunState.TRANSFER_IN_PROGRESS)
        builder = ReportBuilder(zone=zone, server=server)

        try:
            records = self.transfer_client.transfer(server, zone)
        except TransferError as e:
            log_transfer_failure(e.server or server, zone, e.kind, str(e))
            builder.set_transfer_error(str(e))
            self._advance(RunState.TRANSFER_REFUSED)
            report = builder.build()
            self._log_summary(report, start_time)
            return report

        self._advance(RunState.TRANSFER_COMPLETE)
        logger.info(f"Zone contains {len(records)} records")

        extractor = AddressExtractor()
        addresses = list(extractor.extract(records))
        builder.set_transfer_result(len(records), extractor.malformed)
        builder.set_addresses(addresses)
        logger.info(f"Found {len(addresses)} address (A/AAAA) records")

        self._advance(RunState.CLASSIFYING)
        self._classify_all(addresses, builder)

        unchecked = builder.pending()
        if unchecked:
            logger.warning(f"{len(unchecked)} address record(s) not checked")

        report = builder.build()
        self._advance(RunState.REPORTED)
        self._log_summary(report, start_time)
        return report

    def _check(self, address: AddressRecord) -> PTROutcome | None:
        # Lookups still queued when the run is cancelled never query
        if self.context.cancel_event.is_set():
            return None
        return classify_address(address, self.context)

    def _classify_all(
        self, addresses: List[AddressRecord], builder: ReportBuilder
    ) -> None:
        """Classify addresses concurrently, recording results by zone index."""
        if not addresses:
            return

        deadline = None
        if self.context.run_timeout:
            deadline = time.time() + self.context.run_timeout

        executor = ThreadPoolExecutor(
            max_workers=self.context.concurrency, thread_name_prefix="ptr-check"
        )
        futures: Dict[Future, int] = {
            executor.submit(self._check, address): index
            for index, address in enumerate(addresses)
        }
        pending = set(futures)

        try:
            while pending:
                if self.context.cancel_event.is_set():
                    logger.warning("Run cancelled; reporting completed checks only")
                    builder.mark_incomplete()
                    break

                timeout = POLL_INTERVAL
                if deadline is not None:
                    remaining = deadline - time.time()
                    if remaining <= 0:
                        logger.warning(
                            f"Run timeout of {self.context.run_timeout}s reached; "
                            "reporting completed checks only"
                        )
                        builder.mark_incomplete()
                        # Stops queued lookups and retries of in-flight ones
                        self.context.cancel_event.set()
                        break
                    timeout = min(timeout, remaining)

                done, pending = wait(
                    pending, timeout=timeout, return_when=FIRST_COMPLETED
                )
                for future in done:
                    self._collect(future, futures[future], addresses, builder)
            for future in pending:
                if future.done() and not future.cancelled():
                    self._collect(future, futures[future], addresses, builder)
        finally:
            # Queued lookups are dropped; in-flight ones are not waited for
            if pending:
                self.context.cancel_event.set()
            executor.shutdown(wait=not pending, cancel_futures=True)

    def _collect(
        self,
        future: Future,
        index: int,
        addresses: List[AddressRecord],
        builder: ReportBuilder,
    ) -> None:
        try:
            outcome = future.result()
        except Exception as e:
            # Unexpected error - treat as UNQUERYABLE for this address only
            logger.error(
                f"Unexpected error checking {addresses[index].address}: {e}",
                exc_info=True,
            )
            outcome = PTROutcome.unqueryable("unknown_error")

        if outcome is not None:
            builder.record(index, outcome)

    def _log_summary(self, report: VerificationReport, start_time: float) -> None:
        log_run_summary(
            zone=report.zone,
            total_addresses=len(report.entries),
            counts={kind.value: n for kind, n in report.counts.items()},
            malformed=len(report.malformed_records),
            total_retries=report.total_retries,
            incomplete=report.incomplete,
            verdict=report.verdict.value if report.verdict else None,
            duration_sec=time.time() - start_time,
        )
