"""Report accumulation for a verification run.

Collects outcomes as they arrive from the worker pool and produces the
finalized, zone-ordered report at the end.
"""

import threading
import time
from datetime import datetime, timezone
from typing import Dict, List

from ptr_audit.models.ptr_outcome import PTROutcome
from ptr_audit.models.verification_report import ReportEntry, VerificationReport
from ptr_audit.models.zone_record import AddressRecord, ZoneRecord


class ReportBuilder:
    """Accumulates PTR outcomes during a run.

    Attributes:
        _addresses: Address records in zone order.
        _outcomes: Outcome per address index, filled as results complete.
        _lock: Serializes writes from the collecting thread(s).

    Example:
        >>> builder = ReportBuilder("example.com.", "192.0.2.53:53")
        >>> builder.set_addresses(addresses)
        >>> builder.record(0, PTROutcome.good("host1.example.com."))
        >>> report = builder.build()
    """

    def __init__(self, zone: str, server: str):
        self.zone = zone
        self.server = server
        self._addresses: List[AddressRecord] = []
        self._outcomes: Dict[int, PTROutcome] = {}
        self._malformed: List[str] = []
        self._zone_record_count = 0
        self._incomplete = False
        self._transfer_error: str | None = None
        self._started_at = datetime.now(timezone.utc)
        self._start_time = time.time()
        self._lock = threading.Lock()

    def set_transfer_result(
        self, zone_record_count: int, malformed: List[ZoneRecord]
    ) -> None:
        """Record zone-level facts from the completed transfer."""
        self._zone_record_count = zone_record_count
        self._malformed = [
            f"{record.name} {record.record_type} {record.data}" for record in malformed
        ]

    def set_addresses(self, addresses: List[AddressRecord]) -> None:
        self._addresses = list(addresses)

    def set_transfer_error(self, error: str) -> None:
        self._transfer_error = error

    def mark_incomplete(self) -> None:
        self._incomplete = True

    def record(self, index: int, outcome: PTROutcome) -> None:
        """Record the outcome for the address at a zone-order index.

        Raises:
            ValueError: If the index is unknown or already has an outcome.
        """
        with self._lock:
            if not 0 <= index < len(self._addresses):
                raise ValueError(f"Unknown address index: {index}")
            if index in self._outcomes:
                raise ValueError(f"Outcome already recorded for index {index}")
            self._outcomes[index] = outcome

    def pending(self) -> List[int]:
        """Indexes of addresses that have no outcome yet."""
        with self._lock:
            return [i for i in range(len(self._addresses)) if i not in self._outcomes]

    def build(self) -> VerificationReport:
        """Finalize the report.

        Addresses without an outcome are recorded as NOT_CHECKED and the
        report is flagged incomplete.

        Returns:
            VerificationReport: Report with entries in zone order.
        """
        with self._lock:
            entries = []
            for index, address in enumerate(self._addresses):
                outcome = self._outcomes.get(index)
                if outcome is None:
                    outcome = PTROutcome.not_checked()
                    self._incomplete = True
                entries.append(ReportEntry(address=address, outcome=outcome))

            return VerificationReport(
                zone=self.zone,
                server=self.server,
                started_at=self._started_at,
                entries=entries,
                zone_record_count=self._zone_record_count,
                malformed_records=list(self._malformed),
                incomplete=self._incomplete,
                transfer_error=self._transfer_error,
                duration_ms=int((time.time() - self._start_time) * 1000),
            )
