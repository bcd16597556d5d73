"""Verification report data models.

This module provides the aggregate view over all PTR outcomes of a run,
plus JSON and YAML serializations for reporting.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Tuple

import yaml

from ptr_audit.models.ptr_outcome import OutcomeKind, PTROutcome
from ptr_audit.models.zone_record import AddressRecord


EXIT_ALL_GOOD = 0
EXIT_PROBLEMS_FOUND = 1
EXIT_TRANSFER_FAILED = 2


class Verdict(Enum):
    """Overall verdict of a completed run."""

    ALL_GOOD = "ALL_GOOD"
    PROBLEMS_FOUND = "PROBLEMS_FOUND"


@dataclass(frozen=True)
class ReportEntry:
    """One address record paired with its classification."""

    address: AddressRecord
    outcome: PTROutcome


@dataclass
class VerificationReport:
    """Aggregated PTR verification results for one zone.

    Attributes:
        zone: Zone that was transferred.
        server: Server the AXFR was made against ("IP:port").
        started_at: Run start timestamp (UTC).
        entries: (address, outcome) pairs in zone transfer order.
        zone_record_count: Number of records received in the transfer.
        malformed_records: Address records skipped for unparseable data.
        incomplete: True if the run was cancelled or hit its deadline.
        transfer_error: Failure description when the transfer failed.
        duration_ms: Wall-clock run duration in milliseconds.

    Computed Properties:
        counts: Number of entries per OutcomeKind.
        verdict: ALL_GOOD iff every outcome is GOOD.
        exit_code: 2 on transfer failure, else 0/1 matching the verdict.

    Invariants:
        - sum(counts.values()) == len(entries)
        - transfer_error set => entries is empty
    """

    zone: str
    server: str
    started_at: datetime
    entries: List[ReportEntry] = field(default_factory=list)
    zone_record_count: int = 0
    malformed_records: List[str] = field(default_factory=list)
    incomplete: bool = False
    transfer_error: str | None = None
    duration_ms: int = 0

    @property
    def counts(self) -> Dict[OutcomeKind, int]:
        counts = {kind: 0 for kind in OutcomeKind}
        for entry in self.entries:
            counts[entry.outcome.kind] += 1
        return counts

    @property
    def problems(self) -> List[ReportEntry]:
        return [entry for entry in self.entries if not entry.outcome.is_good()]

    @property
    def total_retries(self) -> int:
        return sum(entry.outcome.retries for entry in self.entries)

    @property
    def transfer_failed(self) -> bool:
        return self.transfer_error is not None

    @property
    def verdict(self) -> Verdict | None:
        """ALL_GOOD iff every outcome is GOOD; None when the transfer failed."""
        if self.transfer_failed:
            return None
        if self.problems:
            return Verdict.PROBLEMS_FOUND
        return Verdict.ALL_GOOD

    @property
    def exit_code(self) -> int:
        if self.transfer_failed:
            return EXIT_TRANSFER_FAILED
        if self.verdict == Verdict.ALL_GOOD:
            return EXIT_ALL_GOOD
        return EXIT_PROBLEMS_FOUND

    def group_by_address(self) -> Dict[str, Tuple[List[str], PTROutcome]]:
        """Group entries by unique address, in zone order.

        Several names may point at one address. The address is represented
        by the first problem outcome among its records, otherwise by its
        first outcome.

        Returns:
            Dict[str, Tuple[List[str], PTROutcome]]: Address to (owner names
                in zone order, representative outcome).
        """
        names: Dict[str, Dict[str, None]] = {}
        outcomes: Dict[str, PTROutcome] = {}
        for entry in self.entries:
            address = entry.address.address
            names.setdefault(address, {})[entry.address.name] = None
            shown = outcomes.get(address)
            if shown is None or (shown.is_good() and not entry.outcome.is_good()):
                outcomes[address] = entry.outcome

        return {
            address: (list(names[address]), outcome)
            for address, outcome in outcomes.items()
        }

    def to_json(self) -> dict:
        """Serialize to JSON-compatible dict.

        Returns:
            dict: JSON-serializable representation.
        """
        return {
            "run_summary": {
                "zone": self.zone,
                "server": self.server,
                "started_at": self.started_at.isoformat(),
                "duration_ms": self.duration_ms,
                "zone_record_count": self.zone_record_count,
                "address_count": len(self.entries),
                "malformed_records": list(self.malformed_records),
                "verdict": self.verdict.value if self.verdict else None,
                "exit_code": self.exit_code,
                "incomplete": self.incomplete,
                "transfer_error": self.transfer_error,
                "total_retries": self.total_retries,
                "counts": {kind.value: n for kind, n in self.counts.items()},
            },
            "results": [
                {
                    "name": entry.address.name,
                    "address": entry.address.address,
                    "family": entry.address.family.value,
                    "outcome": entry.outcome.kind.value,
                    "target": entry.outcome.target,
                    "reason": entry.outcome.reason,
                    "matched_pattern": entry.outcome.matched_pattern,
                    "attempts": entry.outcome.attempts,
                }
                for entry in self.entries
            ],
        }

    def problems_to_yaml(self) -> str:
        """Generate YAML remediation list of problem addresses.

        Returns:
            str: YAML string with header comments, problems grouped by kind.
        """
        grouped: Dict[str, List[dict]] = {}
        for entry in self.problems:
            item = {"name": entry.address.name, "address": entry.address.address}
            if entry.outcome.target is not None:
                item["ptr"] = entry.outcome.target
            if entry.outcome.reason is not None:
                item["reason"] = entry.outcome.reason
            if entry.outcome.matched_pattern is not None:
                item["matched_pattern"] = entry.outcome.matched_pattern
            grouped.setdefault(entry.outcome.kind.value.lower(), []).append(item)

        header = [
            f"# PTR problems for zone {self.zone}",
            f"# Generated: {self.started_at.isoformat()}",
            f"# Verdict: {self.verdict.value if self.verdict else 'NONE'}",
        ]
        if self.transfer_error:
            header.append(f"# Transfer failed: {self.transfer_error}")
        if self.incomplete:
            header.append("# Run incomplete: some addresses were not checked")

        yaml_output = yaml.safe_dump(
            {"problems": grouped}, default_flow_style=False, sort_keys=True
        )

        return "\n".join(header) + "\n" + yaml_output
