"""Report rendering for text, JSON and YAML outputs.

Converts a finalized verification report into the formats offered to
operators and to tooling.
"""

import json
from typing import List

from ptr_audit.models.ptr_outcome import OutcomeKind, PTROutcome
from ptr_audit.models.verification_report import VerificationReport


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" + ("" if count == 1 else "s")


class ReportRenderer:
    """Generates formatted reports from verification results.

    Provides static methods for a human-readable text report, a JSON report
    and a YAML remediation list.
    """

    @staticmethod
    def generate_text_report(report: VerificationReport, verbose: bool = False) -> str:
        """Generate human-readable text report.

        Each unique address is listed once, together with every name pointing
        at it, and problems are counted per address. Good addresses and
        summary statistics are listed only in verbose mode.

        Args:
            report: Finalized verification report.
            verbose: Whether to include good outcomes and statistics.

        Returns:
            str: Report text, newline terminated.

        Example:
            >>> print(ReportRenderer.generate_text_report(report))
            ➡ 203.0.113.6 is pointed to by:
                host2.example.com.
                Missing PTR for 203.0.113.6
            🔥 1 missing/broken PTR record
        """
        lines: List[str] = []

        if report.transfer_failed:
            lines.append(f"Zone transfer failed: {report.transfer_error}")
            return "\n".join(lines) + "\n"

        groups = report.group_by_address()

        if verbose:
            lines.append(
                f"Zone {report.zone} contains "
                f"{_plural(report.zone_record_count, 'record')}"
            )
            lines.append(
                f"Found {_plural(len(report.entries), 'address (A/AAAA) record')}"
            )

        for malformed in report.malformed_records:
            lines.append(f"Skipped malformed address record: {malformed}")

        problems = 0
        not_checked = 0
        for address, (names, outcome) in groups.items():
            if not outcome.is_good():
                problems += 1
            if outcome.kind == OutcomeKind.NOT_CHECKED:
                not_checked += 1
            if outcome.is_good() and not verbose:
                continue
            lines.extend(ReportRenderer._address_lines(address, names, outcome))

        if problems:
            lines.append(f"🔥 {_plural(problems, 'missing/broken PTR record')}")

        if report.incomplete:
            lines.append(
                f"Run incomplete: {_plural(not_checked, 'address')} not checked"
            )

        if verbose:
            if report.total_retries:
                lines.append(f"Resolver retries: {report.total_retries}")
            if groups:
                ok_pct = (len(groups) - problems) / len(groups) * 100.0
                if ok_pct == 100.0:
                    badge, suffix = "🏆", " Good job!"
                elif ok_pct == 0.0:
                    badge, suffix = "🤦", ""
                else:
                    badge, suffix = "✨", ""
                lines.append(f"{badge} {ok_pct:.1f}% good PTRs!{suffix}")

        return "\n".join(lines) + "\n" if lines else ""

    @staticmethod
    def _address_lines(
        address: str, names: List[str], outcome: PTROutcome
    ) -> List[str]:
        lines = [
            f"➡ {address} is pointed to by:",
            f"    {', '.join(names)}",
        ]

        if outcome.kind == OutcomeKind.GOOD:
            lines.append(f"    Found PTR: {outcome.target}")
        elif outcome.kind == OutcomeKind.MISSING_PTR:
            lines.append(f"    Missing PTR for {address}")
        elif outcome.kind == OutcomeKind.UNQUERYABLE:
            lines.append(f"    Unconfirmed PTR for {address} ({outcome.reason})")
        elif outcome.kind == OutcomeKind.BAD_CONTENT:
            if outcome.matched_pattern is not None:
                lines.append(
                    f"    Bad PTR content '{outcome.target}' for {address} "
                    f"(matched regexp '{outcome.matched_pattern}')"
                )
            else:
                lines.append(
                    f"    Bad PTR content '{outcome.target}' for {address} (empty name)"
                )
        else:
            lines.append(f"    Not checked: {address}")

        return lines

    @staticmethod
    def generate_json_report(report: VerificationReport) -> str:
        """Generate JSON-formatted report.

        Args:
            report: Finalized verification report.

        Returns:
            str: Pretty-printed JSON string with sorted keys for determinism.
        """
        return json.dumps(report.to_json(), indent=2, sort_keys=True)

    @staticmethod
    def generate_problem_yaml(report: VerificationReport) -> str:
        """Generate YAML remediation list of problem addresses.

        Args:
            report: Finalized verification report.

        Returns:
            str: YAML string with header comments and problems grouped by kind.

        Example:
            >>> print(ReportRenderer.generate_problem_yaml(report))
            # PTR problems for zone example.com.
            # Generated: 2025-12-19T10:30:00+00:00
            # Verdict: PROBLEMS_FOUND
            problems:
              missing_ptr:
              - address: 203.0.113.6
                name: host2.example.com.
        """
        return report.problems_to_yaml()

    @staticmethod
    def render(report: VerificationReport, report_format: str, verbose: bool) -> str:
        """Render a report in the configured format ("text", "json", "yaml")."""
        if report_format == "json":
            return ReportRenderer.generate_json_report(report) + "\n"
        if report_format == "yaml":
            return ReportRenderer.generate_problem_yaml(report)
        return ReportRenderer.generate_text_report(report, verbose)
