"""PTR classification outcome models."""

from dataclasses import dataclass
from enum import Enum


class OutcomeKind(Enum):
    """Classification of one address's reverse mapping."""

    GOOD = "GOOD"  # PTR exists and content is acceptable
    MISSING_PTR = "MISSING_PTR"  # NXDOMAIN or empty answer
    UNQUERYABLE = "UNQUERYABLE"  # Timeout, SERVFAIL or other non-definitive failure
    BAD_CONTENT = "BAD_CONTENT"  # PTR exists but matched the bad pattern
    NOT_CHECKED = "NOT_CHECKED"  # Run cancelled before this lookup ran


@dataclass(frozen=True)
class PTROutcome:
    """Result of classifying a single address record.

    Attributes:
        kind: Outcome classification.
        target: PTR target name (GOOD and BAD_CONTENT only).
        reason: Failure category (UNQUERYABLE only), e.g. "timeout".
        matched_pattern: Pattern the target matched (BAD_CONTENT only).
        attempts: Number of resolver queries issued for this address.
    """

    kind: OutcomeKind
    target: str | None = None
    reason: str | None = None
    matched_pattern: str | None = None
    attempts: int = 0

    @classmethod
    def good(cls, target: str, attempts: int = 1) -> "PTROutcome":
        return cls(OutcomeKind.GOOD, target=target, attempts=attempts)

    @classmethod
    def missing(cls, attempts: int = 1) -> "PTROutcome":
        return cls(OutcomeKind.MISSING_PTR, attempts=attempts)

    @classmethod
    def unqueryable(cls, reason: str, attempts: int = 1) -> "PTROutcome":
        return cls(OutcomeKind.UNQUERYABLE, reason=reason, attempts=attempts)

    @classmethod
    def bad_content(
        cls, target: str, matched_pattern: str | None, attempts: int = 1
    ) -> "PTROutcome":
        return cls(
            OutcomeKind.BAD_CONTENT,
            target=target,
            matched_pattern=matched_pattern,
            attempts=attempts,
        )

    @classmethod
    def not_checked(cls) -> "PTROutcome":
        return cls(OutcomeKind.NOT_CHECKED)

    def is_good(self) -> bool:
        """Check if the reverse mapping is acceptable.

        Returns:
            bool: True if kind is GOOD, False otherwise.
        """
        return self.kind == OutcomeKind.GOOD

    @property
    def retries(self) -> int:
        """Queries issued beyond the first one."""
        return max(self.attempts - 1, 0)
