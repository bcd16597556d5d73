"""Exception taxonomy for PTR Audit.

Configuration and transfer errors abort a run. Per-address lookup failures
never surface as exceptions; the classifier turns them into outcomes.
"""


class PTRAuditError(Exception):
    """Base class for all PTR Audit errors."""


class ConfigurationError(PTRAuditError, ValueError):
    """Invalid configuration detected before any zone work begins."""


class TransferError(PTRAuditError):
    """Zone transfer failed; no address records can be processed.

    Attributes:
        server: Server the AXFR was attempted against ("IP:port").
        zone: Zone name that was requested.
    """

    kind = "failed"

    def __init__(self, message: str, server: str = "", zone: str = ""):
        super().__init__(message)
        self.server = server
        self.zone = zone


class TransferRefused(TransferError):
    """Server refused the AXFR: error rcode, FormError or connection refused."""

    kind = "refused"


class TransferTimeout(TransferError):
    """AXFR did not complete within the transfer timeout."""

    kind = "timeout"


class TransferMalformed(TransferError):
    """AXFR completed but the response was empty or unusable."""

    kind = "malformed"
