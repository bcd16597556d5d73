"""Structured JSON logging."""

import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger


# Global run ID for correlation across log entries
RUN_ID = str(uuid.uuid4())


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter that adds run_id and standardized fields."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        """Add custom fields to log record.

        Args:
            log_record: The log record to modify.
            record: The original logging.LogRecord.
            message_dict: Additional fields from the logging call.
        """
        super().add_fields(log_record, record, message_dict)

        # Add timestamp in ISO 8601 format
        log_record["timestamp"] = (
            datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"
        )

        log_record["run_id"] = RUN_ID
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Configure structured JSON logging for the application.

    Logs go to stderr so stdout stays free for the report.

    Args:
        level: Logging level name (e.g. "INFO").

    Returns:
        logging.Logger: Configured root logger.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    json_handler = logging.StreamHandler(sys.stderr)
    formatter = CustomJsonFormatter(
        "%(message)s",  # Message field
        timestamp=True,
    )
    json_handler.setFormatter(formatter)
    logger.addHandler(json_handler)

    return logger


def log_transfer_complete(
    server: str, zone: str, record_count: int, duration_ms: int
) -> None:
    """Log a successful zone transfer.

    Args:
        server: AXFR server ("IP:port").
        zone: Zone name transferred.
        record_count: Number of records received.
        duration_ms: Transfer time in milliseconds.
    """
    logger = logging.getLogger(__name__)
    logger.info(
        "Zone transfer completed",
        extra={
            "server": server,
            "zone": zone,
            "record_count": record_count,
            "duration_ms": duration_ms,
        },
    )


def log_transfer_failure(server: str, zone: str, kind: str, error: str) -> None:
    """Log a failed zone transfer.

    Args:
        server: AXFR server ("IP:port").
        zone: Zone name requested.
        kind: Failure kind (refused, timeout, malformed, failed).
        error: Error description.
    """
    logger = logging.getLogger(__name__)
    logger.error(
        "Zone transfer failed",
        extra={"server": server, "zone": zone, "failure": kind, "error": error},
    )


def log_malformed_record(name: str, record_type: str, data: str) -> None:
    """Log an address record whose data does not parse as an IP address."""
    logger = logging.getLogger(__name__)
    logger.warning(
        "Skipping malformed address record",
        extra={"owner": name, "record_type": record_type, "data": data},
    )


def log_ptr_check(
    name: str,
    ip: str,
    reverse_name: str,
    outcome: str,
    target: str | None,
    attempts: int,
    duration_ms: int,
) -> None:
    """Log structured per-address PTR check result.

    Args:
        name: Owner name of the address record.
        ip: Address checked.
        reverse_name: Reverse lookup name queried.
        outcome: Outcome kind (GOOD, MISSING_PTR, ...).
        target: PTR target, if one was resolved.
        attempts: Number of queries issued.
        duration_ms: Classification time in milliseconds.
    """
    logger = logging.getLogger(__name__)
    logger.info(
        "PTR check completed",
        extra={
            "owner": name,
            "ip": ip,
            "reverse_name": reverse_name,
            "outcome": outcome,
            "target": target,
            "attempts": attempts,
            "duration_ms": duration_ms,
        },
    )


def log_run_summary(
    zone: str,
    total_addresses: int,
    counts: Dict[str, int],
    malformed: int,
    total_retries: int,
    incomplete: bool,
    verdict: str | None,
    duration_sec: float,
) -> None:
    """Log run completion summary.

    Args:
        zone: Zone checked.
        total_addresses: Number of address records classified.
        counts: Outcome counts keyed by outcome kind.
        malformed: Number of malformed address records skipped.
        total_retries: Resolver retries across all addresses.
        incomplete: Whether the run was cut short.
        verdict: Final verdict, None if the transfer failed.
        duration_sec: Total run time in seconds.
    """
    logger = logging.getLogger(__name__)
    logger.info(
        "Run completed",
        extra={
            "zone": zone,
            "total_addresses": total_addresses,
            "counts": counts,
            "malformed": malformed,
            "total_retries": total_retries,
            "incomplete": incomplete,
            "verdict": verdict,
            "duration_sec": duration_sec,
        },
    )
