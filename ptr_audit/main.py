"""Main entry point for PTR Audit."""

import argparse
import logging
import signal
import sys
import time

from ptr_audit.config import Config
from ptr_audit.errors import ConfigurationError
from ptr_audit.models.verification_report import EXIT_TRANSFER_FAILED
from ptr_audit.services.audit_context import AuditContext
from ptr_audit.services.logger import setup_logging
from ptr_audit.services.report_renderer import ReportRenderer
from ptr_audit.services.verification_engine import VerificationEngine
from ptr_audit.services.zone_transfer import ZoneTransferClient


logger = logging.getLogger(__name__)

# Fatal errors before a verdict exists share the transfer failure status
EXIT_FATAL = EXIT_TRANSFER_FAILED


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser. Every flag overrides its env variable."""
    parser = argparse.ArgumentParser(
        prog="ptr-audit",
        description=(
            "Check that all address records in a DNS zone have valid and "
            "acceptable PTR records associated"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit status:
  0  all address records have acceptable PTRs
  1  missing, unconfirmed or unacceptable PTRs found
  2  zone transfer refused/failed, or invalid configuration

Examples:
  ptr-audit -s 192.0.2.53 -z example.com
  ptr-audit -s [2001:db8::53]:5353 -z example.com -b 'vps\\.example\\.net' -v
""",
    )
    parser.add_argument(
        "-s",
        "--server",
        help='Server to do AXFR against ("IP:port"; ":port" optional) [PTR_SERVER]',
    )
    parser.add_argument(
        "-z", "--zone", help="Zone to check PTR records for [PTR_ZONE]"
    )
    parser.add_argument(
        "-b",
        "--badre",
        dest="bad_regex",
        help="Regular expression for unacceptable PTRs [PTR_BAD_REGEX]",
    )
    parser.add_argument(
        "--policy",
        dest="ptr_policy",
        choices=["all", "first"],
        help="Check all PTR targets of an address or only the first [PTR_POLICY]",
    )
    parser.add_argument(
        "--timeout",
        dest="dns_timeout",
        type=float,
        help="Per-query PTR lookup timeout in seconds [DNS_TIMEOUT]",
    )
    parser.add_argument(
        "-j",
        "--concurrency",
        dest="dns_concurrency",
        type=int,
        help="Maximum concurrent PTR lookups [DNS_CONCURRENCY]",
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="report_format",
        choices=["text", "json", "yaml"],
        help="Report format [REPORT_FORMAT]",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Be more verbose [VERBOSE]",
    )
    return parser


def install_signal_handlers(context: AuditContext) -> dict:
    """Stop the run cleanly on SIGINT/SIGTERM, keeping completed checks.

    Returns:
        dict: Previous handlers by signal number, for restoring.
    """

    def handle(signum, frame):
        logger.warning(f"Received signal {signum}; cancelling run")
        context.cancel_event.set()

    return {
        signum: signal.signal(signum, handle)
        for signum in (signal.SIGINT, signal.SIGTERM)
    }


def main(argv: list[str] | None = None) -> int:
    """Main execution function.

    Returns:
        int: Exit code (0 all good, 1 problems found, 2 transfer failure or
            fatal error).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        config = Config.from_env(**vars(args))
    except ConfigurationError as e:
        setup_logging()
        logger.error(f"Configuration error: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FATAL

    setup_logging(config.effective_log_level())
    logger.info("Starting PTR Audit")

    try:
        context = AuditContext.from_config(config)
        previous_handlers = install_signal_handlers(context)

        engine = VerificationEngine(
            context, ZoneTransferClient(timeout=config.axfr_timeout)
        )
        try:
            report = engine.run(config.server, config.zone)
        finally:
            for signum, handler in previous_handlers.items():
                signal.signal(signum, handler)

        output = ReportRenderer.render(report, config.report_format, config.verbose)
        sys.stdout.write(output)

        duration_sec = time.time() - start_time
        logger.info(f"Run finished in {duration_sec:.2f} seconds")
        return report.exit_code

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FATAL

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
