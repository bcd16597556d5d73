"""Configuration module for PTR Audit.

Loads and validates environment variables; command-line flags given to the
entry point override them.
"""

import ipaddress
import os
from dataclasses import dataclass, field
from typing import List

import dns.exception
import dns.name

from ptr_audit.errors import ConfigurationError
from ptr_audit.utils.content_match import compile_bad_pattern
from ptr_audit.utils.ip_utils import format_server_address, parse_server_address


PTR_POLICIES = ("all", "first")
REPORT_FORMATS = ("text", "json", "yaml")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # Zone Configuration
    server: str
    zone: str

    # PTR Check Configuration
    bad_regex: str | None = None
    ptr_policy: str = "all"

    # DNS Configuration
    dns_timeout: float = 5
    axfr_timeout: float = 30
    dns_concurrency: int = 20
    dns_retries: int = 2
    dns_retry_delays: List[float] = field(default_factory=lambda: [0.5, 1.0, 2.0])
    run_timeout: float = 0
    resolver_nameservers: List[str] = field(default_factory=list)

    # Output Configuration
    report_format: str = "text"
    verbose: bool = False
    log_level: str | None = None

    @classmethod
    def from_env(cls, **overrides) -> "Config":
        """Load configuration from environment variables.

        Args:
            **overrides: Values that take precedence over the environment
                (e.g. parsed command-line flags). None values are ignored.

        Raises:
            ConfigurationError: If required variables are missing or invalid.

        Returns:
            Config: Validated configuration instance.
        """
        overrides = {k: v for k, v in overrides.items() if v is not None}

        def setting(key: str, env: str, default: str | None = None):
            if key in overrides:
                return overrides[key]
            return os.getenv(env, default)

        # Zone Configuration
        server = setting("server", "PTR_SERVER")
        if not server:
            raise ConfigurationError(
                "Required environment variable PTR_SERVER is not set"
            )
        try:
            server = format_server_address(*parse_server_address(server))
        except ValueError as e:
            raise ConfigurationError(f"PTR_SERVER is invalid: {e}") from e

        zone = setting("zone", "PTR_ZONE")
        if not zone:
            raise ConfigurationError(
                "Required environment variable PTR_ZONE is not set"
            )
        zone = cls._validate_zone(zone)

        # PTR Check Configuration
        bad_regex = setting("bad_regex", "PTR_BAD_REGEX") or None
        compile_bad_pattern(bad_regex)

        ptr_policy = str(setting("ptr_policy", "PTR_POLICY", "all")).lower()
        if ptr_policy not in PTR_POLICIES:
            raise ConfigurationError("PTR_POLICY must be one of: all, first")

        # DNS Configuration
        dns_timeout = cls._parse_number(
            setting("dns_timeout", "DNS_TIMEOUT", "5"), "DNS_TIMEOUT"
        )
        if not 1 <= dns_timeout <= 60:
            raise ConfigurationError("DNS_TIMEOUT must be between 1 and 60 seconds")

        axfr_timeout = cls._parse_number(
            setting("axfr_timeout", "AXFR_TIMEOUT", "30"), "AXFR_TIMEOUT"
        )
        if not 1 <= axfr_timeout <= 600:
            raise ConfigurationError("AXFR_TIMEOUT must be between 1 and 600 seconds")

        dns_concurrency = int(
            cls._parse_number(
                setting("dns_concurrency", "DNS_CONCURRENCY", "20"), "DNS_CONCURRENCY"
            )
        )
        if not 1 <= dns_concurrency <= 100:
            raise ConfigurationError("DNS_CONCURRENCY must be between 1 and 100")

        dns_retries = int(
            cls._parse_number(setting("dns_retries", "DNS_RETRIES", "2"), "DNS_RETRIES")
        )
        if not 0 <= dns_retries <= 10:
            raise ConfigurationError("DNS_RETRIES must be between 0 and 10")

        delays_str = setting("dns_retry_delays", "DNS_RETRY_DELAYS", "0.5,1,2")
        dns_retry_delays = [
            cls._parse_number(delay.strip(), "DNS_RETRY_DELAYS")
            for delay in str(delays_str).split(",")
            if delay.strip()
        ]
        if any(delay < 0 for delay in dns_retry_delays):
            raise ConfigurationError(
                "DNS_RETRY_DELAYS must not contain negative values"
            )

        run_timeout = cls._parse_number(
            setting("run_timeout", "RUN_TIMEOUT", "0"), "RUN_TIMEOUT"
        )
        if run_timeout < 0:
            raise ConfigurationError("RUN_TIMEOUT must be >= 0 seconds")

        nameservers_str = setting("resolver_nameservers", "RESOLVER_NAMESERVERS", "")
        resolver_nameservers = [
            ns.strip() for ns in str(nameservers_str).split(",") if ns.strip()
        ]
        for ns in resolver_nameservers:
            try:
                ipaddress.ip_address(ns)
            except ValueError:
                raise ConfigurationError(
                    f"RESOLVER_NAMESERVERS contains an invalid IP address: {ns}"
                ) from None

        # Output Configuration
        report_format = str(setting("report_format", "REPORT_FORMAT", "text")).lower()
        if report_format not in REPORT_FORMATS:
            raise ConfigurationError("REPORT_FORMAT must be one of: text, json, yaml")

        verbose = setting("verbose", "VERBOSE", "false")
        if not isinstance(verbose, bool):
            verbose = verbose.lower() in ("true", "1", "yes")

        log_level = setting("log_level", "LOG_LEVEL")
        if log_level:
            log_level = log_level.upper()
            if log_level not in LOG_LEVELS:
                raise ConfigurationError(
                    f"LOG_LEVEL must be one of: {', '.join(LOG_LEVELS)}"
                )
        else:
            log_level = None

        return cls(
            server=server,
            zone=zone,
            bad_regex=bad_regex,
            ptr_policy=ptr_policy,
            dns_timeout=dns_timeout,
            axfr_timeout=axfr_timeout,
            dns_concurrency=dns_concurrency,
            dns_retries=dns_retries,
            dns_retry_delays=dns_retry_delays,
            run_timeout=run_timeout,
            resolver_nameservers=resolver_nameservers,
            report_format=report_format,
            verbose=verbose,
            log_level=log_level,
        )

    @staticmethod
    def _parse_number(value, key: str) -> float:
        """Parse a numeric setting.

        Args:
            value: Raw value (string from the environment or a number).
            key: Environment variable name for error messages.

        Returns:
            float: Parsed value.

        Raises:
            ConfigurationError: If the value is not a number.
        """
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"{key} must be a number, got: {value}"
            ) from None

    @staticmethod
    def _validate_zone(zone: str) -> str:
        """Validate a zone name and return it fully qualified."""
        try:
            name = dns.name.from_text(zone.strip())
        except dns.exception.DNSException as e:
            raise ConfigurationError(
                f"PTR_ZONE is not a valid DNS name: {zone} ({e})"
            ) from e
        if name == dns.name.root:
            raise ConfigurationError("PTR_ZONE must not be the root zone")
        return name.to_text()

    def effective_log_level(self) -> str:
        """Log level to use: explicit LOG_LEVEL, else INFO when verbose."""
        if self.log_level:
            return self.log_level
        return "INFO" if self.verbose else "WARNING"
