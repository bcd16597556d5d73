"""Shared, read-only context for a verification run."""

import re
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

import dns.resolver

from ptr_audit.config import Config
from ptr_audit.utils.content_match import compile_bad_pattern
from ptr_audit.utils.retry import DEFAULT_DELAYS


class PTRPolicy(Enum):
    """Which PTR targets must pass the content check when several exist."""

    ALL = "all"  # Every returned target must be acceptable
    FIRST = "first"  # Only the first returned target is checked


@dataclass
class AuditContext:
    """Resolver handle and settings shared by all concurrent lookups.

    Attributes:
        resolver: dnspython resolver used for PTR queries.
        bad_pattern: Compiled unacceptable-PTR pattern, or None.
        policy: Multi-target content check policy.
        max_retries: Extra attempts for transient resolver failures.
        retry_delays: Backoff delays in seconds.
        concurrency: Worker pool size.
        run_timeout: Overall run deadline in seconds (0 disables).
        cancel_event: Set to stop the run early; also set by the run deadline.
        sleep: Sleep function used between retries (default: wait on
            cancel_event).
    """

    resolver: dns.resolver.Resolver
    bad_pattern: re.Pattern | None = None
    policy: PTRPolicy = PTRPolicy.ALL
    max_retries: int = 2
    retry_delays: list[float] = field(default_factory=lambda: list(DEFAULT_DELAYS))
    concurrency: int = 20
    run_timeout: float = 0
    cancel_event: threading.Event = field(default_factory=threading.Event)
    sleep: Callable[[float], None] | None = None

    @classmethod
    def from_config(cls, config: Config) -> "AuditContext":
        """Build the run context from validated configuration.

        Raises:
            ConfigurationError: If the bad pattern does not compile.
        """
        return cls(
            resolver=build_resolver(
                config.dns_timeout, config.resolver_nameservers
            ),
            bad_pattern=compile_bad_pattern(config.bad_regex),
            policy=PTRPolicy(config.ptr_policy),
            max_retries=config.dns_retries,
            retry_delays=list(config.dns_retry_delays),
            concurrency=config.dns_concurrency,
            run_timeout=config.run_timeout,
        )


def build_resolver(
    timeout: float, nameservers: list[str] | None = None
) -> dns.resolver.Resolver:
    """Create a resolver from the system configuration.

    Args:
        timeout: Per-query timeout in seconds (also used as lifetime).
        nameservers: Optional nameserver IPs replacing resolv.conf's.

    Returns:
        dns.resolver.Resolver: Configured resolver.
    """
    resolver = dns.resolver.Resolver()
    if nameservers:
        resolver.nameservers = list(nameservers)
    resolver.timeout = timeout
    resolver.lifetime = timeout  # Total timeout for query
    return resolver
