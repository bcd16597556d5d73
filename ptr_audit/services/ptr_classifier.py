"""PTR classifier service for reverse lookups."""

import logging
import time

import dns.exception
import dns.resolver

from ptr_audit.models.ptr_outcome import PTROutcome
from ptr_audit.models.zone_record import AddressRecord
from ptr_audit.services.audit_context import AuditContext, PTRPolicy
from ptr_audit.services.logger import log_ptr_check
from ptr_audit.utils.content_match import check_ptr_content
from ptr_audit.utils.ip_utils import reverse_query_name
from ptr_audit.utils.retry import retry_call


logger = logging.getLogger(__name__)


# Failures worth asking again: no answer at all, or every server failed
TRANSIENT_ERRORS = (dns.exception.Timeout, dns.resolver.NoNameservers)


def categorize_failure(exception: Exception) -> str:
    """Categorize a resolver failure that leaves the PTR unconfirmed.

    Args:
        exception: The DNS exception that occurred.

    Returns:
        str: One of: timeout, servfail, no_nameservers, unknown_error.
    """
    if isinstance(exception, dns.exception.Timeout):
        return "timeout"
    elif isinstance(exception, dns.resolver.NoNameservers):
        # Raised when every nameserver answered SERVFAIL/REFUSED or was unreachable
        if "SERVFAIL" in str(exception):
            return "servfail"
        return "no_nameservers"
    else:
        return "unknown_error"


def resolve_ptr_targets(
    reverse_name: str, context: AuditContext
) -> tuple[list[str], int]:
    """Query PTR records for a reverse name with bounded retry.

    Retrying stops as soon as the run is cancelled.

    Args:
        reverse_name: Fully-qualified in-addr.arpa/ip6.arpa name.
        context: Run context holding the resolver and retry settings.

    Returns:
        tuple[list[str], int]: (PTR target names, attempts made).

    Raises:
        dns.exception.DNSException: Any resolver failure after retries, with
            an ``attempts`` attribute.
    """
    answers, attempts = retry_call(
        context.resolver.resolve,
        reverse_name,
        "PTR",
        max_retries=context.max_retries,
        delays=context.retry_delays,
        retry_on=TRANSIENT_ERRORS,
        sleep=context.sleep,
        stop=context.cancel_event,
    )
    targets = [rdata.target.to_text() for rdata in answers]
    return targets, attempts


def classify_address(address: AddressRecord, context: AuditContext) -> PTROutcome:
    """Look up and classify the reverse mapping of one address record.

    NXDOMAIN and empty answers mean the PTR is missing. Timeouts, SERVFAIL
    and other resolver failures mean it could not be confirmed either way.

    Args:
        address: Address record to check.
        context: Run context (resolver, bad pattern, policy, retry).

    Returns:
        PTROutcome: Exactly one outcome for the address.
    """
    start = time.time()
    reverse_name = reverse_query_name(address.ip)

    try:
        targets, attempts = resolve_ptr_targets(reverse_name, context)
    except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer) as e:
        outcome = PTROutcome.missing(attempts=getattr(e, "attempts", 1))
    except dns.exception.DNSException as e:
        outcome = PTROutcome.unqueryable(
            categorize_failure(e), attempts=getattr(e, "attempts", 1)
        )
    else:
        outcome = evaluate_targets(targets, context, attempts)

    log_ptr_check(
        name=address.name,
        ip=address.address,
        reverse_name=reverse_name,
        outcome=outcome.kind.value,
        target=outcome.target,
        attempts=outcome.attempts,
        duration_ms=int((time.time() - start) * 1000),
    )
    return outcome


def evaluate_targets(
    targets: list[str], context: AuditContext, attempts: int = 1
) -> PTROutcome:
    """Apply the bad-content check to resolved PTR targets.

    Args:
        targets: PTR targets in answer order.
        context: Run context holding pattern and policy.
        attempts: Queries it took to get the answer.

    Returns:
        PTROutcome: GOOD with the first target, BAD_CONTENT with the first
            rejected target, or MISSING_PTR if there were no targets.
    """
    if not targets:
        return PTROutcome.missing(attempts=attempts)

    checked = targets[:1] if context.policy == PTRPolicy.FIRST else targets
    for target in checked:
        check = check_ptr_content(target, context.bad_pattern)
        if not check.acceptable:
            return PTROutcome.bad_content(
                target, check.matched_pattern, attempts=attempts
            )

    return PTROutcome.good(targets[0], attempts=attempts)
