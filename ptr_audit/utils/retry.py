"""Retry utilities with exponential backoff."""

import logging
import threading
import time
from typing import Any, Callable, Tuple, Type


logger = logging.getLogger(__name__)


DEFAULT_DELAYS = [0.5, 1.0, 2.0]


def retry_call(
    func: Callable[..., Any],
    *args: Any,
    max_retries: int = 2,
    delays: list[float] | None = None,
    retry_on: Tuple[Type[BaseException], ...] = (),
    sleep: Callable[[float], None] | None = None,
    stop: threading.Event | None = None,
    **kwargs: Any,
) -> Tuple[Any, int]:
    """Call func, retrying transient failures with backoff (0.5s, 1s, 2s).

    Only exceptions listed in retry_on are retried; anything else propagates
    immediately. When retries are exhausted, or the stop event is set, the
    last exception is re-raised with an ``attempts`` attribute set to the
    number of calls made.

    Args:
        func: Callable to invoke.
        *args: Positional arguments for func.
        max_retries: Maximum number of retry attempts (default: 2).
        delays: Delay seconds between retries; the last value is reused
            if there are more retries than delays (default: [0.5, 1, 2]).
        retry_on: Exception types considered transient.
        sleep: Sleep function, replaceable in tests. Defaults to waiting on
            the stop event, or time.sleep without one.
        stop: Event that aborts retrying as soon as it is set.
        **kwargs: Keyword arguments for func.

    Returns:
        Tuple[Any, int]: (func result, number of attempts made).

    Examples:
        >>> result, attempts = retry_call(resolver.resolve, name, "PTR",
        ...                               retry_on=(dns.exception.Timeout,),
        ...                               stop=cancel_event)
    """
    if delays is None:
        delays = DEFAULT_DELAYS
    if sleep is None:
        sleep = stop.wait if stop is not None else time.sleep

    attempt = 0
    while True:
        attempt += 1
        try:
            return func(*args, **kwargs), attempt
        except retry_on as e:
            if attempt > max_retries or (stop is not None and stop.is_set()):
                e.attempts = attempt
                raise

            delay = delays[min(attempt - 1, len(delays) - 1)] if delays else 0
            logger.debug(
                f"{type(e).__name__} on attempt {attempt}, retrying in {delay}s"
            )
            sleep(delay)

            if stop is not None and stop.is_set():
                e.attempts = attempt
                raise
        except Exception as e:
            e.attempts = attempt
            raise
