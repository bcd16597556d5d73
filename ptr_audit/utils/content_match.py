"""Acceptability checks for resolved PTR targets."""

import re
from dataclasses import dataclass

from ptr_audit.errors import ConfigurationError


@dataclass(frozen=True)
class ContentCheck:
    """Result of checking one PTR target.

    Attributes:
        acceptable: True if the target may be reported as GOOD.
        matched_pattern: Pattern source that rejected the target, if any.
    """

    acceptable: bool
    matched_pattern: str | None = None


def compile_bad_pattern(pattern: str | None) -> re.Pattern | None:
    """Compile the unacceptable-PTR regular expression.

    Args:
        pattern: Regex source, or None/empty for no content check.

    Returns:
        re.Pattern | None: Compiled pattern, or None when not configured.

    Raises:
        ConfigurationError: If the pattern does not compile.
    """
    if not pattern:
        return None

    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid regex: {pattern} ({e})") from e


def check_ptr_content(target: str, pattern: re.Pattern | None) -> ContentCheck:
    """Decide whether a PTR target is acceptable.

    Without a pattern any non-empty target is acceptable. With a pattern the
    target is rejected if the pattern matches anywhere in it.

    Args:
        target: PTR target name as resolved.
        pattern: Compiled bad-content pattern or None.

    Returns:
        ContentCheck: Acceptability and the rejecting pattern, if any.
    """
    if not target or target == ".":
        return ContentCheck(acceptable=False)

    if pattern is not None and pattern.search(target):
        return ContentCheck(acceptable=False, matched_pattern=pattern.pattern)

    return ContentCheck(acceptable=True)
