"""Unit tests for PTR content matching."""

import pytest

from ptr_audit.errors import ConfigurationError
from ptr_audit.utils.content_match import (
    ContentCheck,
    check_ptr_content,
    compile_bad_pattern,
)


def test_compile_bad_pattern_none_and_empty():
    """Test that no pattern configured compiles to None."""
    assert compile_bad_pattern(None) is None
    assert compile_bad_pattern("") is None


def test_compile_bad_pattern_valid():
    """Test a valid pattern compiles."""
    pattern = compile_bad_pattern(r"vps\.example\.net")

    assert pattern is not None
    assert pattern.pattern == r"vps\.example\.net"


def test_compile_bad_pattern_invalid_raises_configuration_error():
    """Test invalid regex is a configuration error (and a ValueError)."""
    with pytest.raises(ConfigurationError, match="Invalid regex: \\(unclosed"):
        compile_bad_pattern("(unclosed")

    with pytest.raises(ValueError):
        compile_bad_pattern("[a-")


def test_check_without_pattern_accepts_any_name():
    """Test existence alone is sufficient without a pattern."""
    assert check_ptr_content("host1.example.com.", None) == ContentCheck(True)
    assert check_ptr_content("1-2-3-4.vps.example.net.", None).acceptable is True


def test_check_rejects_empty_and_root_targets():
    """Test empty and root targets are never acceptable."""
    assert check_ptr_content("", None).acceptable is False
    assert check_ptr_content(".", None).acceptable is False
    assert check_ptr_content("", None).matched_pattern is None


def test_check_pattern_match_is_substring_search():
    """Test the pattern matches anywhere in the target."""
    pattern = compile_bad_pattern(r"vps\.example\.net")

    check = check_ptr_content("1-2-3-4.vps.example.net", pattern)

    assert check.acceptable is False
    assert check.matched_pattern == r"vps\.example\.net"


def test_check_pattern_no_match_is_acceptable():
    """Test a non-matching target is acceptable."""
    pattern = compile_bad_pattern(r"vps\.example\.net")

    check = check_ptr_content("host1.example.com.", pattern)

    assert check == ContentCheck(acceptable=True, matched_pattern=None)


def test_check_pattern_case_sensitive_by_default():
    """Test matching is case-sensitive unless the pattern says otherwise."""
    assert check_ptr_content(
        "HOST.VPS.EXAMPLE.NET.", compile_bad_pattern("vps")
    ).acceptable
    assert not check_ptr_content(
        "HOST.VPS.EXAMPLE.NET.", compile_bad_pattern("(?i)vps")
    ).acceptable
