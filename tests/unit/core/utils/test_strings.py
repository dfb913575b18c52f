"""Unit tests for core/utils/strings.py"""

import pytest

from mdedit.core.utils.strings import (
    count_backslashes_before,
    escape_pipes,
    escape_string,
    is_escaped,
    split_cells,
    to_camel_case,
)


def test_to_camel_case():
    """Whitespace runs are removed and the following character upper-cased."""
    assert to_camel_case("  Hello big   world ") == "HelloBigWorld"


def test_count_backslashes_before():
    """Only the contiguous run right before the index is counted."""
    text = "a\\b\\\\|"
    assert count_backslashes_before(text, 2) == 1
    assert count_backslashes_before(text, 5) == 2
    assert count_backslashes_before(text, 0) == 0


def test_is_escaped_uses_parity():
    """An odd run of backslashes escapes; an even run escapes itself."""
    assert is_escaped("\\|", 1)
    assert not is_escaped("\\\\|", 2)


@pytest.mark.parametrize("row,count,expected", [
    ("| a | b |",       None, ["a", "b"]),
    ("a | b",           None, ["a", "b"]),
    ("| a \\| b | c |", None, ["a \\| b", "c"]),
    ("| a \\\\| b |",   None, ["a \\\\", "b"]),
    ("| a |",           3,    ["a", "", ""]),
    ("| a | b | c |",   2,    ["a", "b"]),
])
def test_split_cells(row, count, expected):
    """Rows split on unescaped pipes, padded or truncated to count."""
    assert split_cells(row, count) == expected


def test_escape_pipes_skips_escaped():
    """Bare pipes gain a backslash; escaped pipes are left alone."""
    assert escape_pipes("a | b \\| c") == "a \\| b \\| c"


@pytest.mark.parametrize("text,expected", [
    ("a < b",     "a < b"),
    ("<div>",     "&lt;div>"),
    ("</span>",   "&lt;/span>"),
    ("<!-- x",    "&lt;!-- x"),
    ("> quote",   "&#62; quote"),
    ("a > b",     "a > b"),
    ("x\n  > y",  "x\n  &#62; y"),
    ("\\<div>",   "\\<div>"),
    ("\\\\<div>", "\\\\&lt;div>"),
])
def test_escape_string(text, expected):
    """Only characters that would read back as markup are escaped."""
    assert escape_string(text) == expected
