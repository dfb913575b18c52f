"""Unit tests for core/utils/diff.py"""

from mdedit.core.utils.diff import diff_summary, unified_diff


def test_diff_summary_counts():
    """Replaced lines count as one deletion plus one addition."""
    counts = diff_summary("a\nb\nc\n", "a\nB\nc\nd\n")
    assert counts == {"added": 2, "deleted": 1, "unchanged": 2}


def test_unified_diff_identical_is_empty():
    """Identical texts produce no diff lines."""
    assert unified_diff("a\n", "a\n") == []


def test_unified_diff_labels():
    """The header carries the given labels."""
    lines = unified_diff("a\n", "b\n", "doc.md", "doc.md (restored)")
    assert lines[0].startswith("--- doc.md")
    assert lines[1].startswith("+++ doc.md (restored)")
    assert "-a\n" in lines and "+b\n" in lines
