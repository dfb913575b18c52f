"""Line diffs between a Markdown source and its restored form"""

import difflib


def diff_summary(source: str, restored: str) -> dict[str, int]:
    """Return added/deleted/unchanged line counts of restored relative to source."""
    matcher = difflib.SequenceMatcher(None, source.splitlines(), restored.splitlines())
    counts = {"added": 0, "deleted": 0, "unchanged": 0}

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            counts["unchanged"] += i2 - i1
        if tag in ("replace", "delete"):
            counts["deleted"] += i2 - i1
        if tag in ("replace", "insert"):
            counts["added"] += j2 - j1

    return counts


def unified_diff(
    source: str,
    restored: str,
    from_label: str = "source",
    to_label: str = "restored",
    context: int = 3,
    ) -> list[str]:
    """Return unified diff lines comparing source to restored. Empty list if identical.

    Lines keep their newlines; join with '' for display.
    """
    return list(difflib.unified_diff(
        source.splitlines(keepends=True),
        restored.splitlines(keepends=True),
        fromfile=from_label, tofile=to_label, n=context,
    ))
