"""Pure string helpers shared by the tokenizer, templates and restorer"""

import re


_MARKUP_ESCAPES = {"<": "&lt;", ">": "&#62;"}
_WHITESPACE_RUN = re.compile(r"\s+(\S)")


def to_camel_case(text: str) -> str:
    """'Hello big world' -> 'HelloBigWorld'; the first character keeps its case."""
    return _WHITESPACE_RUN.sub(lambda m: m.group(1).upper(), text.strip())


def count_backslashes_before(text: str, index: int) -> int:
    """Number of contiguous backslashes immediately preceding text[index]."""
    count = 0
    while index - count - 1 >= 0 and text[index - count - 1] == "\\":
        count += 1
    return count


def is_escaped(text: str, index: int) -> bool:
    return count_backslashes_before(text, index) % 2 == 1


def split_cells(row: str, count: int | None = None) -> list[str]:
    """Split a table row on unescaped pipes.

    Leading and trailing pipes do not open empty edge cells; with count the
    row is padded with empty cells or truncated to that many columns.
    """
    cells, start = [], 0
    for i, ch in enumerate(row):
        if ch == "|" and not is_escaped(row, i):
            cells.append(row[start:i])
            start = i + 1
    cells.append(row[start:])

    if cells and not cells[0].strip():
        cells.pop(0)
    if cells and not cells[-1].strip():
        cells.pop()
    if count is not None:
        cells = cells[:count] + [""] * (count - len(cells))
    return [c.strip() for c in cells]


def escape_pipes(text: str) -> str:
    """Backslash-escape every pipe that is not already escaped."""
    return "".join(
        "\\|" if ch == "|" and not is_escaped(text, i) else ch
        for i, ch in enumerate(text)
    )


def _reads_as_markup(text: str, index: int) -> bool:
    if text[index] == "<":
        nxt = text[index + 1:index + 2]
        return nxt.isalpha() or nxt in ("/", "!", "?")
    line_start = text.rfind("\n", 0, index) + 1
    return not text[line_start:index].strip()


def escape_string(text: str) -> str:
    """Entity-escape '<' and '>' that would otherwise be read back as HTML or a quote marker.

    A character behind an odd run of backslashes is already escaped; the
    backslashes themselves are always kept verbatim.
    """
    return "".join(
        _MARKUP_ESCAPES[ch]
        if ch in _MARKUP_ESCAPES and not is_escaped(text, i) and _reads_as_markup(text, i)
        else ch
        for i, ch in enumerate(text)
    )
