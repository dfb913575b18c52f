"""Source preprocessing: soft wraps, chunk splitting and list-chunk merging before tokenizing"""

import logging
from functools import reduce
from typing import Callable

from mdedit.config import Settings
from mdedit.core import rules


logger = logging.getLogger(__name__)


def quote_level(line: str) -> int:
    """Number of leading '>' markers on a line."""
    m = rules.QUOTE_PREFIX.match(line)
    return m.group(1).count(">") if m else 0


def is_wrappable_line(line: str) -> bool:
    """A line may end in a soft wrap when it has content; quote lines need content after their markers."""
    if not line.strip():
        return False
    m = rules.QUOTE_PREFIX.match(line)
    if m is None:
        return True
    rest = line[m.end():]
    return "  " in rest or bool(rest.strip())


def _wrap_segment(segment: str) -> str:
    lines = segment.split("\n")
    out = []
    for i, line in enumerate(lines[:-1]):
        nxt = lines[i + 1]
        out.append(line)
        if _wraps(line, nxt):
            out.append(rules.SOFT_BREAK)
        else:
            out.append("\n")
    out.append(lines[-1])
    return "".join(out)


def _wraps(line: str, nxt: str) -> bool:
    if not is_wrappable_line(line) or line.endswith("  "):
        return False
    if not nxt.strip() or rules.LIST_LINE.match(nxt):
        return False
    if nxt.lstrip().startswith(">"):
        if not is_wrappable_line(nxt):
            return False
        if quote_level(line) != quote_level(nxt):
            return False
    return True


def insert_soft_line_wraps(text: str) -> str:
    """Turn single newlines into hard breaks ("  \\n"), leaving fenced code untouched.

    Lines already ending in two spaces are left alone, so the transform is idempotent.
    """
    parts = rules.CODE_FENCE_SPLIT.split(text)
    # odd indices are the fenced code blocks captured by the split
    return "".join(part if i % 2 else _wrap_segment(part) for i, part in enumerate(parts))


def _overlaps(spans: list[tuple[int, int]], start: int, end: int) -> bool:
    return any(s < end and start < e for s, e in spans)


def split_into_chunks(text: str, max_chunks: int = 0) -> list[str]:
    """Split on blank-line separators scanning from the end; separators inside code never split.

    Joining the chunks with the separator reproduces text exactly. With
    max_chunks, splitting stops once that many chunks exist.
    """
    separator = rules.CHUNK_SEPARATOR
    protected = [m.span() for m in rules.CODE_SPANS.finditer(text)]
    tails: list[str] = []
    end = pos = len(text)
    while not max_chunks or len(tails) < max_chunks - 1:
        idx = text.rfind(separator, 0, pos)
        if idx == -1:
            break
        if _overlaps(protected, idx, idx + len(separator)):
            pos = idx + len(separator) - 1
            continue
        tails.append(text[idx + len(separator):end])
        end = pos = idx
    return [text[:end], *reversed(tails)]


def _list_kind(chunk: str) -> str | None:
    trimmed = chunk.lstrip()
    if rules.UNORDERED_ITEM.match(trimmed):
        return "unordered"
    if rules.ORDERED_ITEM.match(trimmed):
        return "ordered"
    return None


def merge_adjacent_list_chunks(chunks: list[str]) -> list[str]:
    """Rejoin consecutive chunks that start list items of the same kind."""
    merged: list[str] = []
    buffer: list[str] = []
    current = None
    for chunk in chunks:
        kind = _list_kind(chunk)
        if kind is None or kind != current:
            if buffer:
                merged.append(rules.CHUNK_SEPARATOR.join(buffer))
                buffer = []
            current = kind
        if kind is None:
            merged.append(chunk)
        else:
            buffer.append(chunk)
    if buffer:
        merged.append(rules.CHUNK_SEPARATOR.join(buffer))
    return merged


def mark_empty_chunks(chunks: list[str]) -> list[str]:
    """Empty chunks, and chunks ending in a newline, carry the empty-line sentinel."""
    return [chunk + rules.EMPTY if not chunk or chunk.endswith("\n") else chunk for chunk in chunks]


class Preprocessor:
    """Chainable transforms over the source; submit() runs them in registration order."""

    def __init__(self, src: str):
        self.value = src.replace("\r\n", "\n").replace("\r", "\n")
        self.pipeline: list[Callable] = []

    def soft_line_wraps(self) -> "Preprocessor":
        self.pipeline.append(insert_soft_line_wraps)
        return self

    def split(self, max_chunks: int = 0) -> "Preprocessor":
        self.pipeline.append(lambda value: split_into_chunks(value, max_chunks))
        return self

    def merge_lists(self) -> "Preprocessor":
        self.pipeline.append(merge_adjacent_list_chunks)
        return self

    def mark_empty(self) -> "Preprocessor":
        self.pipeline.append(mark_empty_chunks)
        return self

    def submit(self):
        return reduce(lambda acc, fn: fn(acc), self.pipeline, self.value)


def preprocess(src: str, settings: Settings = None) -> list[str]:
    """Source text to the list of chunks rendered independently."""
    settings = settings or Settings()
    pre = Preprocessor(src)
    if settings.soft_wraps:
        pre.soft_line_wraps()
    chunks = pre.split(settings.max_chunks).merge_lists().mark_empty().submit()
    logger.debug("preprocessed %d chars into %d chunks", len(src), len(chunks))
    return chunks
