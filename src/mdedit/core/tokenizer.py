"""Tokenizer extensions: recogniser overrides and inline rules for the annotated editor"""

import logging
import re
from typing import Optional

from markdown_it.rules_inline import StateInline

from mdedit.core import rules
from mdedit.core.engine import Context, Tokenizer, compensate_indent
from mdedit.core.models import TableCell, Token
from mdedit.core.utils.strings import split_cells


logger = logging.getLogger(__name__)

_LAZY_UNDERLINE = re.compile(r"^ {0,3}((?:=+|-+)[ \t]*)$")
_BARE_QUOTE = re.compile(r"^[ \t]*(?:>[ \t]*)+$")
_LEAD_LINES = re.compile(r"^(?:[ \t]*\n)*")
_TRAIL_LINES = re.compile(r"(?:\n[ \t]*)*$")


# --- code ---

def fenced_code_token(raw: str, pedantic: bool) -> Token:
    """Build a code token from a fenced block; malformed input keeps its body minus fence lines."""
    m = rules.FENCE_BLOCK.match(raw)
    if m is None:
        logger.debug("malformed fenced block, stripping fence markers")
        return Token("code", raw=raw, text=rules.BARE_FENCE.sub("", raw).strip("\n"), language="")
    text = m.group(4) or ""
    if not pedantic:
        text = compensate_indent(raw, text)
    return Token("code", raw=raw, text=text, language=m.group(3).strip(), markup=m.group(2))


def find_closing_fence(src: str, fence: str, start: int) -> Optional[int]:
    """End offset of the first bare fence line closing fence (same character, at least as long)."""
    for m in rules.CLOSING_FENCE.finditer(src, start):
        marker = m.group(1)
        if marker[0] == fence[0] and len(marker) >= len(fence):
            return m.end()
    return None


def fences(tk: Tokenizer, src: str, ctx: Context) -> Optional[Token]:
    """Fenced code with a real closing fence; anything else defers."""
    if m := rules.FENCE_BLOCK.match(src):
        return fenced_code_token(m.group(0), tk.settings.pedantic)
    return None


def paragraph(tk: Tokenizer, src: str, ctx: Context) -> Optional[Token]:
    """Paragraph that repairs a fenced block the paragraph rule cut short.

    A capture opening with a fence line is extended to the first true
    closing fence further on; with no closing fence it stays a paragraph.
    """
    token = tk.paragraph(src, ctx)
    if token is None:
        return None
    return _repair_fence(token, src, tk.settings.pedantic)


def text(tk: Tokenizer, src: str, ctx: Context) -> Optional[Token]:
    """Text line inside a list item; a fence line opens a code block running to its closing fence."""
    token = tk.text(src, ctx)
    if token is None:
        return None
    # item content is already cut at the item's column, so the fence indent is stripped
    return _repair_fence(token, src, pedantic=False)


def _repair_fence(token: Token, src: str, pedantic: bool) -> Token:
    opener = rules.FENCE_OPEN.match(token.raw)
    if opener is None:
        return token
    end = find_closing_fence(src, opener.group(1), opener.end())
    if end is None:
        logger.debug("unterminated fence %r kept as %s", opener.group(1), token.type)
        return token
    if end > len(token.raw):
        logger.debug("extended unterminated fence %r to its closing fence", opener.group(1))
    return fenced_code_token(src[:end], pedantic)


# --- blockquote ---

def mark_empty_quote_lines(lines: list[str]) -> list[str]:
    """Tag a bare '>' line that follows another bare line at the same depth with the empty sentinel."""
    marked = list(lines)
    for i in range(1, len(lines)):
        if _BARE_QUOTE.match(lines[i]) and _BARE_QUOTE.match(lines[i - 1]) \
                and lines[i].count(">") == lines[i - 1].count(">"):
            marked[i] = lines[i].rstrip() + " " + rules.EMPTY
    return marked


def _quote_text(lines: list[str]) -> str:
    out = []
    for line in lines:
        if rules.QUOTE_MARKER.match(line):
            out.append(rules.QUOTE_MARKER.sub("", line, count=1))
        elif m := _LAZY_UNDERLINE.match(line):
            # a lazy underline must not turn the quoted paragraph into a heading
            out.append("    " + m.group(1))
        else:
            out.append(line)
    return "\n".join(out)


def blockquote(tk: Tokenizer, src: str, ctx: Context) -> Optional[Token]:
    """Blockquote built from runs of quoted lines plus their lazy continuations.

    Each run is tokenized at top level into the shared child list. A code
    block ends the quote; a trailing nested quote or list absorbs the
    remaining lines before the next run.
    """
    m = rules.BLOCKQUOTE.match(src)
    if m is None:
        return None
    source_lines = m.group(0).rstrip("\n").split("\n")
    lines = mark_empty_quote_lines(source_lines)
    total = len(lines)
    tokens: list[Token] = []
    inner = ctx.nested(top=True)
    continuation = False

    while lines:
        in_quote, current = False, []
        for line in lines:
            if rules.QUOTE_MARKER.match(line):
                in_quote = True
            elif in_quote:
                break
            current.append(line)
        lines = lines[len(current):]

        tk.lexer.block_tokens(_quote_text(current), tokens, top=True, depth=inner.depth,
                              continuation=continuation)
        continuation = True
        if not lines or not tokens:
            continue

        last = tokens[-1]
        if last.type == "code":
            break
        if last.type in ("blockquote", "list"):
            joined = last.raw.rstrip("\n") + "\n" + "\n".join(lines)
            absorbed = tk.run(last.type, joined, inner)
            if absorbed is None:
                continue
            logger.debug("nested %s absorbed continuation lines", last.type)
            tokens[-1] = absorbed
            rest = joined[len(absorbed.raw):].removeprefix("\n")
            lines = rest.split("\n") if rest else []
            continuation = False

    consumed = source_lines[:total - len(lines)]
    raw = m.group(0) if not lines else "\n".join(consumed) + "\n"
    return Token("blockquote", raw=raw, text=_quote_text(consumed), tokens=tokens)


# --- html ---

def _rest_of_line(src: str, pos: int) -> int:
    end = src.find("\n", pos)
    return len(src) if end == -1 else end


def html(tk: Tokenizer, src: str, ctx: Context) -> Optional[Token]:
    """Balanced block-level HTML: block tags, custom elements and void tags on their own line."""
    m = rules.BLOCK_HTML.match(src)
    if m is None:
        return None

    if m.group("void"):
        end = _rest_of_line(src, m.end())
        if src[m.end():end].strip():
            return None
        return Token(
            "html", raw=src[:end], block=True, single=True,
            tag=m.group("void_name").lower(), open_tag=m.group("void"),
        )

    name = m.group("name")
    closing = rules.find_closing_tag(src, name, m.end())
    if closing is None:
        logger.debug("no closing tag for <%s>, deferring", name)
        return None
    close_start, close_end = closing
    end = _rest_of_line(src, close_end)
    if src[close_end:end].strip():
        return None

    content = src[m.end():close_start]
    lead = _LEAD_LINES.match(content).group(0)
    trail = _TRAIL_LINES.search(content, len(lead)).group(0)
    inner = content[len(lead):len(content) - len(trail)]
    if "\n" in inner or lead:
        children = tk.lexer.block_tokens(inner, top=True, depth=ctx.depth + 1)
    else:
        children = tk.lexer.inline_tokens(inner)
    return Token(
        "html", raw=src[:end], text=inner, tokens=children, block=True,
        single=not inner, tag=name.lower(),
        open_tag=m.group("open") + lead, close_tag=trail + src[close_start:close_end],
    )


# --- table ---

def column_align(cell: str) -> Optional[str]:
    cell = cell.strip()
    if cell.startswith(":") and cell.endswith(":"):
        return "center"
    if cell.endswith(":"):
        return "right"
    if cell.startswith(":"):
        return "left"
    return None


def _cell(tk: Tokenizer, text: str, header: bool, align: Optional[str]) -> TableCell:
    if not text:
        return TableCell(text=rules.EMPTY, header=header, align=align)
    return TableCell(text=text, tokens=tk.lexer.inline_tokens(text), header=header, align=align)


def table(tk: Tokenizer, src: str, ctx: Context) -> Optional[Token]:
    """GFM table; a delimiter row without pipes or colons, or a column count mismatch, declines."""
    m = rules.TABLE.match(src)
    if m is None:
        return None
    delimiter = m.group(2)
    if not rules.TABLE_DELIMITER_MARK.search(delimiter):
        return None

    header = split_cells(m.group(1))
    aligns = [column_align(c) for c in split_cells(delimiter)]
    if len(header) != len(aligns):
        logger.debug("table declined: %d header cells, %d delimiter cells", len(header), len(aligns))
        return None

    body = (m.group(3) or "").rstrip("\n")
    rows = [split_cells(row, len(header)) for row in body.split("\n")] if body else []
    return Token(
        "table", raw=m.group(0), align=aligns,
        header=[_cell(tk, text, True, aligns[i]) for i, text in enumerate(header)],
        rows=[[_cell(tk, text, False, aligns[i]) for i, text in enumerate(row)] for row in rows],
    )


# --- inline rules (markdown-it-py signature) ---

def strikethrough(state: StateInline, silent: bool) -> bool:
    """~text~ and ~~text~~ with escape-aware content."""
    start = state.pos
    if state.src[start] != "~":
        return False
    m = rules.DEL.match(state.src[start:state.posMax])
    if m is None:
        return False
    if not silent:
        marker = m.group(1)
        token = state.push("del_open", "del", 1)
        token.markup = marker
        old_max = state.posMax
        state.pos = start + len(marker)
        state.posMax = state.pos + len(m.group(2))
        state.md.inline.tokenize(state)
        state.posMax = old_max
        token = state.push("del_close", "del", -1)
        token.markup = marker
    state.pos = start + m.end()
    return True


def balanced_html(state: StateInline, silent: bool) -> bool:
    """A start tag with its balancing end tag, content tokenized inline; void tags stand alone."""
    start = state.pos
    if state.src[start] != "<":
        return False
    src = state.src[start:state.posMax]
    m = rules.INLINE_HTML.match(src)
    if m is None:
        return False

    if m.group("void"):
        if not silent:
            token = state.push("html_single", "", 0)
            token.content = m.group("void")
        state.pos = start + m.end()
        return True

    closing = rules.find_closing_tag(src, m.group("name"), m.end())
    if closing is None:
        return False
    close_start, close_end = closing
    if not silent:
        token = state.push("html_open", "", 1)
        token.meta = {"tag": m.group("name").lower(), "open": m.group("open")}
        old_max = state.posMax
        state.pos = start + m.end()
        state.posMax = start + close_start
        state.md.inline.tokenize(state)
        state.posMax = old_max
        token = state.push("html_close", "", -1)
        token.meta = {"close": src[close_start:close_end]}
    state.pos = start + close_end
    return True


TOKENIZER = {
    "paragraph":  paragraph,
    "text":       text,
    "fences":     fences,
    "blockquote": blockquote,
    "html":       html,
    "table":      table,
}

INLINE = {
    "del":  strikethrough,
    "html": balanced_html,
}
