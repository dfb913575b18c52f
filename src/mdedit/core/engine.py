"""Base Markdown engine: block lexer with overridable recognisers, token parser and renderer hooks"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from markdown_it.common.utils import escapeHtml

from mdedit.config import Settings
from mdedit.core import rules
from mdedit.core.errors import MarkdownError, NestingTooDeepError
from mdedit.core.inline import InlineLexer
from mdedit.core.models import Token


logger = logging.getLogger(__name__)

BLOCK_RULES = (
    "space", "empty", "code", "fences", "heading", "hr", "blockquote",
    "list", "html", "table", "lheading", "paragraph", "text",
)


@dataclass(frozen=True)
class Context:
    """Where a recogniser runs: at top level (paragraphs) or inside a container, and how deep."""
    top:   bool = True
    depth: int = 0

    def nested(self, top: bool = True) -> "Context":
        return Context(top=top, depth=self.depth + 1)


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def compensate_indent(raw: str, text: str) -> str:
    """Strip the opening fence's indentation from each content line."""
    indent = _indent(raw)
    if not indent:
        return text
    return "\n".join(line[min(indent, _indent(line)):] for line in text.split("\n"))


class Tokenizer:
    """Default block recognisers.

    An override registered under a rule name runs first; returning None
    defers to the default recogniser of the same name.
    """

    def __init__(self, settings: Settings, overrides: dict[str, Callable] = None):
        self.settings = settings
        self.overrides = dict(overrides or {})
        self.lexer: Optional["Lexer"] = None

    def run(self, name: str, src: str, ctx: Context) -> Optional[Token]:
        override = self.overrides.get(name)
        if override is not None:
            token = override(self, src, ctx)
            if token is not None:
                return token
        return getattr(self, name)(src, ctx)

    def space(self, src: str, ctx: Context) -> Optional[Token]:
        m = rules.NEWLINE.match(src)
        if m and m.group(0):
            return Token("space", raw=m.group(0))
        return None

    def empty(self, src: str, ctx: Context) -> Optional[Token]:
        if m := rules.EMPTY_LINE.match(src):
            return Token("empty", raw=m.group(0), block=True)
        return None

    def code(self, src: str, ctx: Context) -> Optional[Token]:
        if m := rules.INDENTED_CODE.match(src):
            return Token("code", raw=m.group(0), text=rules.INDENT_STRIP.sub("", m.group(0)), language="")
        return None

    def fences(self, src: str, ctx: Context) -> Optional[Token]:
        m = rules.FENCES.match(src)
        if m is None:
            return None
        raw, text = m.group(0), m.group(3) or ""
        return Token(
            "code", raw=raw, text=compensate_indent(raw, text),
            language=m.group(2).strip(), markup=m.group(1),
        )

    def heading(self, src: str, ctx: Context) -> Optional[Token]:
        m = rules.HEADING.match(src)
        if m is None:
            return None
        text = m.group(2).strip()
        if text.endswith("#"):
            trimmed = text.rstrip("#")
            if not trimmed or trimmed.endswith((" ", "\t")):
                text = trimmed.strip()
        return Token(
            "heading", raw=m.group(0), text=text, depth=len(m.group(1)),
            tokens=self.lexer.inline_tokens(text),
        )

    def hr(self, src: str, ctx: Context) -> Optional[Token]:
        if m := rules.HR.match(src):
            return Token("hr", raw=m.group(0))
        return None

    def blockquote(self, src: str, ctx: Context) -> Optional[Token]:
        m = rules.BLOCKQUOTE.match(src)
        if m is None:
            return None
        lines = m.group(0).rstrip("\n").split("\n")
        text = "\n".join(rules.QUOTE_MARKER.sub("", line, count=1) for line in lines)
        return Token(
            "blockquote", raw=m.group(0), text=text,
            tokens=self.lexer.block_tokens(text, top=True, depth=ctx.depth + 1),
        )

    def html(self, src: str, ctx: Context) -> Optional[Token]:
        m = rules.BLOCK_COMMENT.match(src)
        if m is None:
            return None
        return Token(
            "html", raw=m.group(0), text=m.group(1), block=True, single=True,
            tag="!--", open_tag=m.group(1),
        )

    def table(self, src: str, ctx: Context) -> Optional[Token]:
        # tables only come from a registered table recogniser
        return None

    def lheading(self, src: str, ctx: Context) -> Optional[Token]:
        m = rules.LHEADING.match(src)
        if m is None:
            return None
        text = m.group(1).strip()
        return Token(
            "heading", raw=m.group(0), text=text,
            depth=1 if m.group(2).startswith("=") else 2,
            markup="setext", tokens=self.lexer.inline_tokens(text),
        )

    def paragraph(self, src: str, ctx: Context) -> Optional[Token]:
        m = rules.PARAGRAPH.match(src)
        if m is None:
            return None
        text = m.group(0).strip()
        return Token("paragraph", raw=m.group(0), text=text, tokens=self.lexer.inline_tokens(text))

    def text(self, src: str, ctx: Context) -> Optional[Token]:
        m = rules.TEXT.match(src)
        if m is None:
            return None
        text = m.group(0).lstrip()
        return Token("text", raw=m.group(0), text=text, block=True,
                     tokens=self.lexer.inline_tokens(text.rstrip()))

    def _item_lines(self, lines, i: int, m) -> tuple:
        """Collect one item's content lines starting at lines[i]; return (content, next index)."""
        indent, bullet, spacing = m.groups()
        if 1 <= len(spacing) <= 4:
            content_indent = m.end()
        else:
            content_indent = len(indent) + len(bullet) + 1
        content = [lines[i][content_indent:]]
        i += 1
        while i < len(lines):
            line = lines[i]
            if not line.strip():
                j = i
                while j < len(lines) and not lines[j].strip():
                    j += 1
                if j < len(lines) and _indent(lines[j]) >= content_indent:
                    content.extend("" for _ in range(i, j))
                    i = j
                    continue
                break
            if _indent(line) >= content_indent:
                content.append(line[content_indent:])
            elif rules.LIST_ITEM.match(line) or rules.INTERRUPTS.match(line):
                break
            else:
                # lazy continuation of the item's paragraph
                content.append(line.lstrip())
            i += 1
        return content, i

    def _list_item(self, content, raw: str, ctx: Context) -> Token:
        text = "\n".join(content)
        task = checked = False
        if self.settings.gfm and (t := rules.TASK.match(text)):
            task, checked = True, t.group(1) != " "
            text = text[t.end():]
        return Token(
            "list_item", raw=raw, text=text, task=task, checked=checked,
            tokens=self.lexer.block_tokens(text, top=False, depth=ctx.depth + 1),
        )

    def list(self, src: str, ctx: Context) -> Optional[Token]:
        first = rules.LIST_ITEM.match(src)
        if first is None or rules.HR.match(src):
            return None
        bullet = first.group(2)
        kind = bullet[-1]
        ordered = kind in ".)"

        lines = src.split("\n")
        items, loose, i = [], False, 0
        while i < len(lines):
            m = rules.LIST_ITEM.match(lines[i])
            if m is None or m.group(2)[-1] != kind or rules.HR.match(lines[i]):
                break
            start = i
            content, i = self._item_lines(lines, i, m)
            loose = loose or "" in content[1:]
            items.append(self._list_item(content, "\n".join(lines[start:i]), ctx))

            j = i
            while j < len(lines) and not lines[j].strip():
                j += 1
            if j == i:
                continue
            nxt = rules.LIST_ITEM.match(lines[j]) if j < len(lines) else None
            if nxt is None or nxt.group(2)[-1] != kind or rules.HR.match(lines[j]):
                break
            loose, i = True, j

        raw = "\n".join(lines[:i]) + ("\n" if i < len(lines) else "")
        return Token(
            "list", raw=raw, ordered=ordered, loose=loose, items=items,
            start=int(bullet[:-1]) if ordered else None,
        )


class Lexer:
    """Recursive-descent block lexer; inline content goes through the InlineLexer."""

    def __init__(self, tokenizer: Tokenizer, inline: InlineLexer, settings: Settings):
        self.tokenizer = tokenizer
        self.inline = inline
        self.settings = settings
        tokenizer.lexer = self
        self.rules = [
            name for name in BLOCK_RULES
            if not (name == "fences" and settings.pedantic)
            and not (name == "table" and not settings.gfm)
        ]

    def lex(self, src: str) -> list[Token]:
        return self.block_tokens(src.replace("\r\n", "\n").replace("\r", "\n"))

    def inline_tokens(self, src: str) -> list[Token]:
        return self.inline.tokenize(src)

    def block_tokens(
        self,
        src: str,
        tokens: list[Token] = None,
        top: bool = True,
        depth: int = 0,
        continuation: bool = False,
        ) -> list[Token]:
        """Tokenize src into tokens (appending when a list is given).

        With continuation, a leading paragraph merges into a trailing
        paragraph already in tokens (lazy blockquote lines).
        """
        if depth > self.settings.max_nesting:
            raise NestingTooDeepError(self.settings.max_nesting)
        tokens = [] if tokens is None else tokens
        ctx = Context(top=top, depth=depth)
        first = True
        while src:
            token = self._next(src, ctx)
            src = src[len(token.raw):]
            last = tokens[-1] if tokens else None

            if token.type == "space":
                ends_line = last is None or last.raw.endswith("\n")
                if not ends_line and token.raw == "\n":
                    last.raw += "\n"
                else:
                    token.lines = token.raw.count("\n") - (0 if ends_line else 1)
                    tokens.append(token)
            elif token.type == "text" and last is not None and last.type == "text" and last.block:
                self._merge(last, token, inline=True)
            elif continuation and first and last is not None and last.type == token.type == "paragraph":
                self._merge(last, token, inline=False)
            else:
                tokens.append(token)
            first = False
        return tokens

    def _merge(self, last: Token, token: Token, inline: bool) -> None:
        if inline:
            last.raw += token.raw
        else:
            last.raw += "\n" + token.raw
        last.text += "\n" + token.text
        last.tokens = self.inline_tokens(last.text.rstrip())

    def _next(self, src: str, ctx: Context) -> Token:
        for name in self.rules:
            if (name == "paragraph" and not ctx.top) or (name == "text" and ctx.top):
                continue
            token = self.tokenizer.run(name, src, ctx)
            if token is not None and token.raw:
                return token
        raise MarkdownError(f"No block rule matched at {src[:20]!r}")


class Renderer:
    """Default renderings; overrides keyed by token type take precedence."""

    def __init__(self, settings: Settings, overrides: dict[str, Callable] = None):
        self.settings = settings
        self.overrides = dict(overrides or {})
        self.parser: Optional["Parser"] = None

    def render(self, token: Token) -> str:
        override = self.overrides.get(token.type)
        if override is not None:
            return override(self, token)
        default = getattr(self, token.type, None)
        return default(token) if default is not None else self.fallback(token)

    def space(self, token: Token) -> str:
        return ""

    def text(self, token: Token) -> str:
        if token.block:
            return self.parser.parse_inline(token.tokens)
        return escapeHtml(token.text)

    def paragraph(self, token: Token) -> str:
        return f"<p>{self.parser.parse_inline(token.tokens)}</p>"

    def fallback(self, token: Token) -> str:
        logger.debug("no renderer for %s token, emitting escaped source", token.type)
        return escapeHtml(token.raw)


class Parser:
    """Walks a token list and concatenates each token's rendering."""

    def __init__(self, renderer: Renderer):
        self.renderer = renderer
        renderer.parser = self

    def parse(self, tokens: list[Token]) -> str:
        return "".join(self.renderer.render(token) for token in tokens)

    def parse_inline(self, tokens: list[Token]) -> str:
        return "".join(self.renderer.render(token) for token in tokens)


class Markdown:
    """Configurable engine: block recogniser overrides, inline rules and renderer overrides."""

    def __init__(self, settings: Settings = None):
        self.settings = settings or Settings()
        self.tokenizer_overrides: dict[str, Callable] = {}
        self.renderer_overrides: dict[str, Callable] = {}
        self.inline_rules: dict[str, Callable] = {}
        self._inline: Optional[InlineLexer] = None

    def use(
        self,
        tokenizer: dict[str, Callable] = None,
        renderer: dict[str, Callable] = None,
        inline: dict[str, Callable] = None,
        ) -> "Markdown":
        """Register overrides; later registrations replace earlier ones of the same name."""
        self.tokenizer_overrides.update(tokenizer or {})
        self.renderer_overrides.update(renderer or {})
        self.inline_rules.update(inline or {})
        self._inline = None
        return self

    def lexer(self) -> Lexer:
        if self._inline is None:
            self._inline = InlineLexer(self.settings, self.inline_rules)
        return Lexer(Tokenizer(self.settings, self.tokenizer_overrides), self._inline, self.settings)

    def lex(self, src: str) -> list[Token]:
        return self.lexer().lex(src)

    def render(self, tokens: list[Token]) -> str:
        return Parser(Renderer(self.settings, self.renderer_overrides)).parse(tokens)

    def parse(self, src: str) -> str:
        return self.render(self.lex(src))

    async def parse_async(self, src: str) -> str:
        await asyncio.sleep(0)
        return self.parse(src)
