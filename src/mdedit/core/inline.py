"""Inline tokenization: markdown-it-py inline rules folded into the token tree"""

import re
from typing import Callable

from markdown_it import MarkdownIt

from mdedit.config import Settings
from mdedit.core.models import Token


# hook name -> markdown-it inline rule it is inserted before
INLINE_HOOKS = {"del": "emphasis", "html": "html_inline"}

_OPEN_TYPES = {
    "strong_open": "strong",
    "em_open":     "em",
    "link_open":   "link",
    "del_open":    "del",
    "html_open":   "html",
}
_TAG_NAME = re.compile(r"</?([A-Za-z][\w-]*)")


def _quote_title(title: str | None) -> str:
    if not title:
        return ""
    return ' "' + title.replace('"', '\\"') + '"'


def _code_raw(markup: str, content: str) -> str:
    pad = " " if content.startswith("`") or content.endswith("`") else ""
    return markup + pad + content + pad + markup


def _leaf(child) -> Token:
    """Map a markdown-it leaf token onto a tree token that keeps its source text."""
    if child.type == "text_special":
        # escapes and entities stay literal so restoring reproduces the source
        return Token("text", raw=child.markup, text=child.markup)
    if child.type == "softbreak":
        return Token("br", raw="\n", purpose="softbreak")
    if child.type == "hardbreak":
        return Token("br", raw="  \n", purpose="breaks")
    if child.type == "code_inline":
        return Token(
            "codespan", raw=_code_raw(child.markup, child.content),
            text=child.content, markup=child.markup,
        )
    if child.type == "image":
        src, title = child.attrGet("src"), child.attrGet("title")
        return Token(
            "image", raw=f"![{child.content}]({src}{_quote_title(title)})",
            text=child.content, href=src, title=title,
        )
    if child.type in ("html_inline", "html_single"):
        name = _TAG_NAME.match(child.content)
        return Token(
            "html", raw=child.content, text=child.content, single=True,
            open_tag=child.content, tag=name.group(1).lower() if name else None,
        )
    return Token("text", raw=child.content, text=child.content)


def _open(child) -> Token:
    kind = _OPEN_TYPES.get(child.type, child.type.removesuffix("_open"))
    if kind == "link":
        return Token(
            "link", href=child.attrGet("href"), title=child.attrGet("title"),
            markup=child.markup,
        )
    if kind == "html":
        return Token("html", tag=child.meta["tag"], open_tag=child.meta["open"])
    return Token(kind, markup=child.markup)


def _close(token: Token, child) -> None:
    inner = "".join(t.raw for t in token.tokens)
    token.text = inner
    if token.type == "link":
        if token.markup == "autolink":
            token.raw = f"<{inner}>"
        else:
            token.raw = f"[{inner}]({token.href}{_quote_title(token.title)})"
    elif token.type == "html":
        token.close_tag = child.meta["close"]
        token.raw = token.open_tag + inner + token.close_tag
    else:
        token.raw = token.markup + inner + token.markup


def fold(children) -> list[Token]:
    """Fold a flat markdown-it open/close stream into nested tokens."""
    root: list[Token] = []
    stack: list[tuple[Token, list[Token]]] = []
    current = root
    for child in children:
        if child.nesting == 1:
            token = _open(child)
            current.append(token)
            stack.append((token, current))
            current = token.tokens
        elif child.nesting == -1 and stack:
            token, current = stack.pop()
            _close(token, child)
        elif child.nesting == 0:
            # emphasis leaves an empty text token behind each used-up delimiter run
            if child.type == "text" and not child.content:
                continue
            current.append(_leaf(child))
    return root


class InlineLexer:
    """Inline tokenizer over markdown-it-py's commonmark rules plus registered extension rules."""

    def __init__(self, settings: Settings, extensions: dict[str, Callable] = None):
        self.md = MarkdownIt("commonmark", options_update={"linkify": False, "typographer": False})
        # keep escapes and entities as separate text_special tokens
        self.md.disable("text_join")
        for name, rule in (extensions or {}).items():
            if name == "del" and not settings.gfm:
                continue
            self.md.inline.ruler.before(INLINE_HOOKS[name], name, rule)

    def tokenize(self, src: str) -> list[Token]:
        if not src:
            return []
        inline = self.md.parseInline(src)
        return fold(inline[0].children or []) if inline else []
