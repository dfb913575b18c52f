"""Markup templates for the annotated document: one function per token kind"""

import re

from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter
from markdown_it.common.utils import escapeHtml

from mdedit.core.models import ROOT_CLASS
from mdedit.core.utils.tags import is_void_tag


_START_TAG = re.compile(r"\s*<[A-Za-z]")


class _SourceOrder(HTMLFormatter):
    """Serialise attributes in the order they were written, not sorted."""

    def attributes(self, tag):
        return list(tag.attrs.items())


_SOURCE_ORDER = _SourceOrder(entity_substitution=EntitySubstitution.substitute_xml)


class MarkdownClass:
    ROOT      = ROOT_CLASS
    BLOCK     = "markdown-block"
    INLINE    = "markdown-inline"
    SYMBOL    = "markdown-symbol"
    STRUCTURE = "markdown-structure"
    TASK_LIST = "markdown-task-list"
    CUSTOM    = "markdown-custom"
    CODE      = "markdown-code"
    EMPTY     = "markdown-empty"


def _attr(value) -> str:
    return escapeHtml(str(value))


def _marker(kind: str, position: str, text: str) -> str:
    return f'<span class="{kind}" data-position="{position}">{escapeHtml(text)}</span>'


def closed_symbol(type_: str, content: str, symbol: str, tag: str) -> str:
    """Inline wrapper with identical prefix/suffix symbols (emphasis, strike, code span)."""
    return (
        f'<span class="{MarkdownClass.INLINE}" data-type="{type_}">'
        f'{_marker(MarkdownClass.SYMBOL, "prefix", symbol)}'
        f"<{tag}>{content}</{tag}>"
        f'{_marker(MarkdownClass.SYMBOL, "suffix", symbol)}'
        f"</span>"
    )


# --- block level ---

def code(type_: str, content: str, language: str, fence: str = "") -> str:
    fence_attr = f' data-fence="{_attr(fence)}"' if fence else ""
    lang = _attr(language)
    marker = _attr(language.split()[0]) if language.strip() else ""
    return (
        f'<div class="{MarkdownClass.BLOCK}" data-type="{type_}" data-language="{lang}"{fence_attr}>'
        f'<pre class="{MarkdownClass.CODE} language-{marker}">{escapeHtml(content)}</pre></div>'
    )


def blockquote(type_: str, content: str) -> str:
    return f'<blockquote class="{MarkdownClass.BLOCK}" data-type="{type_}">{content}</blockquote>'


def hr(type_: str, raw: str) -> str:
    return f'<hr class="{MarkdownClass.BLOCK}" data-type="{type_}" data-raw="{_attr(raw)}">'


def list_(type_: str, body: str, ordered: bool, start: int | None, loose: bool) -> str:
    tag = "ol" if ordered else "ul"
    start_attr = f' start="{start}"' if ordered and start is not None else ""
    return (
        f'<{tag} class="{MarkdownClass.BLOCK}" data-type="{type_}"{start_attr} '
        f'data-loose="{"true" if loose else "false"}">{body}</{tag}>'
    )


def listitem(type_: str, content: str, task: bool = False) -> str:
    return f'<li class="{"task-item" if task else ""}" data-type="{type_}">{content}</li>'


def checkbox(checked: bool) -> str:
    return f'<input class="{MarkdownClass.TASK_LIST}" type="checkbox"{" checked" if checked else ""}>'


def heading(type_: str, content: str, depth: int, marker: str) -> str:
    return (
        f'<h{depth} id="{_attr("#" * depth + marker)}" class="{MarkdownClass.BLOCK}" '
        f'data-type="{type_}">{content}</h{depth}>'
    )


def paragraph(type_: str, content: str) -> str:
    return f'<p class="{MarkdownClass.BLOCK}" data-type="{type_}">{content}</p>'


def text_block(content: str) -> str:
    """Tight block text inside a list item or table-less container."""
    return f'<div class="{MarkdownClass.BLOCK}" data-type="text">{content}</div>'


def empty_line() -> str:
    """Placeholder for one blank line; restores to an empty line."""
    return (
        f'<p class="{MarkdownClass.BLOCK} {MarkdownClass.EMPTY}" data-type="empty">'
        f'<span class="{MarkdownClass.INLINE}" data-type="text">{br("br", "empty")}</span></p>'
    )


def table(type_: str, header: str, body: str) -> str:
    return (
        f'<table class="{MarkdownClass.BLOCK}" data-type="{type_}">'
        f"<thead><tr>{header}</tr></thead><tbody>{body}</tbody></table>"
    )


def tablerow(content: str) -> str:
    return f"<tr>{content}</tr>"


def tablecell(content: str, header: bool, align: str | None) -> str:
    tag = "th" if header else "td"
    align_attr = f' align="{align}" data-align="{align}"' if align else ""
    return f'<{tag} data-type="tablecell"{align_attr}>{content}</{tag}>'


def front_matter(raw: str) -> str:
    return f'<pre class="{MarkdownClass.BLOCK}" data-type="frontmatter">{escapeHtml(raw)}</pre>'


def mark_start_tag(open_tag: str) -> tuple[str, str]:
    """Copy of a literal start tag carrying the custom marker class; returns (start tag, tag name)."""
    soup = BeautifulSoup(open_tag.strip(), "html.parser")
    element = soup.find(True)
    if element is None:
        return "", ""
    element["class"] = [*element.get("class", []), MarkdownClass.CUSTOM]
    element.clear()
    markup = element.decode(formatter=_SOURCE_ORDER)
    if is_void_tag(element.name):
        return markup, element.name
    return markup[:-len(f"</{element.name}>")], element.name


def custom(
    type_: str,
    content: str,
    open_tag: str,
    close_tag: str,
    block: bool,
    single: bool,
    ) -> str:
    """Embedded HTML: literal tags as structure markers around a marked copy of the element."""
    container, kind = ("div", MarkdownClass.BLOCK) if block else ("span", MarkdownClass.INLINE)
    body = ""
    start, name = mark_start_tag(open_tag) if _START_TAG.match(open_tag) else ("", "")
    if name and is_void_tag(name):
        body = start
    elif name and not single:
        body = f"{start}{content}</{name}>"
    suffix = _marker(MarkdownClass.STRUCTURE, "suffix", close_tag) if close_tag else ""
    return (
        f'<{container} class="{kind}" data-type="{type_}">'
        f'{_marker(MarkdownClass.STRUCTURE, "prefix", open_tag)}{body}{suffix}'
        f"</{container}>"
    )


# --- inline level ---

def strong(type_: str, content: str, symbol: str) -> str:
    return closed_symbol(type_, content, symbol, "strong")


def em(type_: str, content: str, symbol: str) -> str:
    return closed_symbol(type_, content, symbol, "em")


def del_(type_: str, content: str, symbol: str) -> str:
    return closed_symbol(type_, content, symbol, "del")


def codespan(type_: str, content: str, symbol: str) -> str:
    return closed_symbol(type_, content, symbol, "code")


def br(type_: str, purpose: str = "breaks") -> str:
    return f'<br class="{MarkdownClass.INLINE}" data-purposes="{purpose}" data-type="{type_}">'


def link(type_: str, content: str, href: str, title: str | None, structures: tuple[str, str]) -> str:
    title_attr = f' title="{_attr(title)}"' if title else ""
    return (
        f'<span class="{MarkdownClass.INLINE}" data-type="{type_}">'
        f'{_marker(MarkdownClass.STRUCTURE, "prefix", structures[0])}'
        f'<a href="{_attr(href)}"{title_attr}>{content}</a>'
        f'{_marker(MarkdownClass.STRUCTURE, "suffix", structures[1])}'
        f"</span>"
    )


def image(type_: str, alt: str, href: str, title: str | None, structure: str) -> str:
    title_attr = f' title="{_attr(title)}"' if title else ""
    return (
        f'<span class="{MarkdownClass.INLINE}" data-type="{type_}">'
        f'{_marker(MarkdownClass.STRUCTURE, "prefix", structure)}'
        f'<img src="{_attr(href)}" alt="{_attr(alt)}"{title_attr}></span>'
    )


def text(content: str) -> str:
    return f'<span class="{MarkdownClass.INLINE}" data-type="text">{content or br("br", "empty")}</span>'
