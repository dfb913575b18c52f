"""Renderer overrides: map each token kind onto its annotated markup template"""

from markdown_it.common.utils import escapeHtml

from mdedit.core import rules, templates
from mdedit.core.engine import Renderer
from mdedit.core.models import Token
from mdedit.core.utils.strings import to_camel_case
from mdedit.core.utils.tokens import concat_texts


def _leaf_text(r: Renderer, text: str) -> str:
    escaped = escapeHtml(text)
    if r.settings.preserve_spaces:
        escaped = escaped.replace("  ", "&nbsp; ")
    return escaped


# --- block level ---

def code(r: Renderer, token: Token) -> str:
    return templates.code(token.type, token.text, token.language or "", token.markup)


def blockquote(r: Renderer, token: Token) -> str:
    """Children rendered in order; every blank line inside the quote becomes one placeholder."""
    parts = []
    for child in token.tokens:
        if child.type == "space":
            parts.append(templates.empty_line() * child.lines)
        else:
            parts.append(r.parser.parse([child]))
    return templates.blockquote(token.type, "".join(parts))


def hr(r: Renderer, token: Token) -> str:
    return templates.hr(token.type, token.raw.strip())


def list_(r: Renderer, token: Token) -> str:
    body = "".join(r.render(item) for item in token.items)
    return templates.list_(token.type, body, token.ordered, token.start, token.loose)


def list_item(r: Renderer, token: Token) -> str:
    content = templates.checkbox(token.checked) if token.task else ""
    content += r.parser.parse(token.tokens)
    return templates.listitem("listItem", content, token.task)


def heading(r: Renderer, token: Token) -> str:
    marker = to_camel_case(concat_texts(token.tokens, r.settings.max_nesting))
    return templates.heading(token.type, r.parser.parse_inline(token.tokens), token.depth, marker)


def paragraph(r: Renderer, token: Token) -> str:
    return templates.paragraph(token.type, r.parser.parse_inline(token.tokens))


def empty(r: Renderer, token: Token) -> str:
    return templates.empty_line()


def text(r: Renderer, token: Token) -> str:
    if token.block:
        return templates.text_block(r.parser.parse_inline(token.tokens))
    return templates.text(_leaf_text(r, token.text))


def table(r: Renderer, token: Token) -> str:
    def cell(c) -> str:
        if c.text == rules.EMPTY:
            content = templates.text("")
        else:
            content = r.parser.parse_inline(c.tokens)
        return templates.tablecell(content, c.header, c.align)

    header = "".join(cell(c) for c in token.header)
    body = "".join(templates.tablerow("".join(cell(c) for c in row)) for row in token.rows)
    return templates.table(token.type, header, body)


def html(r: Renderer, token: Token) -> str:
    content = r.parser.parse(token.tokens) if token.tokens else ""
    return templates.custom(token.type, content, token.open_tag, token.close_tag, token.block, token.single)


def front_matter(r: Renderer, token: Token) -> str:
    return templates.front_matter(token.raw)


# --- inline level ---

def strong(r: Renderer, token: Token) -> str:
    return templates.strong(token.type, r.parser.parse_inline(token.tokens), token.markup)


def em(r: Renderer, token: Token) -> str:
    return templates.em(token.type, r.parser.parse_inline(token.tokens), token.markup)


def del_(r: Renderer, token: Token) -> str:
    return templates.del_(token.type, r.parser.parse_inline(token.tokens), token.markup)


def codespan(r: Renderer, token: Token) -> str:
    # padding spaces added around backtick content stay with the content
    content = token.raw[len(token.markup):len(token.raw) - len(token.markup)]
    return templates.codespan(token.type, templates.text(escapeHtml(content)), token.markup)


def br(r: Renderer, token: Token) -> str:
    return templates.br(token.type, token.purpose or "breaks")


def link(r: Renderer, token: Token) -> str:
    if token.markup == "autolink":
        structures = ("<", ">")
    else:
        structures = ("[", token.raw[1 + len(token.text):])
    return templates.link(token.type, r.parser.parse_inline(token.tokens), token.href, token.title, structures)


def image(r: Renderer, token: Token) -> str:
    return templates.image(token.type, token.text, token.href, token.title, token.raw)


RENDERER = {
    "code":        code,
    "blockquote":  blockquote,
    "hr":          hr,
    "list":        list_,
    "list_item":   list_item,
    "heading":     heading,
    "paragraph":   paragraph,
    "empty":       empty,
    "text":        text,
    "table":       table,
    "html":        html,
    "frontmatter": front_matter,
    "strong":      strong,
    "em":          em,
    "del":         del_,
    "codespan":    codespan,
    "br":          br,
    "link":        link,
    "image":       image,
}
