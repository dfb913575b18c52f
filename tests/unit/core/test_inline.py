"""Unit tests for core/inline.py and the inline rules in core/tokenizer.py"""

import pytest

from mdedit.config import Settings
from mdedit.core.inline import InlineLexer
from mdedit.core.tokenizer import INLINE


@pytest.fixture(name="inline")
def inline_fixture(settings):
    return InlineLexer(settings, INLINE).tokenize


def _types(tokens):
    return [t.type for t in tokens]


def test_emphasis_keeps_delimiters(inline):
    """strong and em record the delimiter actually used."""
    tokens = inline("**b** and _e_")
    assert _types(tokens) == ["strong", "text", "em"]
    assert tokens[0].markup == "**"
    assert tokens[0].raw == "**b**"
    assert tokens[2].markup == "_"


@pytest.mark.parametrize("src", ["**a** b", "x __b__", "***c***"])
def test_no_empty_text_leaves(inline, src):
    """Used-up emphasis delimiters leave no empty text tokens behind."""
    def leaves(tokens):
        for token in tokens:
            yield token
            yield from leaves(token.tokens)
    assert all(t.text for t in leaves(inline(src)) if t.type == "text")


def test_strikethrough(inline):
    """Double tildes wrap a del token."""
    tokens = inline("~~gone~~")
    assert _types(tokens) == ["del"]
    assert tokens[0].markup == "~~"
    assert tokens[0].text == "gone"


def test_strikethrough_needs_gfm():
    """Without gfm tildes are plain text."""
    tokens = InlineLexer(Settings(gfm=False), INLINE).tokenize("~~gone~~")
    assert _types(tokens) == ["text"]


def test_codespan(inline):
    """A code span keeps its backtick run and literal content."""
    token = inline("`a*b`")[0]
    assert token.type == "codespan"
    assert token.markup == "`"
    assert token.text == "a*b"
    assert token.raw == "`a*b`"


@pytest.mark.parametrize("src", ["\\*not emphasis\\*", "fish &amp; chips", "a &#35; b"])
def test_escapes_and_entities_stay_literal(inline, src):
    """Escapes and entities keep their source spelling."""
    assert "".join(t.raw for t in inline(src)) == src


def test_link(inline):
    """A link keeps its href and title and rebuilds its source."""
    token = inline('[site](https://example.com "Home")')[0]
    assert token.type == "link"
    assert token.href == "https://example.com"
    assert token.title == "Home"
    assert token.raw == '[site](https://example.com "Home")'


def test_autolink(inline):
    """An autolink is marked so its angle brackets survive."""
    token = inline("<https://example.com>")[0]
    assert token.markup == "autolink"
    assert token.raw == "<https://example.com>"


def test_image(inline):
    """An image keeps alt text, source and title."""
    token = inline('![alt](a.png "T")')[0]
    assert (token.type, token.text, token.href, token.title) == ("image", "alt", "a.png", "T")


def test_breaks(inline):
    """A bare newline is a softbreak; two trailing spaces make a hard break."""
    assert inline("a\nb")[1].purpose == "softbreak"
    assert inline("a  \nb")[1].purpose == "breaks"


def test_balanced_inline_html(inline):
    """A start tag and its end tag wrap inline-tokenized content."""
    tokens = inline('a <span class="x">b *c*</span> d')
    assert _types(tokens) == ["text", "html", "text"]
    html = tokens[1]
    assert html.tag == "span"
    assert html.open_tag == '<span class="x">'
    assert html.close_tag == "</span>"
    assert _types(html.tokens) == ["text", "em"]


def test_inline_void_tag(inline):
    """A void tag is a single html token."""
    tokens = inline("a<br>b")
    assert _types(tokens) == ["text", "html", "text"]
    assert tokens[1].single
    assert tokens[1].tag == "br"


def test_empty_source(inline):
    """No source, no tokens."""
    assert inline("") == []
