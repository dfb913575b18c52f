"""Unit tests for core/restorer.py"""

import pytest
from bs4 import BeautifulSoup

from mdedit.core.restorer import Restorer, restore, to_markdown


def _p(text: str) -> str:
    return f'<p class="markdown-block" data-type="paragraph"><span data-type="text">{text}</span></p>'


def test_restore_accepts_markup_string():
    """A fragment without the editor root restores each top-level element."""
    assert restore(_p("one") + _p("two")) == ["one", "two"]


def test_restore_accepts_soup_and_element():
    """A parsed tree and a single element both restore."""
    soup = BeautifulSoup(f'<div class="markdown-editor">{_p("hi")}</div>', "html.parser")
    assert restore(soup) == ["hi"]
    assert restore(soup.find("p")) == ["hi"]


def test_foreign_markup_degrades_to_text():
    """Elements without a known data-type restore as escaped text content."""
    html = '<div class="markdown-editor"><section>a <b>x</b> &lt;y&gt;</section></div>'
    assert to_markdown(html) == "a x &lt;y>"


def test_code_language_and_fence():
    """The fence and full info string are restored around the code text."""
    html = (
        '<div data-type="code" data-language="python title=x" data-fence="~~~">'
        '<pre class="markdown-code language-python">a &lt; b</pre></div>'
    )
    assert to_markdown(html) == "~~~python title=x\na < b\n~~~"


def test_code_language_from_class_only():
    """Without data attributes the language class and a backtick fence are used."""
    html = '<div data-type="code"><pre class="language-js">x</pre></div>'
    assert to_markdown(html) == "```js\nx\n```"


def test_hr_default():
    """A rule without its source restores as three dashes."""
    assert to_markdown('<hr data-type="hr">') == "---"


def test_ordered_loose_list():
    """Numbering continues from start and loose items are blank-line separated."""
    html = (
        '<ol data-type="list" start="3" data-loose="true">'
        f'<li data-type="listItem">{_p("a")}</li><li data-type="listItem">b</li></ol>'
    )
    assert to_markdown(html) == "3. a\n\n4. b"


def test_nested_list_item_with_paragraphs():
    """Extra blocks in a loose item are indented under the marker."""
    html = (
        '<ul data-type="list" data-loose="true"><li data-type="listItem">'
        f'{_p("a")}{_p("more")}'
        '<ul data-type="list" data-loose="false"><li data-type="listItem">b</li></ul>'
        "</li></ul>"
    )
    assert to_markdown(html) == "- a\n\n    more\n\n    - b"


def test_task_item():
    """A checkbox restores as a task marker."""
    html = (
        '<ul data-type="list" data-loose="false">'
        '<li data-type="listItem"><input type="checkbox" checked>done</li>'
        '<li data-type="listItem"><input type="checkbox">todo</li></ul>'
    )
    assert to_markdown(html) == "- [x] done\n- [ ] todo"


def test_blockquote_prefixes():
    """Quote lines are prefixed per depth and blank placeholders keep a bare marker."""
    html = (
        '<blockquote data-type="blockquote">'
        f'{_p("a")}<p data-type="empty"></p>{_p("b")}'
        f'<blockquote data-type="blockquote">{_p("c")}</blockquote>'
        "</blockquote>"
    )
    assert to_markdown(html) == "> a\n>\n> b\n> > c"


def test_blockquote_adjacent_paragraphs_separated():
    """Two paragraphs with no placeholder between them get a bare marker line."""
    html = f'<blockquote data-type="blockquote">{_p("a")}{_p("b")}</blockquote>'
    assert to_markdown(html) == "> a\n>\n> b"


def test_table_alignment_and_pipes():
    """Alignment comes from data-align and literal pipes in cells are escaped."""
    html = (
        '<table data-type="table"><thead><tr>'
        '<th data-type="tablecell">a|b</th><th data-type="tablecell" data-align="right">c</th>'
        "</tr></thead><tbody><tr>"
        '<td data-type="tablecell">1</td><td data-type="tablecell"></td>'
        "</tr></tbody></table>"
    )
    assert to_markdown(html) == "| a\\|b | c |\n| --- | ---: |\n| 1 |  |"


@pytest.mark.parametrize("purpose,expected", [
    ("breaks",    "a  \nb"),
    ("softbreak", "a\nb"),
    ("empty",     "a[EMPTY]b"),
])
def test_br_purposes(purpose, expected):
    """A break restores according to its purpose."""
    html = f'<span data-type="text">a</span><br data-type="br" data-purposes="{purpose}"><span data-type="text">b</span>'
    assert Restorer().inline(BeautifulSoup(html, "html.parser")) == expected


def test_wrapped_markers():
    """Marker text surrounds the restored inner content."""
    html = (
        '<span data-type="em"><span data-position="prefix">_</span>'
        '<em><span data-type="text">x</span></em><span data-position="suffix">_</span></span>'
    )
    assert to_markdown(html) == "_x_"


def test_image():
    """An image is rebuilt from its img attributes."""
    html = '<span data-type="image"><img src="a.png" alt="A" title="T"></span>'
    assert to_markdown(html) == '![A](a.png "T")'


def test_custom_html():
    """Literal tag markers surround the restored element content."""
    html = (
        '<div class="markdown-block" data-type="html">'
        '<span data-position="prefix">&lt;aside&gt;\n</span>'
        f'<aside class="markdown-custom">{_p("x")}</aside>'
        '<span data-position="suffix">\n&lt;/aside&gt;</span></div>'
    )
    assert to_markdown(html) == "<aside>\nx\n</aside>"


def test_front_matter_verbatim():
    """Front matter restores as its literal block."""
    html = '<pre data-type="frontmatter">---\ntitle: A\n---</pre>'
    assert to_markdown(html) == "---\ntitle: A\n---"


def test_code_keeps_edge_blank_lines():
    """Blank lines at the start or end of fenced content survive."""
    html = '<div data-type="code" data-language="js" data-fence="```"><pre class="language-js">\nx\n\n</pre></div>'
    assert to_markdown(html) == "```js\n\nx\n\n\n```"
