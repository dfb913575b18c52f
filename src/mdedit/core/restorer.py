"""Restorer: rebuild Markdown source from an annotated document tree"""

import logging
import re

from bs4 import BeautifulSoup, NavigableString, Tag

from mdedit.core import rules
from mdedit.core.templates import MarkdownClass
from mdedit.core.utils.strings import escape_pipes, escape_string


logger = logging.getLogger(__name__)

_LANGUAGE_CLASS = re.compile(r"^language-(.*)$")
_HEADING_TAG = re.compile(r"^h([1-6])$")
_DELIMITERS = {"left": ":---", "center": ":---:", "right": "---:"}


def _elements(node: Tag) -> list[Tag]:
    return [child for child in node.children if isinstance(child, Tag)]


def _classes(node: Tag) -> list[str]:
    return node.get("class") or []


def _int(value, default: int) -> int:
    value = str(value or "").strip()
    return int(value) if value.isdigit() else default


def _is_block(node) -> bool:
    return isinstance(node, Tag) and MarkdownClass.BLOCK in _classes(node)


class Restorer:
    """Dispatches each element on its data-type; unknown kinds restore as escaped text content.

    Restoring never raises: malformed or foreign markup degrades to text.
    """

    def __init__(self):
        self.handlers = {
            "code":        self.code,
            "blockquote":  self.blockquote,
            "hr":          self.hr,
            "list":        self.list,
            "heading":     self.heading,
            "paragraph":   self.paragraph,
            "empty":       self.empty,
            "text":        self.text,
            "table":       self.table,
            "html":        self.custom,
            "custom":      self.custom,
            "frontmatter": self.front_matter,
            "strong":      self.wrapped,
            "em":          self.wrapped,
            "del":         self.wrapped,
            "link":        self.wrapped,
            "codespan":    self.codespan,
            "image":       self.image,
            "br":          self.br,
        }

    def restore(self, node) -> list[str]:
        """Markdown blocks for a document, an editor root, or a single element."""
        if isinstance(node, str):
            node = BeautifulSoup(node, "html.parser")
        if isinstance(node, BeautifulSoup):
            node = node.find(class_=MarkdownClass.ROOT) or node
        if isinstance(node, BeautifulSoup) or MarkdownClass.ROOT in _classes(node):
            return [
                self.element(child) for child in node.children
                if isinstance(child, Tag) or str(child).strip()
            ]
        return [self.element(node)]

    def element(self, node) -> str:
        if isinstance(node, NavigableString):
            return escape_string(str(node))
        kind = node.get("data-type")
        handler = self.handlers.get(kind)
        if handler is None:
            logger.debug("no restorer for <%s data-type=%r>, using text content", node.name, kind)
            return self.default(node)
        return handler(node)

    def default(self, node: Tag) -> str:
        return escape_string(node.get_text())

    def inline(self, node: Tag) -> str:
        return "".join(self.element(child) for child in node.children)

    def blocks(self, nodes) -> str:
        """Join restored children: block elements are separated by a blank line, inline ones abut."""
        out, prev_block = "", False
        for node in nodes:
            if isinstance(node, NavigableString) and not str(node).strip() and prev_block:
                continue
            block = _is_block(node)
            if out and (block or prev_block):
                out += rules.CHUNK_SEPARATOR
            out += self.element(node)
            prev_block = block
        return out

    # --- block level ---

    def code(self, node: Tag) -> str:
        pre = node.find("pre") or node
        language = ""
        for cls in _classes(pre):
            if m := _LANGUAGE_CLASS.match(cls):
                language = m.group(1)
        info = node.get("data-language") or ""
        if info.split()[:1] == [language] or (info and not language):
            language = info
        fence = node.get("data-fence") or "```"
        body = pre.get_text()
        if not body:
            return f"{fence}{language}\n{fence}"
        return f"{fence}{language}\n{body}\n{fence}"

    def blockquote(self, node: Tag, depth: int = 1) -> str:
        """Prefix every line with the nesting marker; adjacent paragraphs keep a bare marker line between them."""
        prefix = "> " * depth
        lines, prev = [], None
        for child in _elements(node):
            if child.name == "blockquote":
                lines.append(self.blockquote(child, depth + 1))
                prev = child
                continue
            if prev is not None and prev.get("data-type") == child.get("data-type") == "paragraph":
                lines.append(prefix.rstrip())
            text = self.element(child)
            lines.extend(prefix + line if line.strip() else prefix.rstrip() for line in text.split("\n"))
            prev = child
        return "\n".join(lines)

    def hr(self, node: Tag) -> str:
        return node.get("data-raw") or "---"

    def list(self, node: Tag, depth: int = 0) -> str:
        ordered = node.name == "ol"
        start = _int(node.get("start"), 1)
        loose = node.get("data-loose") != "false"
        items = [child for child in _elements(node) if child.name == "li"]
        return ("\n\n" if loose else "\n").join(
            self.list_item(item, depth, f"{start + i}." if ordered else "-", loose)
            for i, item in enumerate(items)
        )

    def list_item(self, node: Tag, depth: int, marker: str, loose: bool) -> str:
        indent = "    " * depth
        continuation = "\n" + indent + "    "
        separator = "\n\n" if loose else "\n"
        head = indent + marker
        checkbox = node.find("input", recursive=False)
        if checkbox is not None:
            head += " [x]" if checkbox.has_attr("checked") else " [ ]"

        body = ""
        for child in node.children:
            if child is checkbox or (isinstance(child, NavigableString) and not str(child).strip()):
                continue
            if isinstance(child, Tag) and child.name in ("ul", "ol"):
                body += separator + self.list(child, depth + 1)
                continue
            text = continuation.join(self.element(child).split("\n"))
            if body and _is_block(child):
                body += separator + indent + "    "
            body += text
        if not body or body.startswith("\n"):
            return head + body
        return f"{head} {body}"

    def heading(self, node: Tag) -> str:
        m = _HEADING_TAG.match(node.name or "")
        depth = int(m.group(1)) if m else 1
        return "#" * depth + " " + self.inline(node)

    def paragraph(self, node: Tag) -> str:
        text = self.inline(node)
        return "" if text == rules.EMPTY else text

    def empty(self, node: Tag) -> str:
        return ""

    def text(self, node: Tag) -> str:
        if node.name != "span":
            # tight block text holding inline children
            return self.inline(node)
        first = node.find(True)
        if first is not None and first.name == "br":
            return self.br(first)
        return escape_string(node.get_text().replace("\xa0", " "))

    def _cell(self, node: Tag) -> str:
        text = self.inline(node)
        return "" if text == rules.EMPTY else escape_pipes(text)

    def table(self, node: Tag) -> str:
        rows = node.find_all("tr")
        if not rows:
            return self.default(node)
        header = rows[0].find_all(["th", "td"], recursive=False)
        aligns = [cell.get("data-align") or cell.get("align") for cell in header]
        lines = [
            "| " + " | ".join(self._cell(cell) for cell in header) + " |",
            "| " + " | ".join(_DELIMITERS.get(a, "---") for a in aligns) + " |",
        ]
        for row in rows[1:]:
            cells = row.find_all(["th", "td"], recursive=False)
            lines.append("| " + " | ".join(self._cell(cell) for cell in cells) + " |")
        return "\n".join(lines)

    def custom(self, node: Tag) -> str:
        prefix = suffix = body = ""
        for child in _elements(node):
            position = child.get("data-position")
            if position == "prefix":
                prefix = child.get_text()
            elif position == "suffix":
                suffix = child.get_text()
            elif MarkdownClass.CUSTOM in _classes(child):
                body = self.blocks(child.children)
        return prefix + body + suffix

    def front_matter(self, node: Tag) -> str:
        return node.get_text()

    # --- inline level ---

    def wrapped(self, node: Tag) -> str:
        """Symbol or structure markers around restored inner content."""
        parts = []
        for child in node.children:
            if isinstance(child, Tag) and child.get("data-position"):
                parts.append(child.get_text())
            elif isinstance(child, Tag):
                parts.append(self.inline(child))
            else:
                parts.append(escape_string(str(child)))
        return "".join(parts)

    def codespan(self, node: Tag) -> str:
        # code span content is literal
        return node.get_text().replace("\xa0", " ")

    def image(self, node: Tag) -> str:
        img = node.find("img")
        if img is None:
            return node.get_text()
        title = img.get("title")
        title = ' "' + title.replace('"', '\\"') + '"' if title else ""
        return f"![{img.get('alt', '')}]({img.get('src', '')}{title})"

    def br(self, node: Tag) -> str:
        purpose = node.get("data-purposes")
        if purpose == "breaks":
            return rules.SOFT_BREAK
        if purpose == "softbreak":
            return "\n"
        return rules.EMPTY


def restore(node) -> list[str]:
    """Restore Markdown blocks from an annotated document, markup string, or element."""
    return Restorer().restore(node)


def to_markdown(node) -> str:
    return rules.CHUNK_SEPARATOR.join(restore(node))
