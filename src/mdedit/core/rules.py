"""Grammar rule table: the compiled patterns shared by the preprocessor, tokenizer and restorer"""

import re

from mdedit.core.utils.tags import BLOCK_TAGS, VOID_TAGS


EMPTY = "[EMPTY]"
SOFT_BREAK = "  \n"
CHUNK_SEPARATOR = "\n\n"

# --- preprocessing ---

CODE_FENCE_SPLIT = re.compile(r"(```[\s\S]*?```|~~~[\s\S]*?~~~)")
CODE_SPANS = re.compile(r"```[\s\S]*?```|~~~[\s\S]*?~~~|`[^`\n]*`")
LIST_LINE = re.compile(r"^\s*(?:[-*+]|\d+[.)])(?:[ \t]|$)")
ORDERED_ITEM = re.compile(r"^\d+[.)][ \t]+")
UNORDERED_ITEM = re.compile(r"^[*+-][ \t]+")
QUOTE_PREFIX = re.compile(r"^[ \t]*((?:>[ \t]*)+)")

# --- block level ---

_HR = r" {0,3}(?:(?:-[ \t]*){3,}|(?:_[ \t]*){3,}|(?:\*[ \t]*){3,})(?:\n|$)"
_HEADING = r" {0,3}#{1,6}(?:[ \t]|\n|$)"
_BLOCKQUOTE = r" {0,3}>"
_FENCE = r" {0,3}(?:`{3,}|~{3,})"
_LIST_START = r" {0,3}(?:[*+-]|1[.)])[ \t]+\S"
_HTML_START = r" {0,3}(?:<!--|</?(?:" + "|".join(sorted(BLOCK_TAGS)) + r")(?:[\s/>]|$))"
_EMPTY_LINE = re.escape(EMPTY) + r"[ \t]*(?:\n|$)"
_BLANK = r"[ \t]*(?:\n|$)"

INTERRUPT = "|".join((_HR, _HEADING, _BLOCKQUOTE, _FENCE, _LIST_START, _HTML_START, _EMPTY_LINE, _BLANK))
INTERRUPTS = re.compile(r"^(?:" + INTERRUPT + r")")

NEWLINE = re.compile(r"^(?:[ \t]*(?:\n|$))+")
INDENTED_CODE = re.compile(r"^(?: {4}| {0,3}\t)[^\n]+(?:\n(?:[ \t]*\n)*(?: {4}| {0,3}\t)[^\n]+)*")
INDENT_STRIP = re.compile(r"^(?: {1,4}| {0,3}\t)", re.M)
FENCES = re.compile(
    r"^ {0,3}(`{3,}(?=[^`\n]*(?:\n|$))|~{3,})([^\n]*)(?:\n|$)"
    r"(?:|([\s\S]*?)(?:\n|$))(?: {0,3}\1[~`]*[ \t]*(?=\n|$)|$)"
)
FENCE_BLOCK = re.compile(
    r"^( {0,3})(`{3,}|~{3,})([^\n]*)\n(?:([\s\S]*?)\n)?"
    r" {0,3}\2[`~]*[ \t]*(?=\n|$)"
)
FENCE_OPEN = re.compile(r"^ {0,3}(`{3,}|~{3,})([^\n]*)(?:\n|$)")
CLOSING_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})[ \t]*$", re.M)
BARE_FENCE = re.compile(r"^ {0,3}(?:`{3,}|~{3,})[^\n]*$", re.M)
HEADING = re.compile(r"^ {0,3}(#{1,6})(?=[ \t]|\n|$)([^\n]*)")
HR = re.compile(r"^" + _HR.removesuffix(r"(?:\n|$)") + r"(?=\n|$)")
BLOCKQUOTE = re.compile(
    r"^(?: {0,3}>(?:[ \t]*\S[^\n]*(?:\n(?!" + INTERRUPT + r")[^\n]+)*|[ \t]*)(?:\n|$))+"
)
QUOTE_MARKER = re.compile(r"^ {0,3}> ?")
LIST_ITEM = re.compile(r"^( {0,3})([*+-]|\d{1,9}[.)])([ \t]+|(?=\n)|$)")
TASK = re.compile(r"^\[([ xX])\][ \t]+")
BLOCK_COMMENT = re.compile(r"^ {0,3}(<!--[\s\S]*?-->)[ \t]*(?=\n|$)")
LHEADING = re.compile(
    r"^(?!" + INTERRUPT + r")([^\n]+(?:\n(?!" + INTERRUPT + r")[^\n]+)*?)"
    r"\n {0,3}(=+|-+)[ \t]*(?=\n|$)"
)
TABLE = re.compile(
    r"^ *([^\n ][^\n]*)\n"
    r" {0,3}((?:\| *)?:?-+:? *(?:\| *:?-+:? *)*(?:\| *)?)"
    r"(?:\n((?:(?!" + INTERRUPT + r")[^\n]*(?:\n|$))*)|$)"
)
TABLE_DELIMITER_MARK = re.compile(r"[:|]")
EMPTY_LINE = re.compile(r"^" + re.escape(EMPTY) + r"[ \t]*(?=\n|$)")
PARAGRAPH = re.compile(r"^[^\n]+(?:\n(?!" + INTERRUPT + r")[^\n]+)*")
TEXT = re.compile(r"^[^\n]+")

# --- html ---

HTML_ATTRS = r"(?:\s+[^\s\"'>/=]+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s\"'=<>`]+))?)*"
_VOID_NAMES = "|".join(sorted(VOID_TAGS))


def html_tag_pattern(paired_names: str, indent: bool) -> re.Pattern:
    """Balanced-tag opener: a paired tag (open, name, attrs) or a void tag (void, void_name, void_attrs).

    Python patterns cannot balance nested tags, so the matching end tag is
    located separately by find_closing_tag.
    """
    return re.compile(
        (r"^ {0,3}" if indent else r"^")
        + r"(?:(?P<void><(?P<void_name>" + _VOID_NAMES + r")\b(?P<void_attrs>" + HTML_ATTRS + r")\s*/?>)"
        + r"|(?P<open><(?P<name>" + paired_names + r")\b(?P<attrs>" + HTML_ATTRS + r")\s*>))",
        re.I,
    )


BLOCK_HTML = html_tag_pattern(
    "|".join(sorted(BLOCK_TAGS - VOID_TAGS)) + r"|[a-z][\w]*(?:-[\w]*)+", indent=True,
)
INLINE_HTML = html_tag_pattern(r"[A-Za-z][\w]*(?:-[\w]*)*", indent=False)


def find_closing_tag(src: str, name: str, start: int) -> tuple[int, int] | None:
    """Locate the end tag balancing an already-open <name> tag, counting same-name nesting."""
    pattern = re.compile(r"<(/?)" + re.escape(name) + r"\b[^>]*?(/?)>", re.I)
    depth = 1
    for m in pattern.finditer(src, start):
        if m.group(1):
            depth -= 1
            if depth == 0:
                return m.start(), m.end()
        elif not m.group(2):
            depth += 1
    return None


# --- inline ---

DEL = re.compile(r"^(~~?)(?=[^\s~])((?:\\.|[^\\])*?(?:\\.|[^\s~\\]))\1(?=[^~]|$)")
