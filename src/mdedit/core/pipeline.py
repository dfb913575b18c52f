"""Pipeline step functions: front matter, preprocessing, chunk rendering and restoration"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Any, Optional, Sequence

import yaml

from mdedit.config import Settings
from mdedit.core.engine import Markdown
from mdedit.core.models import RenderedDocument, Token
from mdedit.core.preprocess import preprocess
from mdedit.core.renderer import RENDERER
from mdedit.core.restorer import to_markdown
from mdedit.core.tokenizer import INLINE, TOKENIZER


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r"^---[ \t]*\n(.*?)\n---[ \t]*(?:\n|$)", re.DOTALL)
MD_EXTENSIONS = {".md", ".mdx", ".markdown"}
_BLANK_RUNS = re.compile(r"\n{3,}")


def build_markdown(settings: Settings = None) -> Markdown:
    """Engine with the editor's recognisers, inline rules and templates registered."""
    return Markdown(settings).use(tokenizer=TOKENIZER, renderer=RENDERER, inline=INLINE)


def split_front_matter(src: str) -> tuple[Optional[dict[str, Any]], str, str]:
    """Return (front matter, literal block, body); invalid YAML leaves the source untouched."""
    m = FRONTMATTER_RE.match(src)
    if m is None:
        return None, "", src
    try:
        data = yaml.safe_load(m.group(1))
    except yaml.YAMLError as e:
        logger.warning("Invalid YAML front matter, rendering it as markdown: %s", e)
        return None, "", src
    if not isinstance(data, dict):
        logger.warning("Front matter is not a mapping (%s), rendering it as markdown", type(data).__name__)
        return None, "", src
    return data, m.group(0).rstrip("\n"), src[m.end():].lstrip("\n")


def _prepare(src, settings: Settings, md: Markdown) -> tuple[Optional[dict], list[str], list[str]]:
    """Front matter data, its rendered chunk (if any), and the Markdown chunks still to render."""
    if not isinstance(src, str):
        # pre-chunked input skips the preprocessor
        return None, [], list(src)
    src = src.replace("\r\n", "\n").replace("\r", "\n")
    data, block, body = (None, "", src)
    if settings.front_matter:
        data, block, body = split_front_matter(src)
    head = [md.render([Token("frontmatter", raw=block)])] if block else []
    return data, head, preprocess(body, settings) if body or not head else []


def render_markdown(src: str | Sequence[str], settings: Settings = None) -> RenderedDocument:
    """Render Markdown (or pre-split chunks) into the annotated document."""
    settings = settings or Settings()
    md = build_markdown(settings)
    data, head, chunks = _prepare(src, settings, md)
    rendered = [md.parse(chunk) for chunk in chunks]
    logger.debug("rendered %d chunk(s)", len(rendered))
    return RenderedDocument(chunks=[*head, *rendered], front_matter=data)


async def render_markdown_async(src: str | Sequence[str], settings: Settings = None) -> RenderedDocument:
    """Render every chunk concurrently; chunk order is preserved."""
    settings = settings or Settings()
    md = build_markdown(settings)
    data, head, chunks = _prepare(src, settings, md)
    rendered = await asyncio.gather(*(md.parse_async(chunk) for chunk in chunks))
    return RenderedDocument(chunks=[*head, *rendered], front_matter=data)


def restore_markdown(node) -> str:
    """Markdown text for an annotated document, markup string or element."""
    return to_markdown(node)


def round_trip(src: str, settings: Settings = None) -> str:
    """Render src and restore it straight back to Markdown."""
    return restore_markdown(render_markdown(src, settings).html)


def normalize_markdown(text: str) -> str:
    """Whitespace-insensitive form used to compare sources with restored output."""
    lines = [line.rstrip() for line in text.replace("\r\n", "\n").split("\n")]
    return _BLANK_RUNS.sub("\n\n", "\n".join(lines)).strip("\n")


def discover_files(path: Path) -> list[Path]:
    """Return sorted Markdown files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob("*") if p.suffix in MD_EXTENSIONS)
