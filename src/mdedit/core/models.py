"""Token tree and rendered-document models for the render and restore pipeline"""

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel


ROOT_CLASS = "markdown-editor"


@dataclass
class TableCell:
    """One header or body cell of a table token."""
    text:   str
    tokens: list["Token"] = field(default_factory=list)
    header: bool = False
    align:  Optional[str] = None    # left | center | right


@dataclass
class Token:
    """A node of the block/inline token tree.

    raw is the exact source slice the token was recognised from; text is its
    content with syntax removed. Only the fields relevant to a type are set.
    """
    type:     str
    raw:      str = ""
    text:     str = ""
    tokens:   list["Token"] = field(default_factory=list)
    block:    bool = False          # block-level text / html

    depth:    Optional[int] = None  # heading level
    lines:    int = 0               # blank lines carried by a space token

    ordered:  bool = False
    start:    Optional[int] = None
    loose:    bool = False
    items:    list["Token"] = field(default_factory=list)
    task:     bool = False
    checked:  bool = False

    language: Optional[str] = None
    markup:   str = ""              # fence, emphasis or code-span delimiter

    header:   list[TableCell] = field(default_factory=list)
    align:    list[Optional[str]] = field(default_factory=list)
    rows:     list[list[TableCell]] = field(default_factory=list)

    tag:       Optional[str] = None
    single:    bool = False
    open_tag:  str = ""
    close_tag: str = ""

    href:     Optional[str] = None
    title:    Optional[str] = None
    purpose:  Optional[str] = None  # br: breaks | softbreak | empty


class RenderedDocument(BaseModel):
    """Rendered chunks plus any YAML front matter lifted off the source."""
    chunks:      list[str]
    front_matter: Optional[dict[str, Any]] = None

    @property
    def html(self) -> str:
        """All chunks wrapped in the single editor root container."""
        return f'<div class="{ROOT_CLASS}">' + "".join(self.chunks) + "</div>"
