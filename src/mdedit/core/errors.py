"""Error types raised by the Markdown to annotated-document pipeline"""


class MarkdownError(Exception):
    """Base class for conversion failures."""


class NestingTooDeepError(MarkdownError):
    """Token nesting exceeded the configured max_nesting limit."""

    def __init__(self, limit: int):
        super().__init__(f"Nesting deeper than {limit} levels")
        self.limit = limit
