"""Shared token-tree utilities"""

from mdedit.core.errors import NestingTooDeepError


def concat_texts(tokens, max_depth: int = 1000, _depth: int = 0) -> str:
    """Concatenate the plain text of a token tree, descending into children.

    Raises NestingTooDeepError once the tree is deeper than max_depth.
    """
    if _depth > max_depth:
        raise NestingTooDeepError(max_depth)
    parts = []
    for token in tokens:
        if token.tokens:
            parts.append(concat_texts(token.tokens, max_depth, _depth + 1))
        elif token.type != "br":
            parts.append(token.text)
    return "".join(parts)
