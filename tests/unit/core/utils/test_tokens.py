"""Unit tests for core/utils/tokens.py"""

import pytest

from mdedit.core.errors import NestingTooDeepError
from mdedit.core.models import Token
from mdedit.core.utils.tokens import concat_texts


def test_concat_texts_descends_and_skips_breaks():
    """Child text is gathered in order and br tokens contribute nothing."""
    tokens = [
        Token("text", text="Hello "),
        Token("strong", tokens=[Token("text", text="big")]),
        Token("br", text="\n"),
        Token("text", text=" world"),
    ]
    assert concat_texts(tokens) == "Hello big world"


def test_concat_texts_depth_limit():
    """A tree deeper than max_depth raises NestingTooDeepError."""
    token = Token("text", text="x")
    for _ in range(5):
        token = Token("em", tokens=[token])
    with pytest.raises(NestingTooDeepError, match="3 levels"):
        concat_texts([token], max_depth=3)
