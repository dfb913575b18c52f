"""Shared fixtures for core unit tests"""

import pytest
from bs4 import BeautifulSoup

from mdedit.config import Settings
from mdedit.core.pipeline import build_markdown


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text.

- item one
- item two

```python
print("hello")
```

> quoted
>
> still quoted

| a | b |
| --- | :-: |
| 1 | 2 |
"""


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings()


@pytest.fixture(name="markdown")
def markdown_fixture(settings):
    return build_markdown(settings)


@pytest.fixture(name="lex")
def lex_fixture(markdown):
    return markdown.lex


@pytest.fixture(name="soup")
def soup_fixture(markdown):
    """Parse Markdown straight into a BeautifulSoup tree, skipping the preprocessor."""
    def _soup(src: str) -> BeautifulSoup:
        return BeautifulSoup(markdown.parse(src), "html.parser")
    return _soup
