"""Root test configuration: isolate every test from a developer's config.yaml and MDEDIT_* env vars"""

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run each test from an empty directory with no MDEDIT_* overrides set."""
    for name in list(os.environ):
        if name.startswith("MDEDIT_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    yield tmp_path
