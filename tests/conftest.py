"""Shared fixtures: isolated settings and a copy of the sample Ruby project."""
import os
import shutil
from pathlib import Path

import pytest

from rubymap.config import reset_config

FIXTURES_DIR = Path(__file__).parent / 'fixtures'


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Every test starts from default settings."""
    for name in list(os.environ):
        if name.startswith('RUBYMAP_'):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sample_project(tmp_path):
    """Writable copy of the sample project (the cache is created inside it)."""
    root = tmp_path / 'project'
    shutil.copytree(FIXTURES_DIR / 'ruby', root)
    return root
