"""Shared fixtures: isolate every test from the caller's I18N_* environment."""
import os
import shutil
from pathlib import Path

import pytest

from i18n_janitor.config import reset_config

FIXTURE_PROJECT = Path(__file__).parent / 'fixtures' / 'project'


@pytest.fixture(autouse=True)
def clean_i18n_env(monkeypatch):
    """Drop I18N_* variables and cached configs around each test."""
    for name in list(os.environ):
        if name.startswith('I18N_'):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def project(tmp_path):
    """Writable copy of the fixture project."""
    target = tmp_path / 'project'
    shutil.copytree(FIXTURE_PROJECT, target)
    return target
