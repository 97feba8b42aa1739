"""
Test fixtures
=============
Every test gets its own input/output wiki folders under tmp_path and a
Settings object with a short debounce, so nothing reads the real environment.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

import pytest

from mdwiki.settings import Settings
from mdwiki.wiki_config import WikiConfigurationRecord

SIMPLE_LAYOUT = "<html>{TITLE}{CONTENT}</html>"


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.02) -> bool:
    """Poll predicate until it holds or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    path = tmp_path / "wiki"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "site"
    path.mkdir()
    return path


@pytest.fixture
def default_template(tmp_path: Path) -> Path:
    path = tmp_path / "default" / "Layout.html"
    path.parent.mkdir()
    path.write_text(SIMPLE_LAYOUT, encoding="utf-8")
    return path


@pytest.fixture
def settings(default_template: Path) -> Settings:
    return Settings(debounce_seconds=0.1, default_template=default_template)


@pytest.fixture
def record(input_dir: Path, output_dir: Path) -> WikiConfigurationRecord:
    return WikiConfigurationRecord(name="Test", input_path=input_dir, output_path=output_dir)
