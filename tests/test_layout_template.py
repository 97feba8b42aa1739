"""Layout resolution and marker substitution."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdwiki.errors import TemplateNotFound
from mdwiki.layout_template import fill_template, find_layout_template, load_layout_template
from mdwiki.settings import Settings


def write_custom(input_dir: Path, text: str) -> Path:
    path = input_dir / "Templates" / "Layout.html"
    path.parent.mkdir(exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestFindLayoutTemplate:
    def test_default_when_no_override(self, input_dir: Path, default_template: Path):
        assert find_layout_template(input_dir, default_template) == default_template

    def test_override_wins(self, input_dir: Path, default_template: Path):
        custom = write_custom(input_dir, "<p>{CONTENT}</p>")
        assert find_layout_template(input_dir, default_template) == custom

    def test_neither_exists(self, input_dir: Path, tmp_path: Path):
        with pytest.raises(TemplateNotFound):
            find_layout_template(input_dir, tmp_path / "nope.html")

    def test_template_not_found_is_file_not_found(self):
        assert issubclass(TemplateNotFound, FileNotFoundError)

    def test_shipped_default_exists(self):
        path = Settings().default_template
        assert path.is_file()
        text = path.read_text(encoding="utf-8")
        assert "{CONTENT}" in text and "{TITLE}" in text


class TestLoadLayoutTemplate:
    def test_edits_apply_without_restart(self, input_dir: Path, default_template: Path):
        custom = write_custom(input_dir, "v1 {CONTENT}")
        assert load_layout_template(input_dir, default_template) == "v1 {CONTENT}"
        custom.write_text("v2 {CONTENT}", encoding="utf-8")
        assert load_layout_template(input_dir, default_template) == "v2 {CONTENT}"


class TestFillTemplate:
    def test_both_markers(self):
        assert fill_template("<html>{TITLE}{CONTENT}</html>", "<h1>Hi</h1>", "note") == (
            "<html>note<h1>Hi</h1></html>"
        )

    def test_repeated_markers(self):
        assert fill_template("{TITLE}|{TITLE}", "", "x") == "x|x"

    def test_markers_inside_content_stay_literal(self):
        assert fill_template("{CONTENT}", "<p>{TITLE}</p>", "note") == "<p>{TITLE}</p>"

    def test_title_inserted_verbatim(self):
        assert fill_template("{TITLE}", "", "a & b") == "a & b"
