"""Locate and fill the HTML layout that wraps every rendered page."""

from __future__ import annotations

import re
from pathlib import Path

from .errors import TemplateNotFound

CONTENT_MARKER = "{CONTENT}"
TITLE_MARKER = "{TITLE}"

_MARKER_RE = re.compile(re.escape(CONTENT_MARKER) + "|" + re.escape(TITLE_MARKER))


def find_layout_template(
    input_root: Path,
    default_template: Path,
    custom_template: str = "Templates/Layout.html",
) -> Path:
    """Return the layout for input_root: its own override first, then the default."""
    custom = input_root / custom_template
    if custom.is_file():
        return custom
    if default_template.is_file():
        return default_template
    raise TemplateNotFound(f"No layout template: neither {custom} nor {default_template} exists")


def load_layout_template(
    input_root: Path,
    default_template: Path,
    custom_template: str = "Templates/Layout.html",
) -> str:
    """Read the active layout. Never cached: an edited override applies on the next render."""
    path = find_layout_template(input_root, default_template, custom_template)
    return path.read_text(encoding="utf-8")


def fill_template(template: str, content_html: str, title: str) -> str:
    """Substitute both markers in one pass, so markers inside the content stay literal."""

    def _repl(match: re.Match[str]) -> str:
        return content_html if match.group(0) == CONTENT_MARKER else title

    return _MARKER_RE.sub(_repl, template)
