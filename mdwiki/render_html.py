"""
Render wiki markdown files into HTML pages.

For one input file:
- read the markdown (plain shared read, an editor may still hold the file)
- rewrite [[wiki links]] into markdown links
- convert markdown to HTML with the "markdown" package
- fill {CONTENT} and {TITLE} in the layout template
- write <output>/<stem>.html, replacing any previous version

Notes:
- Requires the "markdown" package: pip install markdown
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional

import markdown

from .errors import ConfigurationError
from .layout_template import fill_template, load_layout_template
from .wikilinks import LinkRewriter

logger = logging.getLogger(__name__)


# -- helpers: files and paths --
def is_document(path: Path, extension: str = ".md") -> bool:
    return path.suffix.lower() == extension.lower()


def list_documents(input_root: Path, extension: str = ".md") -> List[Path]:
    """Documents directly under input_root (not recursive), sorted by name."""
    docs = [p for p in input_root.iterdir() if p.is_file() and is_document(p, extension)]
    docs.sort(key=lambda p: p.name.lower())
    return docs


def output_html_path(output_root: Path, md_path: Path, html_extension: str = ".html") -> Path:
    """Map an input markdown path to <output_root>/<stem>.html."""
    if not output_root.is_dir():
        raise ConfigurationError(f"Output path not found: {output_root}")
    return output_root / f"{md_path.stem}{html_extension}"


# -- markdown conversion --
def convert_markdown_to_html(md_text: str) -> str:
    """Convert markdown to HTML with minimal extensions."""
    return markdown.markdown(md_text, extensions=["extra", "fenced_code", "tables"])


def _log_to_logger(message: str, level: int = logging.INFO) -> None:
    logger.log(level, message)


# -- renderer --
class DocumentRenderer:
    """Turns input documents of one configuration into output pages.

    All renders and deletes of a configuration share ``lock``: template
    loading, conversion and writing are never interleaved for the same
    configuration, while separate configurations render in parallel.
    Failures are reported through ``log`` and never raised.
    """

    def __init__(
        self,
        input_root: Path,
        output_root: Path,
        rewriter: LinkRewriter,
        default_template: Path,
        log: Optional[Callable[..., None]] = None,
        custom_template: str = "Templates/Layout.html",
        document_extension: str = ".md",
        html_extension: str = ".html",
        convert: Callable[[str], str] = convert_markdown_to_html,
        lock: Optional[threading.Lock] = None,
    ):
        self.input_root = input_root
        self.output_root = output_root
        self.rewriter = rewriter
        self.default_template = default_template
        self.custom_template = custom_template
        self.document_extension = document_extension
        self.html_extension = html_extension
        self.convert = convert
        self.lock = lock or threading.Lock()
        self._log = log or _log_to_logger

    def render_to_string(self, md_path: Path) -> str:
        """Build the full page for md_path without writing it. Caller holds the lock."""
        template = load_layout_template(self.input_root, self.default_template, self.custom_template)
        with md_path.open("r", encoding="utf-8") as handle:
            md_text = handle.read()
        md_text, _ = self.rewriter.rewrite(md_text)
        content_html = self.convert(md_text)
        return fill_template(template, content_html, md_path.stem)

    def render(self, md_path: Path) -> bool:
        """Render one document. Returns False (after logging) on any failure."""
        try:
            with self.lock:
                out_html_path = output_html_path(self.output_root, md_path, self.html_extension)
                full_html = self.render_to_string(md_path)
                out_html_path.write_text(full_html, encoding="utf-8")
        except Exception as exc:
            logger.debug("Render of %s failed", md_path, exc_info=True)
            self._log(f"Error: {exc}", logging.ERROR)
            return False
        self._log(f"Updated: {md_path}")
        return True

    def delete(self, md_path: Path) -> bool:
        """Remove the page of a deleted document. A page that is already gone is fine."""
        try:
            with self.lock:
                out_html_path = output_html_path(self.output_root, md_path, self.html_extension)
                if not out_html_path.exists():
                    return True
                out_html_path.unlink(missing_ok=True)
        except Exception as exc:
            logger.debug("Delete for %s failed", md_path, exc_info=True)
            self._log(f"Error: {exc}", logging.ERROR)
            return False
        self._log(f"Deleted: {out_html_path}")
        return True

    def render_all(self) -> int:
        """Render every document directly under the input folder; returns the success count."""
        try:
            md_files = list_documents(self.input_root, self.document_extension)
        except OSError as exc:
            self._log(f"Error: {exc}", logging.ERROR)
            return 0
        return sum(1 for md_path in md_files if self.render(md_path))
