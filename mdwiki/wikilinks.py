"""
Rewrite ``[[wiki links]]`` into standard markdown links.

Syntax:
- ``[[target]]``        -> ``[target](target.html)``
- ``[[title|target]]``  -> ``[title](target.html)``

A link span starts at ``[[`` and ends at the first following ``]]``. The
enclosed text is split on the first ``|``. An unterminated ``[[`` is left as is.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

WIKILINK_RE = re.compile(r"\[\[(.*?)\]\]")


# -- parsing --
def split_wikilink(inner: str) -> Tuple[str, str]:
    """Return (title, target) for the text between ``[[`` and ``]]``."""
    title, sep, target = inner.partition("|")
    if not sep:
        return inner, inner
    return title, target


def rewrite_wikilinks(
    md_text: str,
    html_extension: str = ".html",
    on_link: Optional[Callable[[str], None]] = None,
) -> Tuple[str, List[str]]:
    """Replace every wiki link in md_text with a markdown link.

    Returns the rewritten text and the link targets in order of appearance.
    on_link is called once per occurrence with the target; it must not raise.
    """
    targets: List[str] = []

    def _repl(match: re.Match[str]) -> str:
        title, target = split_wikilink(match.group(1))
        targets.append(target)
        if on_link is not None:
            on_link(target)
        return f"[{title}]({target}{html_extension})"

    return WIKILINK_RE.sub(_repl, md_text), targets


# -- missing documents --
def document_path(input_root: Path, target: str, document_extension: str = ".md") -> Path:
    """Path of the document behind a link target; it must stay inside input_root."""
    if not target.strip():
        raise ValueError("Empty wiki link target")
    path = input_root / f"{target}{document_extension}"
    root = input_root.resolve()
    if root not in path.resolve().parents:
        raise ValueError(f"Wiki link target {target!r} is outside {input_root}")
    return path


def new_document_text(target: str, placeholder_body: str = "TODO") -> str:
    """Initial markdown for a document created from a dangling link."""
    return f"# {Path(target).name}\n\n{placeholder_body}"


def create_missing_document(
    input_root: Path,
    target: str,
    document_extension: str = ".md",
    placeholder_body: str = "TODO",
) -> Optional[Path]:
    """Create ``<input_root>/<target>.md`` unless it exists.

    Returns the new path, or None when the document was already there.
    Raises ValueError for an empty target or one that leads outside input_root.
    """
    path = document_path(input_root, target, document_extension)
    if path.exists():
        return None
    # "x" refuses to clobber a file created since the exists() check
    try:
        with path.open("x", encoding="utf-8") as handle:
            handle.write(new_document_text(target, placeholder_body))
    except FileExistsError:
        return None
    return path


class LinkRewriter:
    """Wiki link rewriting bound to one input folder and its auto-create policy.

    request_create receives each link target when auto_create is on. It decides
    when (and on which thread) the backing document gets created; without one,
    documents are created inline and failures are only logged.
    """

    def __init__(
        self,
        input_root: Path,
        auto_create: bool = False,
        request_create: Optional[Callable[[str], None]] = None,
        html_extension: str = ".html",
        document_extension: str = ".md",
        placeholder_body: str = "TODO",
    ):
        self.input_root = input_root
        self.auto_create = auto_create
        self.html_extension = html_extension
        self.document_extension = document_extension
        self.placeholder_body = placeholder_body
        self._request_create = request_create or self._create_now

    def rewrite(self, md_text: str) -> Tuple[str, List[str]]:
        on_link = self._on_link if self.auto_create else None
        return rewrite_wikilinks(md_text, self.html_extension, on_link)

    def _on_link(self, target: str) -> None:
        try:
            self._request_create(target)
        except Exception:
            logger.exception("Could not request creation of %r", target)

    def _create_now(self, target: str) -> None:
        try:
            created = create_missing_document(
                self.input_root, target, self.document_extension, self.placeholder_body
            )
        except (OSError, ValueError) as exc:
            logger.warning("Could not create %s%s: %s", target, self.document_extension, exc)
            return
        if created is not None:
            logger.info("Created: %s", created)
