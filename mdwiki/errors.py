"""Error kinds raised inside a single render, delete or watch start."""

from __future__ import annotations


class WikiError(Exception):
    """Base class for failures that end up as an activity log entry."""


class ConfigurationError(WikiError):
    """Output directory is missing or the configuration is otherwise unusable."""


class TemplateNotFound(WikiError, FileNotFoundError):
    """Neither the per-folder layout nor the shipped default layout exists."""


class WatchStartError(WikiError):
    """The input directory could not be watched."""
