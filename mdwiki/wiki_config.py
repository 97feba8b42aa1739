"""
One watched wiki: an input folder, an output folder and their policy flags.

``WikiConfigurationRecord`` is the serializable part, kept by whatever
settings store the host uses. ``WikiConfiguration`` binds a record to a
renderer and a watch session and owns the activity log shown to the user.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Callable, Deque, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .commands import CommandQueue
from .errors import ConfigurationError, WatchStartError
from .render_html import DocumentRenderer
from .settings import Settings, get_settings
from .watch_folder import ChangeWatcher
from .wikilinks import LinkRewriter, create_missing_document

logger = logging.getLogger(__name__)


# -- serializable record --
class WikiConfigurationRecord(BaseModel):
    """Field aliases keep the names used by existing saved configuration lists."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", alias="Name")
    input_path: Path = Field(alias="InputPath")
    output_path: Path = Field(alias="OutputPath")
    auto_create_new_files: bool = Field(default=False, alias="AutoCreateNewFiles")
    ask_to_open_new_files: bool = Field(default=False, alias="AskToOpenNewFiles")


_RECORD_LIST = TypeAdapter(List[WikiConfigurationRecord])


def load_configurations(path: Path) -> List[WikiConfigurationRecord]:
    """Read a JSON list of configuration records."""
    return _RECORD_LIST.validate_json(path.read_bytes())


# -- activity log --
class ActivityLog:
    """Timestamped entries, newest first. add() may be called from any thread."""

    def __init__(self, limit: Optional[int] = None):
        self._entries: Deque[str] = deque(maxlen=limit)
        self._listeners: List[Callable[[str], None]] = []
        self._lock = threading.Lock()

    def add(self, message: str) -> str:
        entry = f"{datetime.now():%Y-%m-%d %H:%M:%S}: {message}"
        with self._lock:
            self._entries.appendleft(entry)
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(entry)
            except Exception:
                logger.exception("Log listener %r failed", listener)
        return entry

    def subscribe(self, listener: Callable[[str], None]) -> None:
        with self._lock:
            self._listeners.append(listener)

    def entries(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# -- composition --
class WikiConfiguration:
    """Lifecycle of one wiki folder: start/stop watching, render everything, dispose.

    commands is the queue of the thread that owns user interaction; document
    creation and the "open it?" question run there. Without a queue they run
    inline. prompt(question) -> bool and opener(path) are only used when the
    record asks to open newly created documents.
    """

    def __init__(
        self,
        record: WikiConfigurationRecord,
        settings: Optional[Settings] = None,
        commands: Optional[CommandQueue] = None,
        prompt: Optional[Callable[[str], bool]] = None,
        opener: Optional[Callable[[Path], object]] = None,
    ):
        self.record = record
        self.settings = settings or get_settings()
        self.log = ActivityLog(self.settings.log_limit)
        self._commands = commands
        self._prompt = prompt
        self._opener = opener
        # one render critical section per configuration
        self._render_lock = threading.Lock()
        self._watcher: Optional[ChangeWatcher] = None
        self._lifecycle = threading.RLock()

    def __repr__(self) -> str:
        return f"WikiConfiguration(name={self.name!r}, input_path={str(self.input_path)!r})"

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def input_path(self) -> Path:
        return self.record.input_path

    @property
    def output_path(self) -> Path:
        return self.record.output_path

    @property
    def is_watching(self) -> bool:
        watcher = self._watcher
        return watcher is not None and watcher.is_watching

    def add_log(self, message: str, level: int = logging.INFO) -> None:
        self.log.add(message)
        logger.log(level, "[%s] %s", self.name or self.input_path, message)

    # -- building blocks --
    def build_renderer(self) -> DocumentRenderer:
        """A renderer for the record's current field values, sharing this configuration's lock."""
        s = self.settings
        rewriter = LinkRewriter(
            self.input_path,
            auto_create=self.record.auto_create_new_files,
            request_create=self._request_create,
            html_extension=s.html_extension,
            document_extension=s.document_extension,
            placeholder_body=s.placeholder_body,
        )
        return DocumentRenderer(
            self.input_path,
            self.output_path,
            rewriter,
            default_template=s.default_template,
            log=self.add_log,
            custom_template=s.custom_template,
            document_extension=s.document_extension,
            html_extension=s.html_extension,
            lock=self._render_lock,
        )

    def _check_paths(self) -> None:
        if self.input_path.resolve() == self.output_path.resolve():
            raise ConfigurationError(f"Input and output path are the same directory: {self.input_path}")

    # -- lifecycle --
    def start(self) -> bool:
        """(Re)start watching the input folder. Problems are logged, not raised."""
        with self._lifecycle:
            self.stop()
            try:
                self._check_paths()
                renderer = self.build_renderer()
                watcher = ChangeWatcher(
                    self.input_path,
                    on_render=renderer.render,
                    on_delete=renderer.delete,
                    debounce_seconds=self.settings.debounce_seconds,
                    extension=self.settings.document_extension,
                )
                watcher.start()
            except (WatchStartError, ConfigurationError) as exc:
                self.add_log(str(exc), logging.WARNING)
                return False
            self._watcher = watcher
            self.add_log(f"Now watching: {self.input_path}")
            return True

    apply = start

    def stop(self) -> None:
        with self._lifecycle:
            watcher, self._watcher = self._watcher, None
            if watcher is not None:
                watcher.stop()

    def dispose(self) -> None:
        self.stop()

    def __enter__(self) -> "WikiConfiguration":
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def render(self, md_path: Path) -> bool:
        return self.build_renderer().render(md_path)

    def render_all(self) -> int:
        return self.build_renderer().render_all()

    # -- documents created from dangling links --
    def _post(self, command: Callable[[], object]) -> None:
        if self._commands is None:
            command()
        else:
            self._commands.post(command)

    def _request_create(self, target: str) -> None:
        self._post(lambda: self._create_document(target))

    def _create_document(self, target: str) -> Optional[Path]:
        s = self.settings
        try:
            created = create_missing_document(
                self.input_path, target, s.document_extension, s.placeholder_body
            )
        except (OSError, ValueError) as exc:
            self.add_log(f"Error: {exc}", logging.ERROR)
            return None
        if created is None:
            return None
        self.add_log(f"Created: {created}")

        if self.record.ask_to_open_new_files and self._prompt is not None:
            question = f"Do you want to open the newly created MD file '{created.stem}'?"
            if self._prompt(question) and self._opener is not None:
                self._opener(created)
        return created
