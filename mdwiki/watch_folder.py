"""
Watch one wiki folder and turn file events into debounced render requests.

Uses watchdog to monitor the folder (not recursive). The watchdog handler
only files requests; a dispatcher thread per watched folder owns the
debounce bookkeeping and runs the renders, so event delivery is never held
up by a slow render.

Debounce policy:
- created and modified documents are rendered once no further event for
  the same file arrived during ``debounce_seconds``
- deleted documents are handled right away, replacing any render still
  pending for that file
- a rename away from the folder counts as a delete, a rename into it as a change
"""

from __future__ import annotations

import enum
import logging
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .errors import WatchStartError

logger = logging.getLogger(__name__)


class ChangeKind(str, enum.Enum):
    RENDER = "render"
    DELETE = "delete"


@dataclass(frozen=True)
class RenderRequest:
    path: Path
    kind: ChangeKind


# -- dispatcher --
class ChangeDispatcher:
    """Per-file debounce slots drained by one background thread.

    Each input file has at most one pending request; a newer request for the
    same file replaces it and restarts its quiet period. Requests run one at
    a time in deadline order. Once stop() returns no further request starts.
    """

    def __init__(
        self,
        on_render: Callable[[Path], object],
        on_delete: Callable[[Path], object],
        debounce_seconds: float = 1.0,
        name: str = "mdwiki-dispatch",
    ):
        self.on_render = on_render
        self.on_delete = on_delete
        self.debounce_seconds = debounce_seconds
        self.name = name
        self._pending: Dict[Path, Tuple[float, ChangeKind]] = {}
        self._cond = threading.Condition()
        self._closed = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        with self._cond:
            if self._thread is not None:
                raise RuntimeError("dispatcher already started")
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def submit(self, request: RenderRequest) -> bool:
        """File a request; returns False once the dispatcher is stopped."""
        delay = 0.0 if request.kind is ChangeKind.DELETE else self.debounce_seconds
        with self._cond:
            if self._closed:
                return False
            self._pending[request.path] = (time.monotonic() + delay, request.kind)
            self._cond.notify()
        return True

    def pending(self) -> Dict[Path, ChangeKind]:
        with self._cond:
            return {path: kind for path, (_, kind) in self._pending.items()}

    def stop(self) -> None:
        """Drop pending requests and wait for a request that is already running."""
        with self._cond:
            self._closed = True
            self._pending.clear()
            self._cond.notify_all()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _next_due(self) -> Optional[RenderRequest]:
        # caller holds self._cond
        while not self._closed:
            if not self._pending:
                self._cond.wait()
                continue
            path, (deadline, kind) = min(self._pending.items(), key=lambda item: item[1][0])
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                del self._pending[path]
                return RenderRequest(path, kind)
            self._cond.wait(remaining)
        return None

    def _run(self) -> None:
        while True:
            with self._cond:
                request = self._next_due()
            if request is None:
                return
            self._dispatch(request)

    def _dispatch(self, request: RenderRequest) -> None:
        action = self.on_delete if request.kind is ChangeKind.DELETE else self.on_render
        try:
            action(request.path)
        except Exception:
            logger.exception("Unhandled error during %s of %s", request.kind.value, request.path)


# -- watchdog side --
def _to_path(path: Union[str, bytes]) -> Path:
    if isinstance(path, bytes):
        return Path(path.decode("utf-8", errors="replace"))
    return Path(path)


class DocumentEventHandler(FileSystemEventHandler):
    """Filters watchdog events down to documents directly inside root."""

    def __init__(self, root: Path, submit: Callable[[RenderRequest], object], extension: str = ".md"):
        super().__init__()
        self.root = Path(os.path.abspath(root))
        self.extension = extension.lower()
        self._submit = submit

    def _should_handle(self, path: Path) -> bool:
        if path.suffix.lower() != self.extension:
            return False
        return Path(os.path.abspath(path)).parent == self.root

    def _queue(self, path: Path, kind: ChangeKind) -> None:
        if self._should_handle(path):
            logger.debug("%s requested for %s", kind.value, path)
            self._submit(RenderRequest(path, kind))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._queue(_to_path(event.src_path), ChangeKind.RENDER)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._queue(_to_path(event.src_path), ChangeKind.RENDER)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._queue(_to_path(event.src_path), ChangeKind.DELETE)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._queue(_to_path(event.src_path), ChangeKind.DELETE)
        dest_path = getattr(event, "dest_path", None)
        if dest_path:
            self._queue(_to_path(dest_path), ChangeKind.RENDER)


class ChangeWatcher:
    """The watch session of one input folder.

    start() replaces any running session; stop() is safe to call at any time.
    """

    def __init__(
        self,
        input_root: Path,
        on_render: Callable[[Path], object],
        on_delete: Callable[[Path], object],
        debounce_seconds: float = 1.0,
        extension: str = ".md",
        observer_factory: Callable[[], Observer] = Observer,
    ):
        self.input_root = input_root
        self.on_render = on_render
        self.on_delete = on_delete
        self.debounce_seconds = debounce_seconds
        self.extension = extension
        self._observer_factory = observer_factory
        self._observer: Optional[Observer] = None
        self._dispatcher: Optional[ChangeDispatcher] = None
        self._lifecycle = threading.RLock()

    @property
    def is_watching(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        with self._lifecycle:
            self.stop()
            if not self.input_root.is_dir():
                raise WatchStartError(f"Directory Path does not exist: {self.input_root}")

            dispatcher = ChangeDispatcher(
                self.on_render,
                self.on_delete,
                self.debounce_seconds,
                name=f"mdwiki-dispatch:{self.input_root.name}",
            )
            dispatcher.start()
            handler = DocumentEventHandler(self.input_root, dispatcher.submit, self.extension)
            observer = self._observer_factory()
            try:
                observer.schedule(handler, str(self.input_root), recursive=False)
                observer.daemon = True
                observer.start()
            except OSError as exc:
                dispatcher.stop()
                raise WatchStartError(f"Cannot watch {self.input_root}: {exc}") from exc

            self._observer = observer
            self._dispatcher = dispatcher
            logger.info("Watching %s for document changes", self.input_root)

    def stop(self) -> None:
        with self._lifecycle:
            observer, self._observer = self._observer, None
            dispatcher, self._dispatcher = self._dispatcher, None
            # no new events once the observer has joined; then drain the dispatcher
            if observer is not None:
                observer.stop()
                observer.join()
            if dispatcher is not None:
                dispatcher.stop()
            if observer is not None:
                logger.info("Stopped watching %s", self.input_root)
