"""
Hand work to the thread that owns the user interface.

Background threads (renders, watchers) post zero-argument callables; the
owning thread runs them with run_pending(). Prompts and other user-facing
side effects go through here so they always happen on that one thread.
"""

from __future__ import annotations

import logging
import queue
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Command = Callable[[], object]


class CommandQueue:

    def __init__(self) -> None:
        self._queue: "queue.Queue[Command]" = queue.Queue()

    def post(self, command: Command) -> None:
        """Safe to call from any thread."""
        self._queue.put(command)

    def __len__(self) -> int:
        return self._queue.qsize()

    def run_pending(self, timeout: Optional[float] = None) -> int:
        """Run queued commands, waiting up to timeout for the first one.

        Returns how many commands ran. A failing command is logged and skipped.
        """
        ran = 0
        block = timeout is not None and timeout > 0
        while True:
            try:
                command = self._queue.get(block=block and ran == 0, timeout=timeout)
            except queue.Empty:
                return ran
            try:
                command()
            except Exception:
                logger.exception("Command %r failed", command)
            ran += 1
