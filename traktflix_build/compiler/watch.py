"""Polling source watcher for continuous rebuilds."""

from __future__ import annotations

import logging
import re
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional

from .config import WatchOptions

logger = logging.getLogger(__name__)


class SourceWatcher:
    """Detect changed files under ``root`` by comparing modification times.

    Paths matching ``options.ignored`` are skipped. ``wait_for_change`` keeps
    polling until something changes, then waits ``aggregate_timeout`` ms for
    further changes to settle before returning the batch.
    """

    def __init__(self, root: Path, options: WatchOptions, *, exclude: Optional[Path] = None) -> None:
        self.root = root
        self.options = options
        self.exclude = exclude
        self._ignored = re.compile(options.ignored) if options.ignored else None
        self._snapshot: Dict[Path, int] = {}

    def initialize(self) -> None:
        self._snapshot = self._scan()

    def poll_once(self) -> List[Path]:
        current = self._scan()
        changed = [path for path, mtime in current.items() if self._snapshot.get(path) != mtime]
        changed.extend(path for path in self._snapshot if path not in current)
        self._snapshot = current
        return sorted(changed)

    def wait_for_change(self, stop_event: Optional[threading.Event] = None) -> List[Path]:
        poll_seconds = self.options.poll / 1000
        while True:
            if stop_event is not None and stop_event.is_set():
                return []
            changed = self.poll_once()
            if changed:
                break
            self._sleep(poll_seconds, stop_event)

        batch = set(changed)
        deadline = time.monotonic() + self.options.aggregate_timeout / 1000
        while time.monotonic() < deadline:
            if stop_event is not None and stop_event.is_set():
                break
            self._sleep(min(poll_seconds, max(deadline - time.monotonic(), 0)), stop_event)
            batch.update(self.poll_once())
        logger.info("Detected %d changed file(s)", len(batch))
        return sorted(batch)

    def _sleep(self, seconds: float, stop_event: Optional[threading.Event]) -> None:
        if stop_event is not None:
            stop_event.wait(seconds)
        else:
            time.sleep(seconds)

    def _scan(self) -> Dict[Path, int]:
        snapshot: Dict[Path, int] = {}
        if not self.root.exists():
            return snapshot
        for path in self.root.rglob("*"):
            if not path.is_file():
                continue
            if self._ignored is not None and self._ignored.search(path.as_posix()):
                continue
            if self.exclude is not None and path.is_relative_to(self.exclude):
                continue
            try:
                snapshot[path] = path.stat().st_mtime_ns
            except FileNotFoundError:
                continue
        return snapshot
