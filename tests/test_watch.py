from __future__ import annotations

import os
import threading
from pathlib import Path

from traktflix_build.compiler import SourceWatcher, WatchOptions


def _touch(path: Path, content: str, *, bump: int = 0) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if bump:
        stat = path.stat()
        os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + bump))


def test_poll_once_detects_create_update_delete(tmp_path: Path) -> None:
    tracked = tmp_path / "modules" / "popup.js"
    _touch(tracked, "v1")
    watcher = SourceWatcher(tmp_path, WatchOptions())
    watcher.initialize()

    assert watcher.poll_once() == []

    _touch(tracked, "v2", bump=1_000_000_000)
    created = tmp_path / "modules" / "options.js"
    _touch(created, "new")
    assert watcher.poll_once() == sorted([created, tracked])

    tracked.unlink()
    assert watcher.poll_once() == [tracked]


def test_ignored_and_excluded_paths(tmp_path: Path) -> None:
    watcher = SourceWatcher(tmp_path, WatchOptions(), exclude=tmp_path / "build")
    watcher.initialize()

    _touch(tmp_path / "node_modules" / "react" / "index.js", "ignored")
    _touch(tmp_path / "build" / "chrome" / "manifest.json", "{}")

    assert watcher.poll_once() == []


def test_wait_for_change_aggregates_batch(tmp_path: Path) -> None:
    watcher = SourceWatcher(tmp_path, WatchOptions(aggregate_timeout=20, poll=5))
    watcher.initialize()
    _touch(tmp_path / "a.js", "a")
    _touch(tmp_path / "b.js", "b")

    changed = watcher.wait_for_change()

    assert changed == [tmp_path / "a.js", tmp_path / "b.js"]


def test_wait_for_change_returns_when_stopped(tmp_path: Path) -> None:
    watcher = SourceWatcher(tmp_path, WatchOptions(aggregate_timeout=10, poll=5))
    watcher.initialize()
    stop = threading.Event()
    stop.set()

    assert watcher.wait_for_change(stop) == []
