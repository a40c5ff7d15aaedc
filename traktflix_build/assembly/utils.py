"""Shared filesystem helpers."""

from __future__ import annotations

import shutil
from pathlib import Path


def write_text(path: Path, content: str) -> None:
    """Write text to file ensuring parent directories exist."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def clean_directory(path: Path) -> bool:
    """Remove ``path`` and everything below it. Returns whether it existed."""

    if not path.exists():
        return False
    shutil.rmtree(path)
    return True
