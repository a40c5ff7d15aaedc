"""Copy specifications for the post-emit asset step."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from ..config import BuildLayout

STATIC_FOLDERS: Sequence[tuple[str, str]] = (
    ("src", "html"),
    ("src", "_locales"),
    ("build", "fonts"),
    ("build", "images"),
)


@dataclass(frozen=True, slots=True)
class CopySpec:
    source: Path
    destination: Path
    flatten: bool = False


def copy_file(spec: CopySpec) -> Path:
    """Copy one file. A missing source raises ``FileNotFoundError``.

    With ``flatten`` and an existing destination directory, the file lands
    directly inside it under its own name.
    """

    destination = spec.destination
    if spec.flatten and destination.is_dir():
        destination = destination / spec.source.name
    shutil.copyfile(spec.source, destination)
    return destination


def copy_folder(spec: CopySpec) -> List[Path]:
    """Recursively copy a folder, overwriting existing files."""

    shutil.copytree(spec.source, spec.destination, dirs_exist_ok=True)
    return [
        spec.destination / path.relative_to(spec.source)
        for path in sorted(spec.source.rglob("*"))
        if path.is_file()
    ]


def polyfill_specs(layout: BuildLayout) -> List[CopySpec]:
    return [
        CopySpec(
            source=layout.polyfill_source,
            destination=layout.target_dir(target) / "js" / "lib" / "browser-polyfill.js",
            flatten=True,
        )
        for target in layout.targets
    ]


def folder_specs(layout: BuildLayout) -> List[CopySpec]:
    """Ordered folder copies: every static folder for the first target, then the next."""

    roots = {"src": layout.source_dir, "build": layout.build_dir}
    return [
        CopySpec(source=roots[root] / name, destination=layout.target_dir(target) / name)
        for target in layout.targets
        for root, name in STATIC_FOLDERS
    ]
