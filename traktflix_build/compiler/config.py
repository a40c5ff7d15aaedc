"""Declarative compiler configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, Optional, Sequence, Tuple

from ..schemas.config import BuildMode, Target
from .rules import Rule
from .stages import Stage

MODULE_ENTRIES: Tuple[str, ...] = ("background", "content", "history-sync", "options", "popup")


@dataclass(frozen=True, slots=True)
class WatchOptions:
    aggregate_timeout: int = 1000
    poll: int = 1000
    ignored: str = r"node_modules"

    def to_dict(self) -> Dict[str, object]:
        return {
            "aggregateTimeout": self.aggregate_timeout,
            "ignored": self.ignored,
            "poll": self.poll,
        }


@dataclass(frozen=True, slots=True)
class OutputOptions:
    path: Path
    filename: str = "[name].js"

    def file_for(self, entry_name: str) -> Path:
        relative = PurePosixPath(self.filename.replace("[name]", entry_name))
        return self.path.joinpath(*[part for part in relative.parts if part not in (".", "")])

    def to_dict(self) -> Dict[str, object]:
        return {"filename": self.filename, "path": str(self.path)}


@dataclass(frozen=True, slots=True)
class CompilerConfig:
    mode: BuildMode
    context: Path
    devtool: Optional[str]
    entries: Dict[str, Tuple[str, ...]]
    rules: Tuple[Rule, ...]
    output: OutputOptions
    stages: Tuple[Stage, ...] = ()
    watch: bool = False
    watch_options: WatchOptions = field(default_factory=WatchOptions)

    def stage_names(self) -> Tuple[str, ...]:
        return tuple(stage.name for stage in self.stages)

    def to_dict(self) -> Dict[str, object]:
        return {
            "context": str(self.context),
            "devtool": self.devtool if self.devtool is not None else False,
            "entry": {name: list(sources) for name, sources in self.entries.items()},
            "mode": self.mode.value,
            "module": {"rules": [rule.to_dict() for rule in self.rules]},
            "output": self.output.to_dict(),
            "plugins": [stage.to_dict() for stage in self.stages],
            "watch": self.watch,
            "watchOptions": self.watch_options.to_dict(),
        }


def build_entries(targets: Sequence[Target], modules: Sequence[str] = MODULE_ENTRIES) -> Dict[str, Tuple[str, ...]]:
    """Every module compiled once per target into ``<target>/js/<module>``."""

    return {
        f"./{target.value}/js/{module}": (f"./src/modules/{module}/index.js",)
        for target in targets
        for module in modules
    }
