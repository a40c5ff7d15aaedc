"""Typed build stages run around the compile step."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..assembly import AssemblyResult, AssetAssembler
from ..assembly.utils import clean_directory
from ..config import BuildLayout
from ..schemas.config import BuildConfig

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StageContext:
    layout: BuildLayout
    pass_number: int = 1
    started_at: float = field(default_factory=time.monotonic)
    emitted: tuple[str, ...] = ()


class Stage:
    """Base stage. Subclasses override the phases they take part in."""

    name = "stage"

    def before_compile(self, context: StageContext) -> None:
        return None

    def after_emit(self, context: StageContext) -> Optional[Dict[str, object]]:
        return None

    def to_dict(self) -> Dict[str, object]:
        return {"name": self.name}


class CleanOutputStage(Stage):
    """Removes the build directory before the first compile.

    Later watch passes rebuild over the previous output.
    """

    name = "clean"

    def before_compile(self, context: StageContext) -> None:
        if context.pass_number != 1:
            return
        if clean_directory(context.layout.build_dir):
            logger.info("Removed %s", context.layout.build_dir)


class ProgressStage(Stage):
    name = "progress"

    def before_compile(self, context: StageContext) -> None:
        logger.info("Build pass %d: compiling", context.pass_number)

    def after_emit(self, context: StageContext) -> Optional[Dict[str, object]]:
        elapsed = time.monotonic() - context.started_at
        logger.info(
            "Build pass %d: emitted %d file(s) in %.2fs",
            context.pass_number,
            len(context.emitted),
            elapsed,
        )
        return None


class AssembleAssetsStage(Stage):
    """Runs asset assembly with the config resolved for this build."""

    name = "assemble"

    def __init__(self, config: BuildConfig, *, verify_references: bool = False) -> None:
        self.config = config
        self.verify_references = verify_references

    def after_emit(self, context: StageContext) -> Optional[Dict[str, object]]:
        result: AssemblyResult = AssetAssembler(context.layout).assemble(
            self.config,
            verify_references=self.verify_references,
        )
        return result.to_dict()

    def to_dict(self) -> Dict[str, object]:
        return {"name": self.name, "verify_references": self.verify_references}
