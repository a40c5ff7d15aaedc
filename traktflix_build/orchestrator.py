"""Build orchestration: flags to compiler configuration, compile, then post-emit stages."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .compiler import (
    AssembleAssetsStage,
    CleanOutputStage,
    CompileResult,
    Compiler,
    CompilerConfig,
    OutputOptions,
    PassthroughCompiler,
    ProgressStage,
    SourceWatcher,
    Stage,
    StageContext,
    WatchOptions,
    build_entries,
    build_rules,
)
from .config import BuildFlags, BuildLayout, ResolvedConfig, load_build_config
from .secrets import RegisteredResolver

logger = logging.getLogger(__name__)


def get_compiler_config(
    flags: BuildFlags,
    resolved: ResolvedConfig,
    layout: BuildLayout,
    *,
    verify_references: bool = False,
) -> CompilerConfig:
    """Translate flags and the resolved config into a compiler configuration.

    Test builds get no assembly stage, so they emit compiled output only.
    """

    stages: List[Stage] = [CleanOutputStage(), ProgressStage()]
    if flags.test:
        logger.debug("Test build, asset assembly stage not registered")
    else:
        stages.append(AssembleAssetsStage(resolved.build, verify_references=verify_references))

    return CompilerConfig(
        mode=resolved.mode,
        context=layout.workspace_root,
        devtool=None if flags.production else "source-map",
        entries=build_entries(layout.targets),
        rules=build_rules(resolved.substitution, mode=resolved.mode, test=flags.test),
        output=OutputOptions(path=layout.build_dir),
        stages=tuple(stages),
        watch=bool(flags.development and flags.watch),
        watch_options=WatchOptions(aggregate_timeout=1000, poll=1000, ignored=r"node_modules"),
    )


@dataclass(slots=True)
class BuildResult:
    mode: str
    pass_number: int
    emitted: List[str] = field(default_factory=list)
    stages: Dict[str, Dict[str, object]] = field(default_factory=dict)
    logs: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "mode": self.mode,
            "pass": self.pass_number,
            "emitted": self.emitted,
            "stages": self.stages,
            "logs": self.logs,
        }


class BuildOrchestrator:
    """Runs compile passes and the stages registered around them."""

    def __init__(
        self,
        layout: BuildLayout,
        *,
        compiler: Optional[Compiler] = None,
        verify_references: bool = False,
        resolvers: Optional[Sequence[RegisteredResolver]] = None,
    ) -> None:
        self.layout = layout
        self.compiler = compiler or PassthroughCompiler()
        self.verify_references = verify_references
        self.resolvers = resolvers

    def configure(self, flags: BuildFlags) -> CompilerConfig:
        resolved = load_build_config(self.layout.config_path, flags, resolvers=self.resolvers)
        return get_compiler_config(flags, resolved, self.layout, verify_references=self.verify_references)

    def run(
        self,
        flags: BuildFlags,
        *,
        stop_event: Optional[threading.Event] = None,
        max_passes: Optional[int] = None,
    ) -> BuildResult:
        """Build once, or keep rebuilding on source changes in watch mode.

        Returns the result of the last completed pass.
        """

        config = self.configure(flags)
        result = self.run_pass(config)
        if not config.watch:
            return result

        watcher = SourceWatcher(self.layout.source_dir, config.watch_options, exclude=self.layout.build_dir)
        watcher.initialize()
        logger.info("Watching %s for changes", self.layout.source_dir)
        while max_passes is None or result.pass_number < max_passes:
            changed = watcher.wait_for_change(stop_event)
            if not changed:
                break
            result = self.run_pass(config, pass_number=result.pass_number + 1)
        return result

    def run_pass(self, config: CompilerConfig, *, pass_number: int = 1) -> BuildResult:
        """Compile, then run every stage's post-emit phase in registration order."""

        context = StageContext(layout=self.layout, pass_number=pass_number)
        for stage in config.stages:
            stage.before_compile(context)

        compiled: CompileResult = self.compiler.compile(config)
        context.emitted = tuple(compiled.emitted)

        result = BuildResult(
            mode=config.mode.value,
            pass_number=pass_number,
            emitted=list(compiled.emitted),
            logs=list(compiled.logs),
        )
        for stage in config.stages:
            payload = stage.after_emit(context)
            if payload is not None:
                result.stages[stage.name] = payload
        return result
