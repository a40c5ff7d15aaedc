"""Compiler configuration, stages and backends."""

from .config import MODULE_ENTRIES, CompilerConfig, OutputOptions, WatchOptions, build_entries
from .rules import AssetRule, Loader, LoaderRule, TextReplaceRule, build_rules, secret_replace_rule
from .runner import CommandCompiler, CompileResult, Compiler, PassthroughCompiler
from .stages import AssembleAssetsStage, CleanOutputStage, ProgressStage, Stage, StageContext
from .watch import SourceWatcher

__all__ = [
    "MODULE_ENTRIES",
    "CompilerConfig",
    "OutputOptions",
    "WatchOptions",
    "build_entries",
    "AssetRule",
    "Loader",
    "LoaderRule",
    "TextReplaceRule",
    "build_rules",
    "secret_replace_rule",
    "CommandCompiler",
    "CompileResult",
    "Compiler",
    "PassthroughCompiler",
    "AssembleAssetsStage",
    "CleanOutputStage",
    "ProgressStage",
    "Stage",
    "StageContext",
    "SourceWatcher",
]
