"""Compiler backends.

The bundler itself is an external tool. ``CommandCompiler`` hands it the
rendered configuration; ``PassthroughCompiler`` emits entry sources and
assets without module resolution for smoke builds and tests.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from ..assembly.utils import write_text
from ..errors import CompilerError
from .config import CompilerConfig
from .rules import VENDOR_DIRS, AssetRule, TextReplaceRule

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TRAKTFLIX_COMPILER_CONFIG"


@dataclass(slots=True)
class CompileResult:
    emitted: List[str] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)


class Compiler(Protocol):
    def compile(self, config: CompilerConfig) -> CompileResult:  # pragma: no cover - interface
        ...


class CommandCompiler:
    """Run an external bundler command against the rendered configuration.

    The configuration JSON path is exported as ``TRAKTFLIX_COMPILER_CONFIG``.
    """

    def __init__(self, command: Sequence[str], *, env: Optional[dict[str, str]] = None) -> None:
        if not command:
            raise CompilerError("Compiler command is empty")
        self.command = list(command)
        self.env = dict(env or {})

    def compile(self, config: CompilerConfig) -> CompileResult:
        executable = shutil.which(self.command[0])
        if executable is None:
            raise CompilerError(f"Compiler executable not found: {self.command[0]}")

        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", delete=False, prefix="traktflix-compiler-", suffix=".json"
        ) as handle:
            json.dump(config.to_dict(), handle, indent=2)
            config_path = Path(handle.name)

        env = {**os.environ, **self.env, CONFIG_ENV_VAR: str(config_path)}
        try:
            proc = subprocess.run(
                [executable, *self.command[1:]],
                cwd=config.context,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
            )
        finally:
            config_path.unlink(missing_ok=True)

        logs = [line for line in proc.stdout.splitlines() if line.strip()]
        if proc.returncode != 0:
            tail = "\n".join(proc.stderr.strip().splitlines()[-20:])
            raise CompilerError(f"Compiler exited with status {proc.returncode}: {tail}")

        emitted: List[str] = []
        if config.output.path.exists():
            emitted = sorted(str(path) for path in config.output.path.rglob("*") if path.is_file())
        return CompileResult(emitted=emitted, logs=logs)


class PassthroughCompiler:
    """Concatenate each entry's sources and copy assets matched by asset rules."""

    def compile(self, config: CompilerConfig) -> CompileResult:
        result = CompileResult()
        text_rules = [rule for rule in config.rules if isinstance(rule, TextReplaceRule)]
        asset_rules = [rule for rule in config.rules if isinstance(rule, AssetRule)]

        for name, sources in config.entries.items():
            chunks: List[str] = []
            for source in sources:
                source_path = (config.context / source).resolve()
                text = source_path.read_text(encoding="utf-8")
                for rule in text_rules:
                    if rule.matches(source_path):
                        text = rule.apply(text)
                chunks.append(text)
            target = config.output.file_for(name)
            write_text(target, "\n".join(chunks))
            result.emitted.append(str(target))

        source_root = config.context / "src"
        if source_root.is_dir():
            for path in sorted(source_root.rglob("*")):
                if not path.is_file() or re.search(VENDOR_DIRS, path.as_posix()):
                    continue
                for rule in asset_rules:
                    if rule.matches(path):
                        target = config.output.path / rule.output_path / rule.emitted_name(path)
                        target.parent.mkdir(parents=True, exist_ok=True)
                        shutil.copyfile(path, target)
                        result.emitted.append(str(target))
                        break

        result.logs.append(f"Emitted {len(result.emitted)} file(s) to {config.output.path}")
        logger.debug(result.logs[-1])
        return result

