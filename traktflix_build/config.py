"""Build flags, output layout and mode-keyed config loading."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from .errors import ConfigError
from .schemas.config import BuildConfig, BuildMode, Target
from .secrets import RegisteredResolver, build_resolvers, overlay_secrets

logger = logging.getLogger(__name__)

TEST_PROFILE = "test"


@dataclass(frozen=True, slots=True)
class BuildFlags:
    """Environment flags the build was invoked with."""

    development: bool = False
    production: bool = False
    watch: bool = False
    test: bool = False

    @property
    def mode(self) -> BuildMode:
        return resolve_mode(self)


def resolve_mode(flags: BuildFlags) -> BuildMode:
    """Production wins over development; neither flag selects the inert mode."""

    if flags.production:
        return BuildMode.PRODUCTION
    if flags.development:
        return BuildMode.DEVELOPMENT
    return BuildMode.NONE


@dataclass(frozen=True, slots=True)
class BuildLayout:
    """Filesystem locations used by a build, relative to the workspace root."""

    workspace_root: Path
    build_dir: Path
    source_dir: Path
    node_modules_dir: Path
    config_path: Path
    package_json: Path
    targets: Tuple[Target, ...] = (Target.CHROME, Target.FIREFOX)

    @classmethod
    def for_workspace(
        cls,
        workspace_root: Path,
        *,
        config_path: Optional[Path] = None,
        build_dir: Optional[Path] = None,
    ) -> "BuildLayout":
        root = Path(workspace_root).resolve()
        return cls(
            workspace_root=root,
            build_dir=build_dir or root / "build",
            source_dir=root / "src",
            node_modules_dir=root / "node_modules",
            config_path=config_path or root / "config.json",
            package_json=root / "package.json",
        )

    def target_dir(self, target: Target) -> Path:
        return self.build_dir / target.value

    @property
    def polyfill_source(self) -> Path:
        return self.node_modules_dir / "webextension-polyfill" / "dist" / "browser-polyfill.min.js"


def load_config_document(path: Path) -> Dict[str, Any]:
    """Read the mode-keyed config document."""

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file is not valid JSON: {path} ({exc})") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"Config file must contain an object keyed by mode: {path}")
    return payload


def parse_profile(
    document: Mapping[str, Any],
    profile: str,
    *,
    source: Path,
    resolvers: Sequence[RegisteredResolver] = (),
) -> BuildConfig:
    """Validate one profile, with secret overrides from ``resolvers`` applied."""

    raw = document.get(profile)
    if raw is None:
        raise ConfigError(f"Config file {source} has no '{profile}' profile")
    if not isinstance(raw, dict):
        raise ConfigError(f"Profile '{profile}' in {source} must be an object")
    try:
        return BuildConfig.model_validate(overlay_secrets(raw, resolvers))
    except ValidationError as exc:
        raise ConfigError(f"Profile '{profile}' in {source} is invalid: {exc}") from exc


@dataclass(frozen=True, slots=True)
class ResolvedConfig:
    """The configs one build invocation reads, loaded together."""

    mode: BuildMode
    build: BuildConfig
    substitution: BuildConfig
    substitution_profile: str


def load_build_config(
    path: Path,
    flags: BuildFlags,
    *,
    resolvers: Optional[Sequence[RegisteredResolver]] = None,
) -> ResolvedConfig:
    """Load the resolved mode's profile, and the test profile when testing.

    Test builds take substitution values from the ``test`` profile when the
    document has one. That profile is read as written: secret overrides only
    apply to the resolved mode. Manifests always use the resolved mode's profile.
    """

    if resolvers is None:
        resolvers = build_resolvers()
    mode = resolve_mode(flags)
    document = load_config_document(path)
    build = parse_profile(document, mode.value, source=path, resolvers=resolvers)

    substitution = build
    substitution_profile = mode.value
    if flags.test and TEST_PROFILE in document:
        substitution = parse_profile(document, TEST_PROFILE, source=path)
        substitution_profile = TEST_PROFILE

    logger.info("Loaded '%s' config from %s (substitution profile '%s')", mode.value, path, substitution_profile)
    return ResolvedConfig(
        mode=mode,
        build=build,
        substitution=substitution,
        substitution_profile=substitution_profile,
    )
