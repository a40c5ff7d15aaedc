"""Environment overlay for build secrets.

Values in ``config.json`` can be overridden per field from the process
environment or a ``.env`` file, so CI can inject credentials without writing
them to disk. Resolution happens once while the BuildConfig is loaded.
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence


@dataclass(frozen=True)
class SecretSpec:
    name: str
    config_key: str
    description: str = ""


class SecretResolver(Protocol):
    def resolve(self, spec: SecretSpec) -> Optional[str]:  # pragma: no cover - interface
        ...

    def describe(self) -> dict[str, object]:  # pragma: no cover - optional hook
        return {}


@dataclass(frozen=True)
class SecretAttempt:
    resolver: str
    source: str
    success: bool
    details: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class SecretResolutionInfo:
    name: str
    value: Optional[str]
    resolver: Optional[str]
    source: Optional[str]
    attempts: List[SecretAttempt]


@dataclass(frozen=True)
class RegisteredResolver:
    priority: int
    resolver: SecretResolver
    name: str
    source: str


BUILD_SECRETS: tuple[SecretSpec, ...] = (
    SecretSpec("TRAKTFLIX_CLIENT_ID", "clientId", "Trakt OAuth client id."),
    SecretSpec("TRAKTFLIX_CLIENT_SECRET", "clientSecret", "Trakt OAuth client secret."),
    SecretSpec("TRAKTFLIX_ROLLBAR_TOKEN", "rollbarToken", "Rollbar post_client_item token."),
    SecretSpec("TRAKTFLIX_TMDB_API_KEY", "tmdbApiKey", "TMDB API key."),
    SecretSpec("TRAKTFLIX_CHROME_EXTENSION_KEY", "chromeExtensionKey", "Chrome manifest key."),
    SecretSpec("TRAKTFLIX_FIREFOX_EXTENSION_ID", "firefoxExtensionId", "Gecko add-on id."),
)


class EnvResolver:
    """Resolve secrets from process environment variables."""

    def resolve(self, spec: SecretSpec) -> Optional[str]:
        value = os.getenv(spec.name)
        return value if value else None

    def describe(self) -> dict[str, object]:
        return {"type": "env"}


class DotEnvResolver:
    """Read ``KEY=value`` lines from a dotenv file without touching os.environ."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._loaded = False
        self._warnings: List[str] = []
        self._values: Dict[str, str] = {}

    def resolve(self, spec: SecretSpec) -> Optional[str]:
        self._ensure_loaded()
        value = self._values.get(spec.name)
        return value if value else None

    def describe(self) -> dict[str, object]:
        return {
            "type": "dotenv",
            "path": str(self.path),
            "exists": self.path.exists(),
            "warnings": list(self._warnings),
        }

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        if not self.path.exists():
            return

        for idx, line in enumerate(self.path.read_text(encoding="utf-8").splitlines(), start=1):
            raw = line.strip()
            if not raw or raw.startswith("#"):
                continue
            if raw.lower().startswith("export "):
                raw = raw[6:].strip()
            if "=" not in raw:
                self._warnings.append(f"line {idx}: missing '='")
                continue
            key, value_part = raw.split("=", 1)
            key = key.strip()
            if not key:
                self._warnings.append(f"line {idx}: empty key")
                continue
            try:
                tokens = shlex.split(value_part, posix=True, comments=True)
            except ValueError as exc:
                self._warnings.append(f"line {idx}: {exc}")
                continue
            self._values[key] = " ".join(tokens)


def build_resolvers(*, env_file: Optional[Path] = None) -> List[RegisteredResolver]:
    """Fresh resolver chain for one invocation, highest priority first."""

    resolvers = [RegisteredResolver(priority=0, resolver=EnvResolver(), name="env", source="env")]
    if env_file is not None:
        dotenv = DotEnvResolver(Path(env_file))
        resolvers.append(
            RegisteredResolver(priority=-10, resolver=dotenv, name=f"dotenv:{dotenv.path}", source="dotenv")
        )
    return sorted(resolvers, key=lambda item: item.priority, reverse=True)


def resolve_secret_info(spec: SecretSpec, resolvers: Sequence[RegisteredResolver]) -> SecretResolutionInfo:
    attempts: List[SecretAttempt] = []

    for entry in resolvers:
        value = entry.resolver.resolve(spec)
        describe = getattr(entry.resolver, "describe", None)
        details = describe() if callable(describe) else {}
        attempts.append(
            SecretAttempt(resolver=entry.name, source=entry.source, success=bool(value), details=details)
        )
        if value:
            return SecretResolutionInfo(
                name=spec.name,
                value=value,
                resolver=entry.name,
                source=entry.source,
                attempts=attempts,
            )

    return SecretResolutionInfo(name=spec.name, value=None, resolver=None, source=None, attempts=attempts)


def overlay_secrets(profile: Dict[str, object], resolvers: Sequence[RegisteredResolver]) -> Dict[str, object]:
    """Return ``profile`` with every resolvable secret replaced by its override."""

    merged = dict(profile)
    for spec in BUILD_SECRETS:
        info = resolve_secret_info(spec, resolvers)
        if info.value is not None:
            merged[spec.config_key] = info.value
    return merged


def describe_secrets(profile: Dict[str, object], resolvers: Sequence[RegisteredResolver]) -> List[dict[str, object]]:
    """Report where each secret comes from. Values are never included."""

    report: List[dict[str, object]] = []
    for spec in BUILD_SECRETS:
        info = resolve_secret_info(spec, resolvers)
        if info.value is not None:
            source = info.source
        elif profile.get(spec.config_key):
            source = "config"
        else:
            source = None
        report.append(
            {
                "name": spec.name,
                "config_key": spec.config_key,
                "description": spec.description,
                "present": source is not None,
                "source": source,
                "attempts": [
                    {"resolver": attempt.resolver, "source": attempt.source, "success": attempt.success}
                    for attempt in info.attempts
                ],
            }
        )
    return report
