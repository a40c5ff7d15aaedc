"""Manifest serialization and package metadata helpers."""

from __future__ import annotations

import json
from pathlib import Path

from ..errors import ManifestError
from ..schemas.manifest import ExtensionManifest


def render_manifest(manifest: ExtensionManifest) -> str:
    """Serialize with 2-space indentation and declared key order."""

    payload = manifest.model_dump(mode="json", exclude_none=True)
    return json.dumps(payload, indent=2, ensure_ascii=False)


def dump_manifest(manifest: ExtensionManifest, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_manifest(manifest), encoding="utf-8")


def read_package_version(package_json: Path) -> str:
    """Return the ``version`` field of ``package.json``."""

    try:
        payload = json.loads(package_json.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ManifestError(f"package.json not found: {package_json}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(f"package.json is not valid JSON: {package_json} ({exc})") from exc

    version = payload.get("version") if isinstance(payload, dict) else None
    if not isinstance(version, str) or not version.strip():
        raise ManifestError(f"package.json has no version: {package_json}")
    return version

