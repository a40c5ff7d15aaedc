"""Post-emit asset assembly for every browser target."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config import BuildLayout
from ..errors import ManifestError
from ..manifest import build_manifest, dump_manifest, read_package_version
from ..schemas.config import BuildConfig, Target
from ..schemas.manifest import ExtensionManifest
from .copy import copy_file, copy_folder, folder_specs, polyfill_specs

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AssemblyResult:
    lib_dirs: List[str] = field(default_factory=list)
    copied_files: List[str] = field(default_factory=list)
    copied_folders: List[str] = field(default_factory=list)
    manifest_paths: Dict[str, str] = field(default_factory=dict)
    missing_references: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            "lib_dirs": self.lib_dirs,
            "copied_files": self.copied_files,
            "copied_folders": self.copied_folders,
            "manifest_paths": self.manifest_paths,
            "missing_references": self.missing_references,
        }


class AssetAssembler:
    """Populates ``build/<target>`` once compiled output exists.

    Safe to re-run: directories are created with ``exist_ok``, copies
    overwrite, and manifests are regenerated from the same inputs.
    """

    def __init__(self, layout: BuildLayout) -> None:
        self.layout = layout

    def assemble(
        self,
        config: BuildConfig,
        *,
        version: Optional[str] = None,
        verify_references: bool = False,
    ) -> AssemblyResult:
        version = version or read_package_version(self.layout.package_json)
        result = AssemblyResult()

        for target in self.layout.targets:
            lib_dir = self.layout.target_dir(target) / "js" / "lib"
            lib_dir.mkdir(parents=True, exist_ok=True)
            result.lib_dirs.append(str(lib_dir))

        for spec in polyfill_specs(self.layout):
            copied = copy_file(spec)
            result.copied_files.append(str(copied))
            logger.debug("Copied %s -> %s", spec.source, copied)

        for spec in folder_specs(self.layout):
            copy_folder(spec)
            result.copied_folders.append(str(spec.destination))
            logger.debug("Copied folder %s -> %s", spec.source, spec.destination)

        manifests = {target: build_manifest(config, target, version=version) for target in self.layout.targets}
        for target, manifest in manifests.items():
            path = self.layout.target_dir(target) / "manifest.json"
            dump_manifest(manifest, path)
            result.manifest_paths[target.value] = str(path)

            missing = self.missing_references(target, manifest)
            if missing:
                result.missing_references[target.value] = missing
                logger.warning("%s manifest references missing files: %s", target.value, ", ".join(missing))

        if verify_references and result.missing_references:
            details = "; ".join(
                f"{target}: {', '.join(paths)}" for target, paths in result.missing_references.items()
            )
            raise ManifestError(f"Manifest references files that were not emitted ({details})")

        logger.info(
            "Assembled %s (version %s)",
            ", ".join(target.value for target in self.layout.targets),
            version,
        )
        return result

    def missing_references(self, target: Target, manifest: ExtensionManifest) -> List[str]:
        root = self.layout.target_dir(target)
        return [reference for reference in manifest.script_references() if not (root / reference).exists()]
