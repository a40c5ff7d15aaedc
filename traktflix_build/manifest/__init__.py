"""Manifest derivation and serialization."""

from .builder import BASE_MANIFEST, build_manifest
from .io import dump_manifest, read_package_version, render_manifest

__all__ = [
    "BASE_MANIFEST",
    "build_manifest",
    "dump_manifest",
    "read_package_version",
    "render_manifest",
]
