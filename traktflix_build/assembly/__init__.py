"""Post-emit asset assembly."""

from .assembler import AssemblyResult, AssetAssembler
from .copy import CopySpec, copy_file, copy_folder, folder_specs, polyfill_specs

__all__ = [
    "AssemblyResult",
    "AssetAssembler",
    "CopySpec",
    "copy_file",
    "copy_folder",
    "folder_specs",
    "polyfill_specs",
]
