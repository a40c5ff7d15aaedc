"""Build tooling for the traktflix Chrome and Firefox extensions."""

__version__ = "0.1.0"
from .assembly import AssemblyResult, AssetAssembler, CopySpec
from .compiler import CommandCompiler, CompilerConfig, PassthroughCompiler
from .config import BuildFlags, BuildLayout, ResolvedConfig, load_build_config, resolve_mode
from .errors import BuildError, CompilerError, ConfigError, ManifestError
from .manifest import build_manifest, render_manifest
from .orchestrator import BuildOrchestrator, BuildResult, get_compiler_config
from .schemas import BuildConfig, BuildMode, ExtensionManifest, Target

__all__ = [
    "__version__",
    "AssemblyResult",
    "AssetAssembler",
    "CopySpec",
    "CommandCompiler",
    "CompilerConfig",
    "PassthroughCompiler",
    "BuildFlags",
    "BuildLayout",
    "ResolvedConfig",
    "load_build_config",
    "resolve_mode",
    "BuildError",
    "CompilerError",
    "ConfigError",
    "ManifestError",
    "build_manifest",
    "render_manifest",
    "BuildOrchestrator",
    "BuildResult",
    "get_compiler_config",
    "BuildConfig",
    "BuildMode",
    "ExtensionManifest",
    "Target",
]
