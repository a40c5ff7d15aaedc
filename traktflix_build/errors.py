"""Exceptions raised by the traktflix build tooling."""

from __future__ import annotations


class BuildError(RuntimeError):
    """Raised when a build cannot continue."""


class ConfigError(BuildError):
    """Raised when the mode-keyed config file is missing or malformed."""


class ManifestError(BuildError):
    """Raised when a manifest cannot be derived or fails verification."""


class CompilerError(BuildError):
    """Raised when the compile step exits unsuccessfully."""
