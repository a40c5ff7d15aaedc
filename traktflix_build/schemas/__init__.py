"""Schema definitions for build configuration and manifests."""

from .config import BuildConfig, BuildMode, Target
from .manifest import (
    Background,
    BrowserSpecificSettings,
    ContentScript,
    ExtensionManifest,
    GeckoSettings,
    PageAction,
)

__all__ = [
    "BuildConfig",
    "BuildMode",
    "Target",
    "Background",
    "BrowserSpecificSettings",
    "ContentScript",
    "ExtensionManifest",
    "GeckoSettings",
    "PageAction",
]
