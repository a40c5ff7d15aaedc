"""Pydantic models for the WebExtension manifest (manifest_version 2)."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Background(BaseModel):
    scripts: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)


class ContentScript(BaseModel):
    js: List[str] = Field(default_factory=list)
    matches: List[str] = Field(default_factory=list)
    run_at: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class PageAction(BaseModel):
    default_icon: Dict[str, str] = Field(default_factory=dict)
    default_popup: Optional[str] = None
    default_title: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class GeckoSettings(BaseModel):
    id: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class BrowserSpecificSettings(BaseModel):
    gecko: GeckoSettings

    model_config = ConfigDict(extra="forbid", frozen=True)


class ExtensionManifest(BaseModel):
    """One browser's manifest.json. Field order is the serialized key order."""

    manifest_version: int
    name: str
    version: str = Field(..., min_length=1)
    description: str
    icons: Dict[str, str] = Field(default_factory=dict)
    background: Background
    content_scripts: List[ContentScript] = Field(default_factory=list)
    default_locale: Optional[str] = None
    optional_permissions: List[str] = Field(default_factory=list)
    page_action: Optional[PageAction] = None
    permissions: List[str] = Field(default_factory=list)
    web_accessible_resources: List[str] = Field(default_factory=list)
    key: Optional[str] = Field(default=None, description="Chrome signing key.")
    browser_specific_settings: Optional[BrowserSpecificSettings] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    def script_references(self) -> List[str]:
        """Return every script path the manifest expects inside the target root."""

        references: List[str] = list(self.background.scripts)
        for content_script in self.content_scripts:
            references.extend(content_script.js)
        if self.page_action and self.page_action.default_popup:
            references.append(self.page_action.default_popup)
        return list(dict.fromkeys(references))
