"""Pydantic models describing build modes and per-mode configuration."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class BuildMode(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    NONE = "none"


class Target(str, Enum):
    CHROME = "chrome"
    FIREFOX = "firefox"


class BuildConfig(BaseModel):
    """Secrets and signing identifiers for one build mode."""

    client_id: str = Field(..., alias="clientId")
    client_secret: str = Field(..., alias="clientSecret")
    rollbar_token: str = Field(..., alias="rollbarToken")
    tmdb_api_key: str = Field(..., alias="tmdbApiKey")
    chrome_extension_key: Optional[str] = Field(
        default=None,
        alias="chromeExtensionKey",
        description="Public key pinning the Chrome extension id.",
    )
    firefox_extension_id: Optional[str] = Field(
        default=None,
        alias="firefoxExtensionId",
        description="Gecko add-on id.",
    )

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    def substitutions(self) -> Dict[str, str]:
        """Placeholder tokens and their values for templated sources."""

        return {
            "@@clientId": self.client_id,
            "@@clientSecret": self.client_secret,
            "@@rollbarToken": self.rollbar_token,
            "@@tmdbApiKey": self.tmdb_api_key,
        }
