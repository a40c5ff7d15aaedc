"""Per-target manifest derivation."""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Union

from pydantic import ValidationError

from ..errors import ManifestError
from ..schemas.config import BuildConfig, Target
from ..schemas.manifest import ExtensionManifest

logger = logging.getLogger(__name__)

POLYFILL_SCRIPT = "js/lib/browser-polyfill.js"

BASE_MANIFEST: Dict[str, Any] = {
    "manifest_version": 2,
    "name": "__MSG_appName__",
    "description": "__MSG_appDescription__",
    "icons": {
        "16": "images/traktflix-icon-16.png",
        "128": "images/traktflix-icon-128.png",
    },
    "background": {
        "scripts": [POLYFILL_SCRIPT, "js/background.js"],
    },
    "content_scripts": [
        {
            "js": [POLYFILL_SCRIPT, "js/content.js"],
            "matches": ["*://*.netflix.com/*"],
            "run_at": "document_idle",
        }
    ],
    "default_locale": "en",
    "optional_permissions": [
        "notifications",
        "*://api.rollbar.com/*",
        "*://script.google.com/*",
        "*://script.googleusercontent.com/*",
    ],
    "page_action": {
        "default_icon": {
            "19": "images/traktflix-icon-19.png",
            "38": "images/traktflix-icon-38.png",
        },
        "default_popup": "html/popup.html",
        "default_title": "traktflix",
    },
    "permissions": [
        "identity",
        "storage",
        "tabs",
        "unlimitedStorage",
        "*://*.netflix.com/*",
        "*://*.trakt.tv/*",
    ],
    "web_accessible_resources": [
        "images/traktflix-icon-38.png",
        "images/traktflix-icon-selected-38.png",
        "images/svg/*.svg",
    ],
}


def build_manifest(config: BuildConfig, target: Union[Target, str], *, version: str) -> ExtensionManifest:
    """Derive the manifest for ``target``.

    Unknown targets get the base manifest without any target-specific fields.
    A blank ``version`` fails validation instead of producing a partial manifest.
    """

    payload = copy.deepcopy(BASE_MANIFEST)
    payload["version"] = version

    target_name = target.value if isinstance(target, Target) else str(target)
    if target_name == Target.CHROME.value:
        if config.chrome_extension_key:
            payload["key"] = config.chrome_extension_key
        payload["permissions"].append("declarativeContent")
    elif target_name == Target.FIREFOX.value:
        payload["optional_permissions"].append("cookies")
        if config.firefox_extension_id:
            payload["browser_specific_settings"] = {
                "gecko": {"id": config.firefox_extension_id},
            }
    else:
        logger.debug("No target-specific manifest fields for '%s'", target_name)

    try:
        return ExtensionManifest.model_validate(payload)
    except ValidationError as exc:
        raise ManifestError(f"Invalid manifest for target '{target_name}': {exc}") from exc
