from __future__ import annotations

import json
from pathlib import Path

import pytest

import traktflix_build.secrets as secrets
from traktflix_build.config import BuildLayout
from traktflix_build.compiler import MODULE_ENTRIES

CONFIG_DOCUMENT = {
    "production": {
        "clientId": "prod-client",
        "clientSecret": "prod-secret",
        "rollbarToken": "prod-rollbar",
        "tmdbApiKey": "prod-tmdb",
        "chromeExtensionKey": "MIIBIjANBgkqhkiG9w0BAQEFAAOCAQ8AMIIBCgKCAQEA",
        "firefoxExtensionId": "traktflix@example.org",
    },
    "development": {
        "clientId": "dev-client",
        "clientSecret": "dev-secret",
        "rollbarToken": "dev-rollbar",
        "tmdbApiKey": "dev-tmdb",
    },
    "none": {
        "clientId": "none-client",
        "clientSecret": "none-secret",
        "rollbarToken": "none-rollbar",
        "tmdbApiKey": "none-tmdb",
    },
    "test": {
        "clientId": "test-client",
        "clientSecret": "test-secret",
        "rollbarToken": "test-rollbar",
        "tmdbApiKey": "test-tmdb",
    },
}


@pytest.fixture(autouse=True)
def isolated_secrets(monkeypatch: pytest.MonkeyPatch):
    for spec in secrets.BUILD_SECRETS:
        monkeypatch.delenv(spec.name, raising=False)
    return secrets


def _write(path: Path, content: str | bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "traktflix"
    _write(root / "package.json", json.dumps({"name": "traktflix", "version": "4.2.1"}))
    _write(root / "config.json", json.dumps(CONFIG_DOCUMENT, indent=2))
    for module in MODULE_ENTRIES:
        _write(root / "src" / "modules" / module / "index.js", f"console.log('{module}');\n")
    _write(root / "src" / "modules" / "settings.js", "export const clientId = '@@clientId';\n")
    _write(root / "src" / "html" / "popup.html", "<html><body>popup</body></html>\n")
    _write(root / "src" / "html" / "options.html", "<html><body>options</body></html>\n")
    _write(root / "src" / "_locales" / "en" / "messages.json", '{"appName": {"message": "traktflix"}}\n')
    _write(root / "src" / "assets" / "fonts" / "roboto.woff2", b"wOF2")
    _write(root / "src" / "assets" / "images" / "traktflix-icon-16.png", b"\x89PNG")
    _write(
        root / "node_modules" / "webextension-polyfill" / "dist" / "browser-polyfill.min.js",
        "/* polyfill */\n",
    )
    return root


@pytest.fixture()
def layout(workspace: Path) -> BuildLayout:
    return BuildLayout.for_workspace(workspace)
