from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from traktflix_build import secrets
from traktflix_build.compiler import CompileResult, CompilerConfig, PassthroughCompiler
from traktflix_build.config import BuildFlags, BuildLayout
from traktflix_build.errors import ConfigError
from traktflix_build.orchestrator import BuildOrchestrator
from traktflix_build.schemas.config import Target


def test_full_build_populates_both_targets(layout: BuildLayout) -> None:
    stale = layout.build_dir / "stale.txt"
    stale.parent.mkdir(parents=True)
    stale.write_text("old", encoding="utf-8")

    result = BuildOrchestrator(layout, verify_references=True).run(BuildFlags(production=True))

    assert not stale.exists()
    assert result.mode == "production"
    assert "assemble" in result.stages
    for target in (Target.CHROME, Target.FIREFOX):
        root = layout.target_dir(target)
        assert (root / "js" / "background.js").read_text(encoding="utf-8") == "console.log('background');\n"
        assert (root / "js" / "history-sync.js").exists()
        assert (root / "js" / "lib" / "browser-polyfill.js").exists()
        for folder in ("html", "_locales", "fonts", "images"):
            assert any((root / folder).iterdir())
        assert (root / "manifest.json").exists()

    chrome = json.loads((layout.target_dir(Target.CHROME) / "manifest.json").read_text(encoding="utf-8"))
    firefox = json.loads((layout.target_dir(Target.FIREFOX) / "manifest.json").read_text(encoding="utf-8"))
    assert chrome["key"] == "MIIBIjANBgkqhkiG9w0BAQEFAAOCAQ8AMIIBCgKCAQEA"
    assert "declarativeContent" in chrome["permissions"]
    assert firefox["browser_specific_settings"] == {"gecko": {"id": "traktflix@example.org"}}
    assert "cookies" in firefox["optional_permissions"]


def test_development_build_without_signing_ids(layout: BuildLayout) -> None:
    BuildOrchestrator(layout).run(BuildFlags(development=True))

    chrome = json.loads((layout.target_dir(Target.CHROME) / "manifest.json").read_text(encoding="utf-8"))
    firefox = json.loads((layout.target_dir(Target.FIREFOX) / "manifest.json").read_text(encoding="utf-8"))
    assert "key" not in chrome
    assert "browser_specific_settings" not in firefox


def test_test_build_emits_compiled_output_only(layout: BuildLayout) -> None:
    result = BuildOrchestrator(layout).run(BuildFlags(production=True, test=True))

    chrome_root = layout.target_dir(Target.CHROME)
    assert (chrome_root / "js" / "background.js").exists()
    assert not (chrome_root / "manifest.json").exists()
    assert not (chrome_root / "js" / "lib").exists()
    assert not (chrome_root / "html").exists()
    assert result.stages == {}


def test_passthrough_applies_secret_substitution(layout: BuildLayout) -> None:
    orchestrator = BuildOrchestrator(layout)
    config = orchestrator.configure(BuildFlags(development=True, test=True))
    config = CompilerConfig(
        mode=config.mode,
        context=config.context,
        devtool=config.devtool,
        entries={"./settings": ("./src/modules/settings.js",)},
        rules=config.rules,
        output=config.output,
    )

    orchestrator.run_pass(config)

    assert (layout.build_dir / "settings.js").read_text(encoding="utf-8") == "export const clientId = 'test-client';\n"


def test_passthrough_emits_assets(layout: BuildLayout) -> None:
    BuildOrchestrator(layout).run(BuildFlags(test=True))

    assert (layout.build_dir / "fonts" / "roboto.woff2").exists()
    assert (layout.build_dir / "images" / "traktflix-icon-16.png").exists()


def test_missing_config_aborts_before_compiling(layout: BuildLayout) -> None:
    layout.config_path.unlink()

    class _Compiler:
        def compile(self, config: CompilerConfig) -> CompileResult:
            raise AssertionError("compile should not run")

    with pytest.raises(ConfigError):
        BuildOrchestrator(layout, compiler=_Compiler()).run(BuildFlags(production=True))


def test_stages_run_after_compile(layout: BuildLayout) -> None:
    calls: list[str] = []

    class _RecordingCompiler(PassthroughCompiler):
        def compile(self, config: CompilerConfig) -> CompileResult:
            calls.append("compile")
            assert not (layout.target_dir(Target.CHROME) / "manifest.json").exists()
            return super().compile(config)

    result = BuildOrchestrator(layout, compiler=_RecordingCompiler()).run(BuildFlags())

    assert calls == ["compile"]
    assert result.stages["assemble"]["manifest_paths"]["chrome"].endswith("manifest.json")


def test_watch_rebuilds_on_change(layout: BuildLayout, monkeypatch: pytest.MonkeyPatch) -> None:
    passes: list[int] = []
    stop = threading.Event()

    def fake_wait_for_change(self, stop_event=None):
        if len(passes) >= 2:
            return []
        return [layout.source_dir / "modules" / "popup" / "index.js"]

    monkeypatch.setattr("traktflix_build.compiler.watch.SourceWatcher.wait_for_change", fake_wait_for_change)

    class _CountingCompiler(PassthroughCompiler):
        def compile(self, config: CompilerConfig) -> CompileResult:
            passes.append(len(passes) + 1)
            return super().compile(config)

    result = BuildOrchestrator(layout, compiler=_CountingCompiler()).run(
        BuildFlags(development=True, watch=True),
        stop_event=stop,
    )

    assert passes == [1, 2]
    assert result.pass_number == 2
    assert (layout.target_dir(Target.FIREFOX) / "manifest.json").exists()


def test_watch_respects_max_passes(layout: BuildLayout, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "traktflix_build.compiler.watch.SourceWatcher.wait_for_change",
        lambda self, stop_event=None: [Path("changed.js")],
    )

    result = BuildOrchestrator(layout).run(BuildFlags(development=True, watch=True), max_passes=3)

    assert result.pass_number == 3


def test_watch_pass_keeps_previous_output(layout: BuildLayout, monkeypatch: pytest.MonkeyPatch) -> None:
    manifest_seen: list[bool] = []
    changes = iter([[layout.source_dir / "modules" / "popup" / "index.js"]])
    monkeypatch.setattr(
        "traktflix_build.compiler.watch.SourceWatcher.wait_for_change",
        lambda self, stop_event=None: next(changes, []),
    )

    class _RecordingCompiler(PassthroughCompiler):
        def compile(self, config: CompilerConfig) -> CompileResult:
            manifest_seen.append((layout.target_dir(Target.CHROME) / "manifest.json").exists())
            return super().compile(config)

    result = BuildOrchestrator(layout, compiler=_RecordingCompiler()).run(BuildFlags(development=True, watch=True))

    assert manifest_seen == [False, True]
    assert result.pass_number == 2


def test_first_pass_still_cleans_in_watch_mode(layout: BuildLayout, monkeypatch: pytest.MonkeyPatch) -> None:
    stale = layout.build_dir / "stale.txt"
    stale.parent.mkdir(parents=True)
    stale.write_text("old", encoding="utf-8")
    monkeypatch.setattr(
        "traktflix_build.compiler.watch.SourceWatcher.wait_for_change",
        lambda self, stop_event=None: [],
    )

    BuildOrchestrator(layout).run(BuildFlags(development=True, watch=True))

    assert not stale.exists()


def test_orchestrator_uses_given_resolvers(
    layout: BuildLayout, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / "ci.env"
    env_file.write_text("TRAKTFLIX_FIREFOX_EXTENSION_ID=ci@example.org\n", encoding="utf-8")

    orchestrator = BuildOrchestrator(layout, resolvers=secrets.build_resolvers(env_file=env_file))
    orchestrator.run(BuildFlags(development=True))

    firefox = json.loads((layout.target_dir(Target.FIREFOX) / "manifest.json").read_text(encoding="utf-8"))
    assert firefox["browser_specific_settings"] == {"gecko": {"id": "ci@example.org"}}
