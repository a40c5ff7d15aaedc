"""Command-line entry point for traktflix builds."""

from __future__ import annotations

import argparse
import json
import logging
import shlex
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from traktflix_build import secrets
from traktflix_build.compiler import CommandCompiler, Compiler, PassthroughCompiler
from traktflix_build.config import (
    BuildFlags,
    BuildLayout,
    load_build_config,
    load_config_document,
)
from traktflix_build.manifest import build_manifest, read_package_version, render_manifest
from traktflix_build.orchestrator import BuildOrchestrator
from traktflix_build.schemas.config import BuildMode, Target


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "build":
        return _handle_build(args)
    if args.command == "manifest":
        if args.manifest_command == "render":
            return _handle_manifest_render(args)
        parser.error("manifest command requires a subcommand")
    if args.command == "config":
        if args.config_command == "describe":
            return _handle_config_describe(args)
        parser.error("config command requires a subcommand")

    parser.error(f"Unknown command '{args.command}'")
    return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="traktflix-build", description="Build the traktflix extension.")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--workspace-root")
    common.add_argument("--config", help="Mode-keyed config file (default: <workspace>/config.json).")
    common.add_argument("--env-file", help="dotenv file with TRAKTFLIX_* secret overrides.")

    build = subparsers.add_parser("build", parents=[common], help="Compile and assemble both targets.")
    build.add_argument("--production", action="store_true")
    build.add_argument("--development", action="store_true")
    build.add_argument("--watch", action="store_true")
    build.add_argument("--test", action="store_true")
    build.add_argument("--compiler-command", help="External bundler command; passthrough when omitted.")
    build.add_argument(
        "--verify-references",
        action="store_true",
        help="Fail when a manifest references a file that was not emitted.",
    )

    manifest = subparsers.add_parser("manifest", help="Manifest utilities.")
    manifest_sub = manifest.add_subparsers(dest="manifest_command", required=True)
    manifest_render = manifest_sub.add_parser("render", parents=[common], help="Print one target's manifest.")
    manifest_render.add_argument("--target", required=True, choices=[target.value for target in Target])
    manifest_render.add_argument("--mode", default=BuildMode.NONE.value, choices=[mode.value for mode in BuildMode])

    config = subparsers.add_parser("config", help="Config utilities.")
    config_sub = config.add_subparsers(dest="config_command", required=True)
    config_describe = config_sub.add_parser(
        "describe",
        parents=[common],
        help="Report where each secret resolves from, without values.",
    )
    config_describe.add_argument("--mode", default=BuildMode.NONE.value, choices=[mode.value for mode in BuildMode])

    return parser


def _handle_build(args: argparse.Namespace) -> int:
    layout = _layout(args)
    flags = BuildFlags(
        development=args.development,
        production=args.production,
        watch=args.watch,
        test=args.test,
    )
    compiler: Compiler = (
        CommandCompiler(shlex.split(args.compiler_command)) if args.compiler_command else PassthroughCompiler()
    )
    orchestrator = BuildOrchestrator(
        layout,
        compiler=compiler,
        verify_references=args.verify_references,
        resolvers=_resolvers(args),
    )
    try:
        result = orchestrator.run(flags)
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Watch stopped")
        return 0

    payload = {
        "workspace_root": str(layout.workspace_root),
        "build_dir": str(layout.build_dir),
        "mode": flags.mode.value,
        "flags": {
            "development": flags.development,
            "production": flags.production,
            "watch": flags.watch,
            "test": flags.test,
        },
        "result": result.to_dict(),
    }
    _print_json(payload)
    return 0


def _handle_manifest_render(args: argparse.Namespace) -> int:
    layout = _layout(args)
    flags = _flags_for_mode(BuildMode(args.mode))
    resolved = load_build_config(layout.config_path, flags, resolvers=_resolvers(args))
    version = read_package_version(layout.package_json)
    manifest = build_manifest(resolved.build, Target(args.target), version=version)
    print(render_manifest(manifest))
    return 0


def _handle_config_describe(args: argparse.Namespace) -> int:
    layout = _layout(args)
    document = load_config_document(layout.config_path)
    profile = document.get(args.mode)
    payload = {
        "config_path": str(layout.config_path),
        "mode": args.mode,
        "profiles": sorted(document),
        "profile_present": isinstance(profile, dict),
        "secrets": secrets.describe_secrets(profile if isinstance(profile, dict) else {}, _resolvers(args)),
    }
    _print_json(payload)
    return 0


def _flags_for_mode(mode: BuildMode) -> BuildFlags:
    return BuildFlags(
        production=mode is BuildMode.PRODUCTION,
        development=mode is BuildMode.DEVELOPMENT,
    )


def _resolvers(args: argparse.Namespace) -> List[secrets.RegisteredResolver]:
    env_file = _resolve_path(args.env_file, _resolve_workspace(args.workspace_root)) if args.env_file else None
    return secrets.build_resolvers(env_file=env_file)


def _layout(args: argparse.Namespace) -> BuildLayout:
    workspace = _resolve_workspace(args.workspace_root)
    config_path = _resolve_path(args.config, workspace) if args.config else None
    return BuildLayout.for_workspace(workspace, config_path=config_path)


def _resolve_workspace(value: Optional[str]) -> Path:
    return Path(value).resolve() if value else Path.cwd()


def _resolve_path(value: str, workspace: Path) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = workspace / path
    return path.resolve()


def _print_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":
    raise SystemExit(main())
