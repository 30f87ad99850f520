"""Command line interface for synthesizing ARM templates."""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import Any

from cli import config, output
from core.app import App
from core.authorization.roles import WellKnownRoleIds
from core.errors import ArmSynthError
from core.synthesis.synthesizer import Synthesizer


class CLIError(Exception):
    def __init__(self, message: str, exit_code: int = 2) -> None:
        super().__init__(message)
        self.exit_code = exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="armsynth", description="Synthesize ARM templates from construct trees")
    parser.add_argument("--config", type=Path, default=Path("armsynth.yml"), help="Path to CLI configuration file")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # synth -----------------------------------------------------------------
    synth_cmd = subparsers.add_parser("synth", help="Write one ARM template per stack")
    synth_cmd.add_argument("--app", required=True, help="App location as module[:attribute]")
    synth_cmd.add_argument("--outdir", help="Directory for templates and manifest")
    synth_cmd.add_argument("--strict", action="store_true", help="Treat validation warnings as errors")
    synth_cmd.add_argument("--skip-validation", action="store_true")
    synth_cmd.add_argument("--max-resources", type=int, help="Split templates above this many resources")
    synth_cmd.add_argument("--dry-run", action="store_true", help="Synthesize without writing files")
    synth_cmd.add_argument("--output", type=Path, help="Write the summary to a file")
    synth_cmd.add_argument("--format", choices=["json", "md", "table"], help="Output format override")

    # ls --------------------------------------------------------------------
    ls_cmd = subparsers.add_parser("ls", help="List stacks, scopes and resource counts")
    ls_cmd.add_argument("--app", required=True, help="App location as module[:attribute]")
    ls_cmd.add_argument("--output", type=Path)
    ls_cmd.add_argument("--format", choices=["json", "md", "table"], help="Output format override")

    # roles -----------------------------------------------------------------
    roles_cmd = subparsers.add_parser("roles", help="List built-in role definitions used by grants")
    roles_cmd.add_argument("--output", type=Path)
    roles_cmd.add_argument("--format", choices=["json", "md", "table"], help="Output format override")

    return parser


def app(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        settings = config.load_settings(args.config)
        format_override = getattr(args, "format", None)

        if args.command == "synth":
            merged = settings.merge_cli(
                format_override=format_override,
                outdir=args.outdir,
                strict=True if args.strict else None,
                skip_validation=True if args.skip_validation else None,
                max_resources_per_template=args.max_resources,
            )
            return _cmd_synth(args, merged)
        if args.command == "ls":
            return _cmd_ls(args, settings.merge_cli(format_override=format_override))
        if args.command == "roles":
            return _cmd_roles(args, settings.merge_cli(format_override=format_override))
    except CLIError as exc:
        print(exc, file=sys.stderr)
        return exc.exit_code
    except ArmSynthError as exc:
        print(exc, file=sys.stderr)
        return 1
    except Exception as exc:  # pragma: no cover - unexpected errors bubble up
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


# ---------------------------------------------------------------------------
# Command implementations


def _cmd_synth(args: argparse.Namespace, settings: config.Settings) -> int:
    arm_app = _load_app(args.app, settings.context)
    assembly = arm_app.synth(
        outdir=settings.outdir,
        strict=settings.strict,
        skip_validation=settings.skip_validation,
        max_resources_per_template=settings.max_resources_per_template,
        write=not args.dry_run,
    )
    output.emit(assembly.summary(), settings.default_format, output_path=args.output)
    return 0


def _cmd_ls(args: argparse.Namespace, settings: config.Settings) -> int:
    arm_app = _load_app(args.app, settings.context)
    stacks = Synthesizer().prepare(arm_app)
    rows = [
        {
            "stack": info.name,
            "path": key,
            "scope": info.scope.value,
            "resources": len(info.resources),
        }
        for key, info in stacks.items()
    ]
    output.emit(rows, settings.default_format, output_path=args.output)
    return 0


def _cmd_roles(args: argparse.Namespace, settings: config.Settings) -> int:
    rows = [{"role": name, "id": guid} for name, guid in WellKnownRoleIds.all().items()]
    output.emit(rows, settings.default_format, output_path=args.output)
    return 0


def _load_app(location: str, context: dict[str, Any]) -> App:
    """Import ``module[:attribute]``; the attribute is an App or a factory taking the context."""
    module_name, _, attribute = location.partition(":")
    attribute = attribute or "app"
    if not module_name:
        raise CLIError("--app must name a module, e.g. infra.main:app")

    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise CLIError(f"Cannot import app module '{module_name}': {exc}") from exc

    target = getattr(module, attribute, None)
    if target is None:
        raise CLIError(f"Module '{module_name}' has no attribute '{attribute}'")
    if isinstance(target, App):
        return target
    if callable(target):
        built = target(dict(context))
        if isinstance(built, App):
            return built
    raise CLIError(f"'{location}' must be an App instance or a factory returning one")


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING if verbosity <= 0 else logging.INFO if verbosity == 1 else logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def main() -> None:
    raise SystemExit(app())


if __name__ == "__main__":
    main()
