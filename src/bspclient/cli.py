"""Command-line interface for bspclient."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from bspclient.errors import EscapeError

CONFIG_FILE_NAME = "bspclient.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    command: str
    text: str | None
    specials: list[str]
    workspace: Path | None
    log_level: int


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="bspclient",
        description="Build Server Protocol client utilities",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_FILE_NAME})",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    esc = sub.add_parser("escape", help="Escape special characters in TEXT")
    esc.add_argument("text", help="Text to escape")
    esc.add_argument(
        "-s",
        "--special",
        action="append",
        default=[],
        metavar="CHAR",
        help="Character that must be escaped; escape sequences allowed (repeatable)",
    )

    unesc = sub.add_parser("unescape", help="Replace escape sequences in TEXT")
    unesc.add_argument("text", help="Text to unescape")

    disc = sub.add_parser("discover", help="Print BSP connection details as JSON")
    disc.add_argument("workspace", nargs="?", help="Workspace directory (default: cwd)")
    return p


def parse_special_arg(s: str) -> str:
    """Parse a special character argument, which may itself be written as an escape."""
    from bspclient.strings import unescape

    try:
        special = unescape(s) if len(s) > 1 else s
    except EscapeError as exc:
        raise argparse.ArgumentTypeError(
            f"invalid special character {s!r}: {exc.message}"
        ) from exc
    if len(special) != 1:
        raise argparse.ArgumentTypeError(
            f"invalid special character (expected exactly one): {s!r}"
        )
    return special


def parse_log_level(s: str) -> int:
    """Parse a logging level name such as INFO into its numeric value."""
    levels = logging.getLevelNamesMapping()
    level = levels.get(s.upper())
    if level is None:
        raise argparse.ArgumentTypeError(f"invalid log level: {s}")
    return level


def load_config(config_path: Path | None, base_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else base_dir / CONFIG_FILE_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise argparse.ArgumentTypeError(f"invalid config file {path}: {exc}") from exc


def resolve_options(args: argparse.Namespace, base_dir: Path | None = None) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, base_dir if base_dir is not None else Path("."))

    # Specials: config < CLI (both apply), escape command only
    specials: list[str] = []
    if args.command == "escape":
        cfg_escape = config.get("escape")
        if isinstance(cfg_escape, dict):
            cfg_specials = cfg_escape.get("specials")
            if isinstance(cfg_specials, list):
                specials.extend(parse_special_arg(str(s)) for s in cfg_specials)
        specials.extend(parse_special_arg(s) for s in getattr(args, "special", []))

    # Workspace: config < CLI
    workspace: Path | None = None
    cfg_discover = config.get("discover")
    if isinstance(cfg_discover, dict):
        cfg_workspace = cfg_discover.get("workspace")
        if isinstance(cfg_workspace, str):
            workspace = Path(cfg_workspace)
    cli_workspace = getattr(args, "workspace", None)
    if cli_workspace is not None:
        workspace = Path(cli_workspace)

    # Log level: config < CLI
    log_level = logging.WARNING
    cfg_logging = config.get("logging")
    if isinstance(cfg_logging, dict):
        cfg_level = cfg_logging.get("level")
        if isinstance(cfg_level, str):
            log_level = parse_log_level(cfg_level)
    if args.verbose:
        log_level = logging.DEBUG

    return CliOptions(
        command=args.command,
        text=getattr(args, "text", None),
        specials=specials,
        workspace=workspace,
        log_level=log_level,
    )


def run(options: CliOptions) -> str:
    """Execute the selected command and return what it prints."""
    if options.command == "escape":
        from bspclient.strings import escape

        return escape(options.text or "", options.specials)

    if options.command == "unescape":
        from bspclient.strings import unescape

        return unescape(options.text or "")

    from bspclient.discover import discover_connection_details

    details = discover_connection_details(options.workspace)
    return json.dumps([d.to_json() for d in details], indent=2)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(level=options.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        output = run(options)
    except EscapeError as exc:
        print(exc.format("<argv>"), file=sys.stderr)
        return 1

    print(output)
    return 0
