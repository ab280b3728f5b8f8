"""CLI entry point for the pam_hbac config reader."""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
import sys
from typing import Any, Sequence

import yaml

from hbac.config.errors import ConfigError
from hbac.config.loader import dump_config, initialize_config, loaded_config
from hbac.config.schema import DEFAULT_CONFIG_PATH
from hbac.core.logging import LoggingConfig, configure_logging, get_logger


def _default_config_path() -> Path:
    return Path(os.environ.get("HBAC_CONFIG") or DEFAULT_CONFIG_PATH)


def _logging_config(args: argparse.Namespace) -> LoggingConfig:
    level = args.log_level or os.environ.get("HBAC_LOG_LEVEL") or "WARNING"
    file_path = args.log_file or os.environ.get("HBAC_LOG_FILE") or None
    return LoggingConfig(level=level, sink="file" if file_path else "stdout", file_path=file_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hbac")
    parser.add_argument("--log-level", type=str, default=None, help="Diagnostic log level (env: HBAC_LOG_LEVEL)")
    parser.add_argument("--log-file", type=str, default=None, help="Write diagnostics to a file (env: HBAC_LOG_FILE)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create starter config")
    init_parser.add_argument("--config", type=Path, default=None)
    init_parser.add_argument("--force", action="store_true")

    show_parser = subparsers.add_parser("show", help="Print the effective configuration")
    show_parser.add_argument("--config", type=Path, default=None)
    show_parser.add_argument("--format", dest="output_format", choices=["json", "yaml"], default="json")
    show_parser.add_argument(
        "--show-secrets",
        action="store_true",
        help="Print bind_pw instead of a redacted placeholder",
    )

    check_parser = subparsers.add_parser("check", help="Validate a config file and report the failure kind")
    check_parser.add_argument("--config", type=Path, default=None)

    return parser


def cmd_init(config_path: Path, force: bool) -> int:
    try:
        initialize_config(config_path, force=force)
    except FileExistsError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(f"wrote config: {config_path}")
    return 0


def cmd_show(config_path: Path, *, output_format: str, show_secrets: bool) -> int:
    try:
        with loaded_config(config_path) as config:
            dump_config(config)
            payload = config.as_dict(show_secrets=show_secrets)
    except ConfigError as exc:
        print(f"{exc.kind}: {exc}", file=sys.stderr)
        return 1
    if output_format == "yaml":
        print(yaml.safe_dump(payload, sort_keys=False), end="")
    else:
        print(json.dumps(payload, indent=2))
    return 0


def cmd_check(config_path: Path) -> int:
    result: dict[str, Any] = {"ok": True, "config_file": str(config_path), "error": None, "detail": None}
    try:
        with loaded_config(config_path):
            pass
    except ConfigError as exc:
        result.update(ok=False, error=exc.kind, detail=str(exc))
        line_number = getattr(exc, "line_number", None)
        if line_number is not None:
            result["line_number"] = line_number
    print(json.dumps(result, indent=2))
    return 0 if result["ok"] else 1


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        logging_config = _logging_config(args)
    except ValueError as exc:
        parser.error(str(exc))
    configure_logging(logging_config, force=True)
    get_logger("hbac.cli").debug(f"command: {args.command}", extra={"event_action": "cli_command"})

    config_path = args.config or _default_config_path()
    if args.command == "init":
        return cmd_init(config_path, args.force)
    if args.command == "show":
        return cmd_show(config_path, output_format=args.output_format, show_secrets=args.show_secrets)
    if args.command == "check":
        return cmd_check(config_path)
    parser.error(f"unknown command '{args.command}'")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
