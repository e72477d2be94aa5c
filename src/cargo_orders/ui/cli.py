"""Command-line interface router for cargo-orders."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final

from cargo_orders.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)
from cargo_orders.errors import ManifestSyntaxError, UnsupportedFormatError
from cargo_orders.main import ExitCode
from cargo_orders.manifest import (
    CargoOrders,
    InvalidManifest,
    KeywordMissing,
    ManifestFormat,
    Orders,
    check_manifest,
    coerce_format,
    decode,
    format_for_content_type,
    format_for_path,
    render_orders,
    validate,
)
from cargo_orders.observability import correlation_scope, setup_logging, shutdown_logging

STDIN_PATH: Final[str] = "-"
KEYWORD_MISSING_MESSAGE: Final[str] = "Magic keyword not provided"
INVALID_MANIFEST_MESSAGE: Final[str] = "Invalid manifest"


class CLIError(RuntimeError):
    """CLI failure carrying the process exit code to return."""

    def __init__(self, message: str, exit_code: int = ExitCode.USAGE_ERROR) -> None:
        self.message = message
        self.exit_code = int(exit_code)
        super().__init__(message)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="cargo-orders",
        description=(
            "cargo-orders - validate package manifests and list their orders.\n\n"
            "Common workflows:\n"
            "  cargo-orders check Cargo.toml         List orders from a TOML manifest\n"
            "  cargo-orders check - --format yaml    Read a YAML manifest from stdin\n"
            "  cargo-orders config                   Show the effective configuration\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to cargo_orders.toml (default: ./cargo_orders.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log to stderr at DEBUG level and explain invalid manifests.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Validate a manifest and print its orders",
        description=(
            "Validate a manifest and print one 'item: quantity' line per order.\n\n"
            "Exit codes: 0 orders listed, 1 keyword missing, 2 invalid manifest.\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.add_argument("manifest_path", help="Manifest file path, or '-' for stdin")
    format_group = check_parser.add_mutually_exclusive_group()
    format_group.add_argument(
        "--format",
        dest="manifest_format",
        choices=[member.value for member in ManifestFormat],
        default=None,
        help="Manifest grammar (default: inferred from the file suffix).",
    )
    format_group.add_argument(
        "--content-type",
        default=None,
        help="Declared media type, e.g. application/toml.",
    )
    check_parser.add_argument("--json", action="store_true", help="Emit orders as JSON")
    check_parser.set_defaults(handler=_cmd_check)

    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Print the effective configuration as JSON",
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    try:
        namespace = parser.parse_args(list(argv) if argv is not None else None)
    except SystemExit as exc:
        # argparse exits 2 on usage errors; 2 is reserved for invalid manifests.
        if exc.code in (0, None):
            return int(ExitCode.SUCCESS)
        return int(ExitCode.USAGE_ERROR)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return int(ExitCode.USAGE_ERROR)

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        shutdown_logging()
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_check(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    _configure_logging(config, verbose=bool(args.verbose))

    manifest_path: str = args.manifest_path
    fmt = _resolve_format(args, config)
    keyword = str(_section(config, "gate")["keyword"])

    text = _read_manifest(manifest_path)
    with correlation_scope(manifest_path=manifest_path, manifest_format=fmt.value):
        if text is None:
            outcome: CargoOrders = InvalidManifest()
        else:
            outcome = validate(text, fmt, keyword=keyword)

        if isinstance(outcome, InvalidManifest) and args.verbose and text is not None:
            _explain_invalid(text, fmt)

    return _emit_outcome(outcome, as_json=bool(args.json))


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    print(dump_effective_config(config))
    return int(ExitCode.SUCCESS)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_effective_config(args: argparse.Namespace) -> dict[str, object]:
    config_path = getattr(args, "config_path", None)
    try:
        return load_config(config_path)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc)) from exc


def _configure_logging(config: Mapping[str, object], *, verbose: bool) -> None:
    observability = _section(config, "observability")
    if verbose:
        setup_logging(observability, level="DEBUG", log_to_stderr=True)
    else:
        setup_logging(observability)


def _resolve_format(args: argparse.Namespace, config: Mapping[str, object]) -> ManifestFormat:
    try:
        if args.manifest_format is not None:
            return coerce_format(args.manifest_format)
        if args.content_type is not None:
            return format_for_content_type(args.content_type)
    except UnsupportedFormatError as exc:
        raise CLIError(str(exc)) from exc

    if args.manifest_path != STDIN_PATH:
        try:
            return format_for_path(args.manifest_path)
        except UnsupportedFormatError:
            pass
    return coerce_format(str(_section(config, "decoding")["default_format"]))


def _read_manifest(manifest_path: str) -> str | None:
    """Return manifest text, or ``None`` when the bytes are not UTF-8 text."""

    try:
        if manifest_path == STDIN_PATH:
            return sys.stdin.read()
        return Path(manifest_path).read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return None
    except OSError as exc:
        raise CLIError(f"unable to read manifest {manifest_path}: {exc}") from exc


def _explain_invalid(text: str, fmt: ManifestFormat) -> None:
    try:
        tree = decode(text, fmt)
    except ManifestSyntaxError as exc:
        print(f"  {exc}", file=sys.stderr)
        return
    for issue in check_manifest(tree).issues:
        print(f"  - {issue.path}: {issue.message}", file=sys.stderr)


def _emit_outcome(outcome: CargoOrders, *, as_json: bool) -> int:
    if isinstance(outcome, Orders):
        if as_json:
            print(json.dumps([order.to_dict() for order in outcome.orders], ensure_ascii=False))
        elif outcome.orders:
            print(render_orders(outcome.orders))
        return int(ExitCode.SUCCESS)
    if isinstance(outcome, KeywordMissing):
        print(KEYWORD_MISSING_MESSAGE, file=sys.stderr)
        return int(ExitCode.KEYWORD_MISSING)
    print(INVALID_MANIFEST_MESSAGE, file=sys.stderr)
    return int(ExitCode.INVALID_MANIFEST)


def _section(config: Mapping[str, object], key: str) -> Mapping[str, object]:
    section = config.get(key)
    if not isinstance(section, Mapping):
        raise CLIError(f"config section {key!r} is missing")
    return section


__all__ = ["CLIError", "build_parser", "run_cli"]
