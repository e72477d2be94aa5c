"""Executable CLI entrypoint for ``cargo_orders``."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    """Process exit codes; 0-2 mirror the three manifest outcomes."""

    SUCCESS = 0
    KEYWORD_MISSING = 1
    INVALID_MANIFEST = 2
    USAGE_ERROR = 3
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Entrypoint used by ``python -m cargo_orders`` and the console script."""

    from cargo_orders.ui.cli import run_cli

    try:
        return int(run_cli(argv))
    except Exception as exc:  # noqa: BLE001 - last-resort mapping to an exit code.
        exit_code = exit_code_for(exc)
        if exit_code is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            print(f"error: {str(exc).strip() or type(exc).__name__}", file=sys.stderr)
        return int(exit_code)


def exit_code_for(exc: BaseException) -> ExitCode:
    """Usage error if anything in the cause chain is a config, manifest or file error."""

    from cargo_orders.config import ConfigLoadError, ConfigValidationError
    from cargo_orders.errors import CargoOrdersError

    usage_errors = (
        ConfigLoadError,
        ConfigValidationError,
        CargoOrdersError,
        FileNotFoundError,
        IsADirectoryError,
        PermissionError,
    )
    if any(isinstance(item, usage_errors) for item in _causes(exc)):
        return ExitCode.USAGE_ERROR
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


__all__ = ["ExitCode", "cli_entrypoint", "exit_code_for"]
