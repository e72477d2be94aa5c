"""Unit tests for exit-code routing at the process entrypoint."""

from __future__ import annotations

import pytest

from cargo_orders.config import ConfigLoadError
from cargo_orders.errors import UnsupportedFormatError
from cargo_orders.main import ExitCode, cli_entrypoint, exit_code_for


def _chained(outer: Exception, inner: Exception) -> Exception:
    try:
        try:
            raise inner
        except Exception as exc:
            raise outer from exc
    except Exception as caught:
        return caught


@pytest.mark.parametrize(
    "exc",
    [
        ConfigLoadError("config file not found: x"),
        UnsupportedFormatError("xml"),
        FileNotFoundError("Cargo.toml"),
        _chained(RuntimeError("wrapped"), PermissionError("denied")),
    ],
)
def test_user_facing_failures_map_to_usage_error(exc: Exception) -> None:
    assert exit_code_for(exc) is ExitCode.USAGE_ERROR


def test_unexpected_failures_map_to_internal_error() -> None:
    assert exit_code_for(_chained(RuntimeError("outer"), KeyError("k"))) is ExitCode.INTERNAL_ERROR


def test_self_referencing_chain_terminates() -> None:
    exc = RuntimeError("loop")
    exc.__cause__ = exc

    assert exit_code_for(exc) is ExitCode.INTERNAL_ERROR


def test_entrypoint_prints_traceback_for_internal_errors(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def _explode(argv: object) -> int:
        raise RuntimeError("kaboom")

    monkeypatch.setattr("cargo_orders.ui.cli.run_cli", _explode)

    assert cli_entrypoint(["config"]) == ExitCode.INTERNAL_ERROR
    err = capsys.readouterr().err
    assert "Traceback" in err
    assert "RuntimeError: kaboom" in err


def test_entrypoint_prints_message_for_usage_errors(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def _refuse(argv: object) -> int:
        raise ConfigLoadError("config file not found: nope.toml")

    monkeypatch.setattr("cargo_orders.ui.cli.run_cli", _refuse)

    assert cli_entrypoint(["config"]) == ExitCode.USAGE_ERROR
    assert capsys.readouterr().err == "error: config file not found: nope.toml\n"
