"""Module entrypoint for ``python -m cargo_orders``."""

from __future__ import annotations

from cargo_orders.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
