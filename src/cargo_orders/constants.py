"""Stable constants shared across the manifest, config, and CLI layers."""

from __future__ import annotations

from typing import Final

# Config schema version for ``cargo_orders.toml``.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Keyword that must appear in ``package.keywords`` before orders are reported.
GATE_KEYWORD: Final[str] = "Christmas 2024"

# Closed value sets checked by the manifest binder.
EDITION_VALUES: Final[tuple[str, ...]] = ("2015", "2018", "2021", "2024")
RESOLVER_VALUES: Final[tuple[str, ...]] = ("1", "2")

# Orders carry an unsigned 32-bit quantity.
MAX_ORDER_QUANTITY: Final[int] = 2**32 - 1

# Key under which misplaced metadata is tolerated (``package.metadata.package``).
COMPAT_METADATA_KEY: Final[str] = "package"

__all__ = [
    "COMPAT_METADATA_KEY",
    "CONFIG_SCHEMA_VERSION",
    "EDITION_VALUES",
    "GATE_KEYWORD",
    "MAX_ORDER_QUANTITY",
    "RESOLVER_VALUES",
]
