"""
cargo-orders - manifest validator and order extractor.

Purpose
- Package root. Re-exports the validation entry point and its outcome types.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).

Key interfaces
- ``validate(text, fmt) -> Orders | KeywordMissing | InvalidManifest``
"""

from cargo_orders.errors import (
    BindIssue,
    CargoOrdersError,
    ManifestBindError,
    ManifestSyntaxError,
    UnsupportedFormatError,
)
from cargo_orders.manifest import (
    CargoOrders,
    InvalidManifest,
    KeywordMissing,
    ManifestFormat,
    Order,
    Orders,
    format_for_content_type,
    render_orders,
    validate,
)

__version__ = "0.1.0"

__all__ = [
    "BindIssue",
    "CargoOrders",
    "CargoOrdersError",
    "InvalidManifest",
    "KeywordMissing",
    "ManifestBindError",
    "ManifestFormat",
    "ManifestSyntaxError",
    "Order",
    "Orders",
    "UnsupportedFormatError",
    "__version__",
    "format_for_content_type",
    "render_orders",
    "validate",
]
