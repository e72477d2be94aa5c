"""
cargo-orders manifest package public API.

Purpose
- Decode TOML/JSON/YAML manifests, bind them into the typed model, and
  select one of the three validation outcomes.

Functional requirements
- ``validate`` is the single entry point used by outer layers; it never
  raises for manifest content.
"""

from cargo_orders.manifest.binder import BindResult, bind, check_manifest
from cargo_orders.manifest.decoder import (
    GenericValue,
    ManifestFormat,
    coerce_format,
    decode,
    format_for_content_type,
    format_for_path,
)
from cargo_orders.manifest.gate import evaluate, validate
from cargo_orders.manifest.model import (
    CargoOrders,
    InvalidManifest,
    KeywordMissing,
    Manifest,
    Metadata,
    Order,
    OrderCandidate,
    Orders,
    Package,
    Profile,
    Workspace,
)
from cargo_orders.manifest.orders import extract_orders, render_orders, try_bind_order
from cargo_orders.manifest.validators import (
    Edition,
    Resolver,
    is_decimal_version,
    parse_edition,
    parse_resolver,
)

__all__ = [
    "BindResult",
    "CargoOrders",
    "Edition",
    "GenericValue",
    "InvalidManifest",
    "KeywordMissing",
    "Manifest",
    "ManifestFormat",
    "Metadata",
    "Order",
    "OrderCandidate",
    "Orders",
    "Package",
    "Profile",
    "Resolver",
    "Workspace",
    "bind",
    "check_manifest",
    "coerce_format",
    "decode",
    "evaluate",
    "extract_orders",
    "format_for_content_type",
    "format_for_path",
    "is_decimal_version",
    "parse_edition",
    "parse_resolver",
    "render_orders",
    "try_bind_order",
    "validate",
]
