"""
Keyword gate and outcome selection for manifest validation.

``validate`` composes decode -> bind -> evaluate and collapses every syntax
or structural failure into ``InvalidManifest``; callers only ever see one of
``Orders``, ``KeywordMissing`` or ``InvalidManifest``.
"""

from __future__ import annotations

from typing import Any

from cargo_orders.constants import GATE_KEYWORD
from cargo_orders.errors import ManifestBindError, ManifestSyntaxError
from cargo_orders.manifest.binder import bind
from cargo_orders.manifest.decoder import ManifestFormat, coerce_format, decode
from cargo_orders.manifest.model import (
    CargoOrders,
    InvalidManifest,
    KeywordMissing,
    Manifest,
    Orders,
)
from cargo_orders.manifest.orders import extract_orders
from cargo_orders.observability.logging import get_logger


def evaluate(
    manifest: Manifest,
    *,
    keyword: str = GATE_KEYWORD,
    logger: Any | None = None,
) -> Orders | KeywordMissing:
    """Apply the keyword gate and extract orders when it holds."""

    log = logger if logger is not None else get_logger(__name__)
    if keyword not in manifest.package.keywords:
        log.info(
            "manifest_keyword_missing",
            package=manifest.package.name,
            keyword_count=len(manifest.package.keywords),
        )
        return KeywordMissing()

    candidates = manifest.package.metadata.orders
    orders = extract_orders(candidates, logger=log)
    log.info(
        "manifest_orders_extracted",
        package=manifest.package.name,
        candidate_count=len(candidates),
        order_count=len(orders),
    )
    return Orders(orders=orders)


def validate(
    text: str,
    fmt: ManifestFormat | str,
    *,
    keyword: str = GATE_KEYWORD,
    logger: Any | None = None,
) -> CargoOrders:
    """Decode, bind and gate ``text``; any decode or bind failure is ``InvalidManifest``."""

    resolved = coerce_format(fmt)
    log = logger if logger is not None else get_logger(__name__)

    try:
        tree = decode(text, resolved)
    except ManifestSyntaxError as exc:
        log.info(
            "manifest_decode_failed",
            format=resolved.value,
            error_type=type(exc.__cause__ or exc).__name__,
        )
        return InvalidManifest()

    try:
        manifest = bind(tree)
    except ManifestBindError as exc:
        log.info(
            "manifest_bind_failed",
            format=resolved.value,
            issues=[{"path": issue.path, "message": issue.message} for issue in exc.issues],
        )
        return InvalidManifest()

    return evaluate(manifest, keyword=keyword, logger=log)


__all__ = [
    "evaluate",
    "validate",
]
