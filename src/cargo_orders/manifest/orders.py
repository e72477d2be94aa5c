"""Best-effort extraction of orders from unvalidated metadata candidates.

Unlike the strict manifest binder, a candidate that does not bind as an
``Order`` is skipped rather than failing the batch.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from cargo_orders.constants import MAX_ORDER_QUANTITY
from cargo_orders.manifest.model import Order, OrderCandidate
from cargo_orders.observability.logging import get_logger


def try_bind_order(candidate: OrderCandidate) -> Order | None:
    """Bind one candidate as an ``Order``; return ``None`` when it does not fit."""

    if not isinstance(candidate, Mapping):
        return None
    item = candidate.get("item")
    quantity = candidate.get("quantity")
    if not isinstance(item, str):
        return None
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        return None
    if not 0 <= quantity <= MAX_ORDER_QUANTITY:
        return None
    return Order(item=item, quantity=quantity)


def extract_orders(
    candidates: Iterable[OrderCandidate],
    *,
    logger: Any | None = None,
) -> tuple[Order, ...]:
    """Return every candidate that binds as an ``Order``, preserving input order."""

    orders: list[Order] = []
    skipped: list[int] = []
    for index, candidate in enumerate(candidates):
        order = try_bind_order(candidate)
        if order is None:
            skipped.append(index)
            continue
        orders.append(order)

    if skipped:
        log = logger if logger is not None else get_logger(__name__)
        log.debug(
            "manifest_order_candidate_skipped",
            skipped_count=len(skipped),
            skipped_indexes=skipped,
            kept_count=len(orders),
        )
    return tuple(orders)


def render_orders(orders: Iterable[Order]) -> str:
    """Render one ``item: quantity`` line per order."""

    return "\n".join(f"{order.item}: {order.quantity}" for order in orders)


__all__ = [
    "extract_orders",
    "render_orders",
    "try_bind_order",
]
