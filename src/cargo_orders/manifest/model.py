"""Typed manifest model and the three-way validation outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from cargo_orders.manifest.decoder import GenericValue
    from cargo_orders.manifest.validators import Edition, Resolver

OrderCandidate: TypeAlias = "GenericValue"


@dataclass(frozen=True, slots=True)
class Order:
    item: str
    quantity: int

    def to_dict(self) -> dict[str, object]:
        return {"item": self.item, "quantity": self.quantity}


@dataclass(frozen=True, slots=True)
class Metadata:
    """Free-form package metadata; ``orders`` are kept unvalidated until extraction."""

    orders: tuple[OrderCandidate, ...] = ()


@dataclass(frozen=True, slots=True)
class Package:
    name: str
    keywords: tuple[str, ...] = ()
    metadata: Metadata = field(default_factory=Metadata)
    edition: Edition | None = None
    rust_version: str | None = None


@dataclass(frozen=True, slots=True)
class Profile:
    incremental: bool


@dataclass(frozen=True, slots=True)
class Workspace:
    resolver: Resolver


@dataclass(frozen=True, slots=True)
class Manifest:
    package: Package
    profile: dict[str, Profile] | None = None
    workspace: Workspace | None = None


@dataclass(frozen=True, slots=True)
class Orders:
    """Keyword present; ``orders`` holds every well-formed order in manifest order."""

    orders: tuple[Order, ...] = ()


@dataclass(frozen=True, slots=True)
class KeywordMissing:
    """Manifest is valid but does not carry the gate keyword."""


@dataclass(frozen=True, slots=True)
class InvalidManifest:
    """Manifest text failed to decode or bind."""


CargoOrders: TypeAlias = Orders | KeywordMissing | InvalidManifest


__all__ = [
    "CargoOrders",
    "InvalidManifest",
    "KeywordMissing",
    "Manifest",
    "Metadata",
    "Order",
    "OrderCandidate",
    "Orders",
    "Package",
    "Profile",
    "Workspace",
]
