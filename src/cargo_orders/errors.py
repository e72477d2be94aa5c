"""Typed exceptions raised by the manifest pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


class CargoOrdersError(Exception):
    """Base class for every error raised by ``cargo_orders``."""


class UnsupportedFormatError(CargoOrdersError, ValueError):
    """Raised when a format tag or content type names no known grammar."""


class ManifestSyntaxError(CargoOrdersError, ValueError):
    """Raised when manifest text is not well-formed for its declared grammar."""

    def __init__(self, fmt: str, detail: str) -> None:
        self.format = fmt
        self.detail = detail
        super().__init__(f"invalid {fmt.upper()}: {detail}")


@dataclass(frozen=True, slots=True)
class BindIssue:
    """Single structural failure found while binding a manifest."""

    path: str
    message: str


class ManifestBindError(CargoOrdersError, ValueError):
    """Raised when a well-formed tree does not satisfy the manifest model."""

    def __init__(self, issues: Sequence[BindIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown binding failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid manifest:\n{rendered}")


__all__ = [
    "BindIssue",
    "CargoOrdersError",
    "ManifestBindError",
    "ManifestSyntaxError",
    "UnsupportedFormatError",
]
