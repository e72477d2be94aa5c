"""Closed-set and numeric-string validators used by the manifest binder."""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Final

_DECIMAL_RE: Final[re.Pattern[str]] = re.compile(
    r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII
)


class Edition(StrEnum):
    E2015 = "2015"
    E2018 = "2018"
    E2021 = "2021"
    E2024 = "2024"


class Resolver(StrEnum):
    R1 = "1"
    R2 = "2"


def parse_edition(value: object) -> Edition | None:
    """Return the edition tag for an admissible edition string, else ``None``."""

    if not isinstance(value, str):
        return None
    try:
        return Edition(value)
    except ValueError:
        return None


def parse_resolver(value: object) -> Resolver | None:
    """Return the resolver tag for ``"1"`` or ``"2"``; numbers are not admissible."""

    if not isinstance(value, str):
        return None
    try:
        return Resolver(value)
    except ValueError:
        return None


def is_decimal_version(value: object) -> bool:
    """True when ``value`` is a string holding a finite decimal number like ``"1.83"``."""

    return isinstance(value, str) and _DECIMAL_RE.fullmatch(value) is not None


__all__ = [
    "Edition",
    "Resolver",
    "is_decimal_version",
    "parse_edition",
    "parse_resolver",
]
