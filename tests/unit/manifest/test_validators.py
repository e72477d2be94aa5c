"""Unit tests for manifest closed-set and numeric-string validators."""

from __future__ import annotations

import pytest

from cargo_orders.constants import EDITION_VALUES, RESOLVER_VALUES
from cargo_orders.manifest.validators import (
    Edition,
    Resolver,
    is_decimal_version,
    parse_edition,
    parse_resolver,
)


def test_enum_members_match_declared_value_sets() -> None:
    assert tuple(member.value for member in Edition) == EDITION_VALUES
    assert tuple(member.value for member in Resolver) == RESOLVER_VALUES


@pytest.mark.parametrize("value", ["2015", "2018", "2021", "2024"])
def test_parse_edition_accepts_known_literals(value: str) -> None:
    edition = parse_edition(value)

    assert edition is not None
    assert edition.value == value


@pytest.mark.parametrize("value", ["2016", "2024 ", "", 2021, None, ["2021"]])
def test_parse_edition_rejects_everything_else(value: object) -> None:
    assert parse_edition(value) is None


def test_parse_resolver_is_string_only() -> None:
    assert parse_resolver("1") is Resolver.R1
    assert parse_resolver("2") is Resolver.R2
    assert parse_resolver(1) is None
    assert parse_resolver(2.0) is None
    assert parse_resolver("3") is None


@pytest.mark.parametrize("value", ["1.83", "1", "0.5", ".5", "1.", "-2.0", "+3", "1e3", "2.5E-1"])
def test_decimal_versions_pass(value: str) -> None:
    assert is_decimal_version(value)


@pytest.mark.parametrize(
    "value", ["1.83.0", "abc", "", " 1.5", "1.5 ", "nan", "inf", "1_000", "0x10", "١", 1.83]
)
def test_non_decimal_versions_fail(value: object) -> None:
    assert not is_decimal_version(value)
