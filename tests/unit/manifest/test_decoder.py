"""
cargo-orders - unit tests for the manifest format decoder

Purpose
- Validate that TOML, JSON, and YAML decode into the same generic tree and that
  malformed input is rejected with ``ManifestSyntaxError``.
"""

from __future__ import annotations

import pytest

from cargo_orders.errors import ManifestSyntaxError, UnsupportedFormatError
from cargo_orders.manifest.decoder import (
    ManifestFormat,
    coerce_format,
    decode,
    format_for_content_type,
    format_for_path,
)

_EXPECTED_TREE = {
    "package": {
        "name": "x",
        "keywords": ["Christmas 2024"],
        "metadata": {"orders": [{"item": "A", "quantity": 2}]},
    }
}

_TOML = """
[package]
name = "x"
keywords = ["Christmas 2024"]

[package.metadata]
orders = [{ item = "A", quantity = 2 }]
"""

_JSON = """
{"package": {"name": "x", "keywords": ["Christmas 2024"],
 "metadata": {"orders": [{"item": "A", "quantity": 2}]}}}
"""

_YAML = """
package:
  name: x
  keywords:
    - Christmas 2024
  metadata:
    orders:
      - item: A
        quantity: 2
"""


@pytest.mark.parametrize(
    ("text", "fmt"),
    [
        (_TOML, ManifestFormat.TOML),
        (_JSON, ManifestFormat.JSON),
        (_YAML, ManifestFormat.YAML),
    ],
)
def test_all_formats_decode_to_identical_tree(text: str, fmt: ManifestFormat) -> None:
    assert decode(text, fmt) == _EXPECTED_TREE


def test_format_may_be_given_as_string() -> None:
    assert decode('{"a": 1}', "json") == {"a": 1}
    assert coerce_format("YML") is ManifestFormat.YAML


def test_unknown_format_is_rejected_before_decoding() -> None:
    with pytest.raises(UnsupportedFormatError, match="xml"):
        decode("<a/>", "xml")


@pytest.mark.parametrize(
    ("text", "fmt"),
    [
        ('[package]\nname = "x', ManifestFormat.TOML),
        ('[package]\nname = "x"\nname = "y"\n', ManifestFormat.TOML),
        ("[package]\n[package]\n", ManifestFormat.TOML),
        ('{"package": {"name": "x"}', ManifestFormat.JSON),
        ("", ManifestFormat.JSON),
        ('{"quantity": NaN}', ManifestFormat.JSON),
        ("package: [unclosed\n", ManifestFormat.YAML),
        ("package:\n  name: x\n  name: y\n", ManifestFormat.YAML),
        ("a: 1\n---\nb: 2\n", ManifestFormat.YAML),
    ],
)
def test_malformed_input_raises_syntax_error(text: str, fmt: ManifestFormat) -> None:
    with pytest.raises(ManifestSyntaxError) as excinfo:
        decode(text, fmt)

    assert excinfo.value.format == fmt


def test_yaml_merge_keys_are_not_reported_as_duplicates() -> None:
    text = """
base: &base
  incremental: true
profile:
  release:
    <<: *base
    incremental: false
"""
    tree = decode(text, ManifestFormat.YAML)

    assert tree == {
        "base": {"incremental": True},
        "profile": {"release": {"incremental": False}},
    }


def test_yaml_non_string_keys_are_rejected() -> None:
    with pytest.raises(ManifestSyntaxError, match="must be a string"):
        decode("1: one\n", ManifestFormat.YAML)


def test_dates_are_normalized_to_iso_strings() -> None:
    toml_tree = decode("released = 2024-12-25\n", ManifestFormat.TOML)
    yaml_tree = decode("released: 2024-12-25\n", ManifestFormat.YAML)

    assert toml_tree == {"released": "2024-12-25"}
    assert yaml_tree == {"released": "2024-12-25"}


def test_empty_documents() -> None:
    assert decode("", ManifestFormat.TOML) == {}
    assert decode("", ManifestFormat.YAML) is None


def test_json_scalar_root_is_returned_as_is() -> None:
    assert decode("42", ManifestFormat.JSON) == 42


def test_yaml_unsafe_tags_are_rejected() -> None:
    with pytest.raises(ManifestSyntaxError):
        decode("!!python/object/apply:os.system ['true']\n", ManifestFormat.YAML)


@pytest.mark.parametrize(
    ("content_type", "expected"),
    [
        ("application/toml", ManifestFormat.TOML),
        ("application/json; charset=utf-8", ManifestFormat.JSON),
        ("Application/YAML", ManifestFormat.YAML),
        ("application/x-yaml", ManifestFormat.YAML),
    ],
)
def test_content_type_mapping(content_type: str, expected: ManifestFormat) -> None:
    assert format_for_content_type(content_type) is expected


def test_unknown_content_type_is_rejected() -> None:
    with pytest.raises(UnsupportedFormatError, match="text/plain"):
        format_for_content_type("text/plain")


def test_format_for_path_uses_suffix() -> None:
    assert format_for_path("Cargo.toml") is ManifestFormat.TOML
    assert format_for_path("manifest.YML") is ManifestFormat.YAML
    with pytest.raises(UnsupportedFormatError):
        format_for_path("Cargo.lock")
