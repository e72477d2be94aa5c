"""
cargo-orders - manifest format decoder.

Purpose
- Turn raw manifest text in one of the supported grammars into a generic,
  format-neutral tree of mappings, lists, and scalars.

Functional requirements
- TOML via ``tomllib``, JSON via ``json``, YAML via PyYAML's safe loader.
- Reject text that is not well-formed for the declared grammar with
  ``ManifestSyntaxError``; never return a partial tree.
- Normalize native values outside the generic union (dates, times) so that
  nothing format-specific leaks past this module.

Non-functional requirements
- Pure transformation: no I/O, no shared state.
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Hashable, Mapping
from datetime import date, time
from enum import StrEnum
from pathlib import PurePath
from typing import Final

import yaml

from cargo_orders.errors import ManifestSyntaxError, UnsupportedFormatError

GenericScalar = str | int | float | bool | None
GenericValue = GenericScalar | list["GenericValue"] | dict[str, "GenericValue"]


class ManifestFormat(StrEnum):
    TOML = "toml"
    JSON = "json"
    YAML = "yaml"


_CONTENT_TYPES: Final[dict[str, ManifestFormat]] = {
    "application/toml": ManifestFormat.TOML,
    "application/json": ManifestFormat.JSON,
    "application/yaml": ManifestFormat.YAML,
    "application/x-yaml": ManifestFormat.YAML,
    "text/yaml": ManifestFormat.YAML,
}

_SUFFIXES: Final[dict[str, ManifestFormat]] = {
    ".toml": ManifestFormat.TOML,
    ".json": ManifestFormat.JSON,
    ".yaml": ManifestFormat.YAML,
    ".yml": ManifestFormat.YAML,
}

_YAML_MERGE_TAG: Final[str] = "tag:yaml.org,2002:merge"


class _StrictSafeLoader(yaml.SafeLoader):
    """Safe loader that rejects duplicate keys within one mapping."""

    def construct_mapping(
        self, node: yaml.MappingNode, deep: bool = False
    ) -> dict[Hashable, object]:
        seen: set[Hashable] = set()
        for key_node, _value_node in node.value:
            if key_node.tag == _YAML_MERGE_TAG:
                continue
            key = self.construct_object(key_node, deep=True)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def coerce_format(fmt: ManifestFormat | str) -> ManifestFormat:
    """Return ``fmt`` as a ``ManifestFormat``, accepting its string value."""

    if isinstance(fmt, ManifestFormat):
        return fmt
    if isinstance(fmt, str):
        normalized = fmt.strip().lower()
        if normalized == "yml":
            return ManifestFormat.YAML
        try:
            return ManifestFormat(normalized)
        except ValueError:
            pass
    expected = ", ".join(member.value for member in ManifestFormat)
    raise UnsupportedFormatError(
        f"unsupported manifest format {fmt!r}; expected one of: {expected}"
    )


def format_for_content_type(content_type: str) -> ManifestFormat:
    """Map a request content type (parameters allowed) to a manifest format."""

    media_type = content_type.split(";", 1)[0].strip().lower()
    try:
        return _CONTENT_TYPES[media_type]
    except KeyError:
        raise UnsupportedFormatError(f"unsupported content type {content_type!r}") from None


def format_for_path(path: str | PurePath) -> ManifestFormat:
    """Infer a manifest format from a file suffix."""

    suffix = PurePath(path).suffix.lower()
    try:
        return _SUFFIXES[suffix]
    except KeyError:
        raise UnsupportedFormatError(
            f"cannot infer manifest format from file name {str(path)!r}"
        ) from None


def decode(text: str, fmt: ManifestFormat | str) -> GenericValue:
    """Decode ``text`` in grammar ``fmt`` into a generic tree."""

    resolved = coerce_format(fmt)
    if not isinstance(text, str):
        raise ManifestSyntaxError(resolved, f"expected text, got {type(text).__name__}")

    try:
        if resolved is ManifestFormat.TOML:
            native: object = tomllib.loads(text)
        elif resolved is ManifestFormat.JSON:
            native = json.loads(text, parse_constant=_reject_json_constant)
        else:
            native = yaml.load(text, Loader=_StrictSafeLoader)  # noqa: S506 - safe loader subclass.
        return _to_generic(native, resolved, "<root>")
    except ManifestSyntaxError:
        raise
    except (tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ManifestSyntaxError(resolved, str(exc)) from exc
    except (ValueError, RecursionError) as exc:
        raise ManifestSyntaxError(resolved, f"{type(exc).__name__}: {exc}") from exc


def _reject_json_constant(name: str) -> float:
    raise ValueError(f"non-standard JSON constant {name}")


def _to_generic(value: object, fmt: ManifestFormat, path: str) -> GenericValue:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Mapping):
        out: dict[str, GenericValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise ManifestSyntaxError(
                    fmt, f"mapping key at {path} must be a string, got {type(key).__name__}"
                )
            out[key] = _to_generic(item, fmt, _join(path, key))
        return out
    if isinstance(value, (list, tuple)):
        return [_to_generic(item, fmt, f"{path}[{index}]") for index, item in enumerate(value)]
    # datetime subclasses date, so both are covered here.
    if isinstance(value, (date, time)):
        return value.isoformat()
    raise ManifestSyntaxError(fmt, f"unsupported value of type {type(value).__name__} at {path}")


def _join(path: str, key: str) -> str:
    if path == "<root>":
        return key
    return f"{path}.{key}"


__all__ = [
    "GenericScalar",
    "GenericValue",
    "ManifestFormat",
    "coerce_format",
    "decode",
    "format_for_content_type",
    "format_for_path",
]
