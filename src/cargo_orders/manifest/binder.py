"""
cargo-orders - manifest model binder.

Purpose
- Bind a generic decoded tree into the typed ``Manifest`` model.

Functional requirements
- Strict on presence, lenient on absence: optional fields may be missing,
  but a present field of the wrong shape fails the whole manifest.
- Accept package metadata either at ``package.metadata`` or at the
  compatibility location ``package.metadata.package``.
- Report every failing field with a dotted path, not just the first one.

Non-functional requirements
- Deterministic issue ordering; no partial manifest is ever returned.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Final, TypeVar

from cargo_orders.constants import COMPAT_METADATA_KEY, EDITION_VALUES, RESOLVER_VALUES
from cargo_orders.errors import BindIssue, ManifestBindError
from cargo_orders.manifest.decoder import GenericValue
from cargo_orders.manifest.model import Manifest, Metadata, Package, Profile, Workspace
from cargo_orders.manifest.validators import (
    Edition,
    Resolver,
    is_decimal_version,
    parse_edition,
    parse_resolver,
)

T = TypeVar("T")

_RUST_VERSION_KEYS: Final[tuple[str, ...]] = ("rust_version", "rust-version")

_TYPE_NAMES: Final[tuple[tuple[type, str], ...]] = (
    (bool, "boolean"),
    (int, "integer"),
    (float, "float"),
    (str, "string"),
    (list, "array"),
    (dict, "table"),
)


@dataclass(frozen=True, slots=True)
class BindResult:
    """Binding result with the manifest when no issues were found."""

    manifest: Manifest | None
    issues: tuple[BindIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.manifest is not None and not self.issues


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[BindIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(BindIssue(path=path, message=message))

    def items(self) -> tuple[BindIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def check_manifest(tree: GenericValue) -> BindResult:
    """Bind ``tree`` and return structured issues instead of raising."""

    issues = _IssueCollector()
    manifest = _bind_root(tree, issues)
    if manifest is None or issues.has_issues:
        return BindResult(manifest=None, issues=issues.items())
    return BindResult(manifest=manifest, issues=())


def bind(tree: GenericValue) -> Manifest:
    """Bind ``tree`` into a ``Manifest`` or raise ``ManifestBindError``."""

    result = check_manifest(tree)
    if result.manifest is None:
        raise ManifestBindError(result.issues)
    return result.manifest


def _bind_root(tree: GenericValue, issues: _IssueCollector) -> Manifest | None:
    if not isinstance(tree, Mapping):
        issues.add("<root>", f"expected table, got {_type_name(tree)}")
        return None

    package = _required(tree, "package", "", issues, _bind_package)
    profile = _optional(tree, "profile", "", issues, _bind_profiles)
    workspace = _optional(tree, "workspace", "", issues, _bind_workspace)

    if package is None:
        return None
    return Manifest(package=package, profile=profile, workspace=workspace)


def _bind_package(value: object, path: str, issues: _IssueCollector) -> Package | None:
    table = _as_table(value, path, issues)
    if table is None:
        return None

    name = _required(table, "name", path, issues, _as_name)
    keywords = _optional(table, "keywords", path, issues, _as_str_list)
    metadata = _optional(table, "metadata", path, issues, _bind_metadata)
    edition = _optional(table, "edition", path, issues, _as_edition)
    rust_version = _bind_rust_version(table, path, issues)

    if name is None:
        return None
    return Package(
        name=name,
        keywords=keywords or (),
        metadata=metadata or Metadata(),
        edition=edition,
        rust_version=rust_version,
    )


def _bind_metadata(value: object, path: str, issues: _IssueCollector) -> Metadata | None:
    table = _as_table(value, path, issues)
    if table is None:
        return None

    # A table whose only key is a `package` table is the compatibility shape.
    nested = table.get(COMPAT_METADATA_KEY)
    if len(table) == 1 and isinstance(nested, Mapping):
        return _bind_metadata_table(nested, _join(path, COMPAT_METADATA_KEY), issues)
    return _bind_metadata_table(table, path, issues)


def _bind_metadata_table(
    table: Mapping[str, object], path: str, issues: _IssueCollector
) -> Metadata | None:
    raw_orders = table.get("orders")
    if raw_orders is None:
        return Metadata()
    orders_path = _join(path, "orders")
    if not isinstance(raw_orders, list):
        issues.add(orders_path, f"expected array, got {_type_name(raw_orders)}")
        return None
    return Metadata(orders=tuple(raw_orders))


def _bind_rust_version(
    table: Mapping[str, object], path: str, issues: _IssueCollector
) -> str | None:
    present = [key for key in _RUST_VERSION_KEYS if table.get(key) is not None]
    if not present:
        return None
    if len(present) > 1:
        issues.add(
            _join(path, present[0]),
            f"conflicts with {_join(path, present[1])!r}; set only one of them",
        )
        return None
    key = present[0]
    return _as_decimal_version(table[key], _join(path, key), issues)


def _bind_profiles(
    value: object, path: str, issues: _IssueCollector
) -> dict[str, Profile] | None:
    table = _as_table(value, path, issues)
    if table is None:
        return None

    profiles: dict[str, Profile] = {}
    for name in table:
        profile = _bind_profile(table[name], _join(path, name), issues)
        if profile is not None:
            profiles[name] = profile
    return profiles


def _bind_profile(value: object, path: str, issues: _IssueCollector) -> Profile | None:
    table = _as_table(value, path, issues)
    if table is None:
        return None
    incremental = _required(table, "incremental", path, issues, _as_bool)
    if incremental is None:
        return None
    return Profile(incremental=incremental)


def _bind_workspace(value: object, path: str, issues: _IssueCollector) -> Workspace | None:
    table = _as_table(value, path, issues)
    if table is None:
        return None
    resolver = _required(table, "resolver", path, issues, _as_resolver)
    if resolver is None:
        return None
    return Workspace(resolver=resolver)


def _required(
    table: Mapping[str, object],
    key: str,
    path: str,
    issues: _IssueCollector,
    binder: Callable[[object, str, _IssueCollector], T | None],
) -> T | None:
    field_path = _join(path, key)
    raw = table.get(key)
    if raw is None:
        issues.add(field_path, "missing required field")
        return None
    return binder(raw, field_path, issues)


def _optional(
    table: Mapping[str, object],
    key: str,
    path: str,
    issues: _IssueCollector,
    binder: Callable[[object, str, _IssueCollector], T | None],
) -> T | None:
    raw = table.get(key)
    if raw is None:
        return None
    return binder(raw, _join(path, key), issues)


def _as_table(value: object, path: str, issues: _IssueCollector) -> Mapping[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected table, got {_type_name(value)}")
        return None
    return value


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {_type_name(value)}")
        return None
    return value


def _as_name(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if not parsed.strip():
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {_type_name(value)}")
    return None


def _as_str_list(value: object, path: str, issues: _IssueCollector) -> tuple[str, ...] | None:
    if not isinstance(value, list):
        issues.add(path, f"expected array, got {_type_name(value)}")
        return None
    items: list[str] = []
    valid = True
    for index, item in enumerate(value):
        parsed = _as_str(item, f"{path}[{index}]", issues)
        if parsed is None:
            valid = False
            continue
        items.append(parsed)
    if not valid:
        return None
    return tuple(items)


def _as_edition(value: object, path: str, issues: _IssueCollector) -> Edition | None:
    if _as_str(value, path, issues) is None:
        return None
    edition = parse_edition(value)
    if edition is None:
        issues.add(path, f"invalid value {value!r}; expected one of: {', '.join(EDITION_VALUES)}")
    return edition


def _as_resolver(value: object, path: str, issues: _IssueCollector) -> Resolver | None:
    if _as_str(value, path, issues) is None:
        return None
    resolver = parse_resolver(value)
    if resolver is None:
        expected = ", ".join(repr(item) for item in RESOLVER_VALUES)
        issues.add(path, f"invalid value {value!r}; expected one of: {expected}")
    return resolver


def _as_decimal_version(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if not is_decimal_version(parsed):
        issues.add(path, f"invalid value {parsed!r}; expected a decimal number like '1.83'")
        return None
    return parsed


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    for kind, name in _TYPE_NAMES:
        if isinstance(value, kind):
            return name
    return type(value).__name__


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


__all__ = [
    "BindResult",
    "bind",
    "check_manifest",
]
