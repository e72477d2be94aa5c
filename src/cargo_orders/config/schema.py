"""
cargo-orders - configuration schema and validation.

Purpose
- Describe every ``cargo_orders.toml`` field once, as a table of ``ConfigField``
  entries, and validate payloads against it.

Functional requirements
- Structured issues (dotted field path + message), all reported at once.
- Unknown sections and keys are rejected so typos surface immediately.
- ``meta.schema_version`` mismatches carry migration guidance.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal

from cargo_orders.constants import CONFIG_SCHEMA_VERSION, GATE_KEYWORD

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
FORMAT_NAMES: Final[tuple[str, ...]] = ("toml", "json", "yaml")

FieldKind = Literal["text", "path", "choice", "flag", "version"]


@dataclass(frozen=True, slots=True)
class ConfigField:
    """One scalar setting: its kind, default, and admissible values for ``choice``."""

    kind: FieldKind
    default: str | int | bool
    choices: tuple[str, ...] = ()


CONFIG_FIELDS: Final[dict[str, dict[str, ConfigField]]] = {
    "meta": {
        "schema_version": ConfigField("version", CONFIG_SCHEMA_VERSION),
    },
    "gate": {
        "keyword": ConfigField("text", GATE_KEYWORD),
    },
    "decoding": {
        "default_format": ConfigField("choice", "toml", FORMAT_NAMES),
    },
    "observability": {
        "log_level": ConfigField("choice", "INFO", LOG_LEVELS),
        "log_dir": ConfigField("path", "logs/"),
        "log_file_enabled": ConfigField("flag", False),
        "log_to_stderr": ConfigField("flag", False),
    },
}

DEFAULT_CONFIG: Final[dict[str, dict[str, Any]]] = {
    section: {key: spec.default for key, spec in fields.items()}
    for section, fields in CONFIG_FIELDS.items()
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Normalized config when valid, otherwise ``None`` plus the issues."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised by ``assert_valid_config`` with every issue found."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        lines = [f"- {issue.path}: {issue.message}" for issue in self.issues]
        super().__init__("invalid config:\n" + ("\n".join(lines) or "- <root>: unknown failure"))


def default_config() -> dict[str, dict[str, Any]]:
    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    if found_version < CONFIG_SCHEMA_VERSION:
        return (
            f"schema version {found_version} is older than supported {CONFIG_SCHEMA_VERSION}; "
            "upgrade cargo_orders.toml to the current schema"
        )
    if found_version > CONFIG_SCHEMA_VERSION:
        return (
            f"schema version {found_version} is newer than supported {CONFIG_SCHEMA_VERSION}; "
            "upgrade the cargo-orders runtime"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto a copy of ``base``; neither input is modified."""

    merged = {key: copy.deepcopy(value) for key, value in base.items()}
    for key, value in overlay.items():
        if isinstance(value, Mapping):
            current = merged.get(key)
            merged[key] = merge_config(current if isinstance(current, Mapping) else {}, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config(config: object) -> ConfigValidationResult:
    """Check ``config`` against ``CONFIG_FIELDS`` and return a normalized copy or issues."""

    if not isinstance(config, Mapping):
        issue = ConfigValidationIssue("<root>", f"expected object, got {type(config).__name__}")
        return ConfigValidationResult(config=None, issues=(issue,))

    issues: list[ConfigValidationIssue] = []
    issues.extend(_key_issues(config, CONFIG_FIELDS, prefix=""))

    normalized: dict[str, Any] = {}
    for section in sorted(CONFIG_FIELDS):
        payload = config.get(section)
        if payload is None:
            continue
        if not isinstance(payload, Mapping):
            issues.append(
                ConfigValidationIssue(section, f"expected object, got {type(payload).__name__}")
            )
            continue
        fields = CONFIG_FIELDS[section]
        issues.extend(_key_issues(payload, fields, prefix=section))
        values: dict[str, Any] = {}
        for key in sorted(fields.keys() & payload.keys()):
            path = f"{section}.{key}"
            value, problem = _check_value(fields[key], payload[key])
            if problem is not None:
                issues.append(ConfigValidationIssue(path, problem))
                continue
            values[key] = value
        normalized[section] = values

    version = normalized.get("meta", {}).get("schema_version")
    if version is not None and version != CONFIG_SCHEMA_VERSION:
        issues.append(ConfigValidationIssue("meta.schema_version", migration_guidance(version)))

    if issues:
        return ConfigValidationResult(config=None, issues=tuple(issues))
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: object) -> dict[str, Any]:
    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _key_issues(
    payload: Mapping[str, Any], expected: Mapping[str, object], *, prefix: str
) -> list[ConfigValidationIssue]:
    found: list[ConfigValidationIssue] = []
    for key in sorted(payload.keys() - expected.keys()):
        found.append(ConfigValidationIssue(_join(prefix, key), "unknown field"))
    for key in sorted(expected.keys() - payload.keys()):
        found.append(ConfigValidationIssue(_join(prefix, key), "missing required field"))
    return found


def _join(prefix: str, key: str) -> str:
    return f"{prefix}.{key}" if prefix else key


def _check_value(spec: ConfigField, value: object) -> tuple[object, str | None]:
    """Return ``(normalized, None)`` or ``(None, message)`` for one field value."""

    if spec.kind == "flag":
        if isinstance(value, bool):
            return value, None
        return None, f"expected boolean, got {type(value).__name__}"

    if spec.kind == "version":
        if isinstance(value, bool) or not isinstance(value, int):
            return None, f"expected integer, got {type(value).__name__}"
        if value < 1:
            return None, "must be >= 1"
        return value, None

    if not isinstance(value, str):
        return None, f"expected string, got {type(value).__name__}"
    text = value.strip()
    if not text:
        return None, "must not be empty"
    if spec.kind == "choice" and text not in spec.choices:
        return None, f"invalid value {text!r}; expected one of: {', '.join(sorted(spec.choices))}"
    if spec.kind == "path" and "\x00" in text:
        return None, "must not contain NUL bytes"
    return text, None


__all__ = [
    "CONFIG_FIELDS",
    "ConfigField",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "FORMAT_NAMES",
    "LOG_LEVELS",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
