"""
cargo-orders - runtime config loader.

Layers, lowest to highest: built-in defaults, ``cargo_orders.toml``,
``CARGO_ORDERS_<SECTION>_<KEY>`` environment variables, CLI overrides
given as dotted keys (``{"gate.keyword": "..."}``).
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from cargo_orders.config.schema import (
    CONFIG_FIELDS,
    ConfigField,
    assert_valid_config,
    default_config,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "cargo_orders.toml"
ENV_PREFIX: Final[str] = "CARGO_ORDERS_"

_TRUE_WORDS: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


class ConfigLoadError(ValueError):
    """Config file unreadable, or an override could not be applied."""


def env_var_name(section: str, key: str) -> str:
    return f"{ENV_PREFIX}{section}_{key}".upper()


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return the validated effective config.

    Without ``config_path`` the file is optional and looked up in the working
    directory; an explicit path must exist.
    """

    if config_path is None:
        path = (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    else:
        path = Path(config_path).expanduser().resolve()

    config: dict[str, Any] = default_config()
    for layer in (
        _file_layer(path, required=config_path is not None),
        _env_layer(os.environ if environ is None else environ),
        _cli_layer(cli_overrides or {}),
    ):
        config = merge_config(config, layer)

    return normalize_paths(assert_valid_config(config), base_dir=path.parent)


def normalize_paths(config: Mapping[str, Any], *, base_dir: Path) -> dict[str, Any]:
    """Anchor ``path`` fields at ``base_dir`` unless they are already absolute."""

    normalized = merge_config({}, config)
    for section, fields in CONFIG_FIELDS.items():
        values = normalized.get(section)
        if not isinstance(values, dict):
            continue
        for key, spec in fields.items():
            raw = values.get(key)
            if spec.kind == "path" and isinstance(raw, str):
                values[key] = _anchor(raw, base_dir)
    return normalized


def dump_effective_config(config: Mapping[str, object]) -> str:
    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _anchor(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(candidate)).as_posix()


def _file_layer(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.is_file():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _env_layer(environ: Mapping[str, str]) -> dict[str, Any]:
    layer: dict[str, dict[str, object]] = {}
    for section, fields in sorted(CONFIG_FIELDS.items()):
        for key, spec in sorted(fields.items()):
            name = env_var_name(section, key)
            raw = environ.get(name)
            if raw is not None:
                layer.setdefault(section, {})[key] = _parse_env(name, spec, raw.strip())
    return layer


def _parse_env(name: str, spec: ConfigField, raw: str) -> object:
    if spec.kind == "flag":
        word = raw.lower()
        if word in _TRUE_WORDS or word in _FALSE_WORDS:
            return word in _TRUE_WORDS
        raise ConfigLoadError(f"{name} must be a boolean (true/false/1/0/yes/no/on/off)")
    if spec.kind == "version":
        try:
            return int(raw)
        except ValueError as exc:
            raise ConfigLoadError(f"{name} must be an integer") from exc
    return raw


def _cli_layer(overrides: Mapping[str, object]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for dotted, value in overrides.items():
        parts = [part for part in dotted.split(".") if part]
        if not parts:
            raise ConfigLoadError(f"invalid CLI override key {dotted!r}")
        node = layer
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return layer


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "env_var_name",
    "load_config",
    "normalize_paths",
]
