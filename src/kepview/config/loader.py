"""
kepview: runtime config loader.

Purpose
- Build the effective config from defaults, ``kepview.toml``, ``KEPVIEW_*``
  environment variables and CLI overrides, later sources winning.

Functional requirements
- A missing default config file is not an error; a missing explicit one is.
- Relative paths are resolved against the directory of the config file.
- The result is always validated by ``assert_valid_config``.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Literal

from kepview.config.schema import PATH_FIELDS, assert_valid_config, default_config, merge_config

DEFAULT_CONFIG_FILE: Final[str] = "kepview.toml"
ENV_PREFIX: Final[str] = "KEPVIEW_"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})

EnvKind = Literal["str", "bool", "list"]

# Settings readable from the environment; meta.schema_version is file-only.
_ENV_BINDINGS: Final[dict[tuple[str, str], EnvKind]] = {
    ("discovery", "root"): "str",
    ("discovery", "include_suffixes"): "list",
    ("discovery", "exclude_patterns"): "list",
    ("output", "sort"): "str",
    ("output", "format"): "str",
    ("observability", "log_level"): "str",
    ("observability", "log_dir"): "str",
    ("observability", "log_to_stderr"): "bool",
}


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load effective config with precedence CLI > env > file > defaults."""

    path = (
        Path.cwd() / DEFAULT_CONFIG_FILE
        if config_path is None
        else Path(config_path).expanduser()
    ).resolve()

    from_file = assert_valid_config(
        merge_config(default_config(), _read_toml(path, required=config_path is not None))
    )
    layered = merge_config(from_file, env_overrides(os.environ if environ is None else environ))
    layered = merge_config(layered, _nest_dotted(cli_overrides or {}))
    assert_valid_config(layered)
    return assert_valid_config(normalize_paths(layered, base_dir=path.parent))


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``KEPVIEW_<SECTION>_<KEY>`` values as a nested override mapping."""

    overrides: dict[str, Any] = {}
    for (section, key), kind in _ENV_BINDINGS.items():
        name = f"{ENV_PREFIX}{section}_{key}".upper()
        raw = environ.get(name)
        if raw is None:
            continue
        overrides.setdefault(section, {})[key] = _coerce(raw.strip(), kind, name)
    return overrides


def normalize_paths(config: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Resolve relative path fields against ``base_dir``; empty values stay empty."""

    normalized = merge_config({}, config)
    for section, key in PATH_FIELDS:
        table = normalized.get(section)
        if not isinstance(table, dict):
            continue
        raw = table.get(key)
        if isinstance(raw, str) and raw:
            candidate = Path(os.path.expandvars(raw)).expanduser()
            if not candidate.is_absolute():
                candidate = base_dir / candidate
            table[key] = Path(os.path.normpath(candidate)).as_posix()
    return normalized


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Return a deterministic JSON rendering of ``config``."""

    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _read_toml(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _coerce(value: str, kind: EnvKind, name: str) -> object:
    if kind == "list":
        return [item.strip() for item in value.split(",") if item.strip()]
    if kind == "bool":
        lowered = value.lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
        raise ConfigLoadError(f"{name} must be a boolean (true/false/1/0/yes/no/on/off)")
    return value


def _nest_dotted(overrides: Mapping[str, object]) -> dict[str, Any]:
    nested: dict[str, Any] = {}
    for dotted, value in overrides.items():
        parts = [part for part in dotted.split(".") if part]
        if not parts:
            raise ConfigLoadError(f"invalid CLI override key {dotted!r}")
        cursor = nested
        for part in parts[:-1]:
            cursor = cursor.setdefault(part, {})
        cursor[parts[-1]] = value
    return nested


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "env_overrides",
    "load_config",
    "normalize_paths",
]
