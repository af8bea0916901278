"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Cascading merge of system, user and project files
- Environment variable overrides
- Conversion from dict to typed Config dataclasses
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import fields
from pathlib import Path
from typing import Any, TypeVar

import yaml

from codeassist.config.paths import get_config_paths
from codeassist.config.schema import (
    CompletionConfig,
    Config,
    LoggingConfig,
    TransformConfig,
)

# Module logger (may not be configured yet at import time)
_log = logging.getLogger("codeassist.config")

_cached_config: Config | None = None

_reload_callbacks: list[Callable[[Config], None]] = []

_T = TypeVar("_T")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Nested dicts merge recursively, lists and scalars are replaced, and None
    in ``override`` leaves the base value in place.
    """
    result = base.copy()
    for key, value in override.items():
        if value is None:
            continue
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge config dicts in order (later overrides earlier)."""
    result: dict[str, Any] = {}
    for config in configs:
        if config:
            result = deep_merge(result, config)
    return result


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Mapping stored in a YAML file; {} when the file is missing or unusable."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        _log.warning("Cannot read config %s: %s", path, e)
        return {}

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        _log.warning("Ignoring invalid YAML in %s: %s", path, e)
        return {}
    if data is not None and not isinstance(data, dict):
        _log.warning("Ignoring %s: top level is not a mapping", path)
    return data if isinstance(data, dict) else {}


def env_overrides() -> dict[str, Any]:
    """Build a config dict from environment variables."""
    overrides: dict[str, Any] = {}

    log_path = os.environ.get("CA_LOG")
    if log_path:
        overrides["logging"] = {"file": log_path}

    return overrides


SECTIONS: dict[str, type] = {
    "logging": LoggingConfig,
    "completion": CompletionConfig,
    "transform": TransformConfig,
}


def _build_section(cls: type[_T], data: Any) -> _T:
    """Instantiate a section dataclass from the known keys of ``data``.

    Values are coerced to the type of the field default; a value that does not
    coerce keeps the default.
    """
    if not isinstance(data, dict):
        return cls()

    defaults = cls()
    values: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data or data[f.name] is None:
            continue
        raw = data[f.name]
        default = getattr(defaults, f.name)
        if default is None or isinstance(raw, type(default)):
            values[f.name] = raw
            continue
        if isinstance(default, bool):
            _log.warning("Ignoring %s.%s=%r: expected true or false", cls.__name__, f.name, raw)
            continue
        try:
            values[f.name] = type(default)(raw)
        except (TypeError, ValueError):
            _log.warning("Ignoring %s.%s=%r", cls.__name__, f.name, raw)
    return cls(**values)


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert a merged dict to the typed Config dataclass."""
    sections = {name: _build_section(cls, data.get(name)) for name, cls in SECTIONS.items()}
    extra = {k: v for k, v in data.items() if k not in SECTIONS}
    return Config(**sections, extra=extra)


def load_config(workspace_root: str | None = None, reload: bool = False) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables
    2. Project config ($workspace_root/.codeassist/config.yaml)
    3. User config
    4. System config

    Args:
        workspace_root: Workspace directory for project-level config.
        reload: Force reload even if cached.

    Returns:
        Merged Config object.
    """
    global _cached_config

    if _cached_config is not None and not reload and workspace_root is None:
        return _cached_config

    configs: list[dict[str, Any]] = []
    for path in get_config_paths(workspace_root):
        config_data = load_yaml_file(path)
        if config_data:
            _log.debug("Loaded config from %s", path)
            configs.append(config_data)

    env_config = env_overrides()
    if env_config:
        configs.append(env_config)

    config = dict_to_config(merge_configs(*configs))

    # Only the global (workspace-less) config is cached
    if workspace_root is None:
        _cached_config = config

    return config


def get_config() -> Config:
    """Get the cached global config, loading it on first use."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Drop the cached config."""
    global _cached_config
    _cached_config = None


def reload_config(workspace_root: str | None = None) -> Config:
    """Reload config from files and notify callbacks."""
    config = load_config(workspace_root=workspace_root, reload=True)

    for callback in _reload_callbacks:
        try:
            callback(config)
        except Exception as e:
            _log.warning("Config reload callback error: %s", e)

    return config


def on_config_reload(callback: Callable[[Config], None]) -> Callable[[], None]:
    """Register a reload callback; returns a function that unregisters it."""
    _reload_callbacks.append(callback)

    def unregister() -> None:
        if callback in _reload_callbacks:
            _reload_callbacks.remove(callback)

    return unregister
