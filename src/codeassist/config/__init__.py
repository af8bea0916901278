"""Configuration management for codeassist.

Provides hierarchical YAML-based configuration with:
- System-level config (/etc/codeassist/ or %PROGRAMDATA%)
- User-level config (~/.config/codeassist/ or %APPDATA%)
- Project-level config ($workspace_root/.codeassist/)
- Environment variable overrides (highest priority)

Example usage:
    from codeassist.config import load_config

    config = load_config(workspace_root="/path/to/project")
    print(config.completion.max_pages)
"""

from codeassist.config.loader import (
    deep_merge,
    get_config,
    load_config,
    merge_configs,
    on_config_reload,
    reload_config,
    reset_config,
)
from codeassist.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)
from codeassist.config.schema import (
    CompletionConfig,
    Config,
    LoggingConfig,
    TransformConfig,
)

__all__ = [
    "Config",
    "load_config",
    "get_config",
    "reload_config",
    "reset_config",
    "on_config_reload",
    "deep_merge",
    "merge_configs",
    "CompletionConfig",
    "LoggingConfig",
    "TransformConfig",
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
    "get_project_config_path",
]
