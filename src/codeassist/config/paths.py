"""Where codeassist looks for ``config.yaml``.

==========  ==================================  ===============================
Level       Windows                             Unix
==========  ==================================  ===============================
system      %PROGRAMDATA%\\codeassist            /etc/codeassist
user        %APPDATA%\\codeassist                $XDG_CONFIG_HOME/codeassist
                                                (default ~/.config/codeassist)
project     <workspace>/.codeassist             <workspace>/.codeassist
==========  ==================================  ===============================
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

CONFIG_FILENAME = "config.yaml"
APP_NAME = "codeassist"
PROJECT_DIR = ".codeassist"


def _windows_dir(env_var: str) -> Path | None:
    base = os.environ.get(env_var)
    return Path(base) / APP_NAME if base else None


def get_system_config_path() -> Path | None:
    if sys.platform == "win32":
        directory = _windows_dir("PROGRAMDATA")
    else:
        directory = Path("/etc") / APP_NAME
    return directory / CONFIG_FILENAME if directory else None


def get_user_config_path() -> Path | None:
    if sys.platform == "win32":
        directory = _windows_dir("APPDATA")
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
        directory = Path(base) / APP_NAME
    return directory / CONFIG_FILENAME if directory else None


def get_project_config_path(workspace_root: str) -> Path:
    return Path(workspace_root) / PROJECT_DIR / CONFIG_FILENAME


def get_config_paths(workspace_root: str | None = None) -> list[Path]:
    """Config files from lowest to highest priority; they need not exist."""
    candidates = [get_system_config_path(), get_user_config_path()]
    if workspace_root:
        candidates.append(get_project_config_path(workspace_root))
    return [path for path in candidates if path is not None]
