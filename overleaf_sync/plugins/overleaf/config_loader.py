"""Configuration loading and validation for the Overleaf plugin.

Loads <config_dir>/config.json if it exists, applies environment overrides,
and otherwise uses default configuration. The file uses camelCase keys
because it is shared with the external Overleaf scripts.
"""

import dataclasses
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


DEFAULT_SERVER_URL = "https://www.overleaf.com"
DEFAULT_CONFIG_DIRNAME = ".overleaf-zed"
DEFAULT_EXTENSION_DIR = Path(".config") / "zed" / "extensions" / "overleaf-sync"
CONFIG_FILENAME = "config.json"
CREDENTIALS_FILENAME = "credentials.json"

# Environment variables, applied on top of the config file
ENV_CONFIG_PATH = "OVERLEAF_SYNC_CONFIG"
ENV_OVERRIDES = {
    "OVERLEAF_CONFIG_DIR": "config_dir",
    "OVERLEAF_EXTENSION_DIR": "extension_dir",
    "OVERLEAF_PROJECTS_DIR": "projects_dir",
    "OVERLEAF_SERVER_URL": "server_url",
}

# config.json key -> OverleafConfig field
FILE_KEYS = {
    "serverUrl": "server_url",
    "configDir": "config_dir",
    "extensionDir": "extension_dir",
    "projectsDir": "projects_dir",
    "nodePath": "node_path",
    "shellPath": "shell_path",
    "listScript": "list_script",
    "downloadScript": "download_script",
    "compileScript": "compile_script",
    "serverScript": "server_script",
    "extraPaths": "extra_paths",
    "timeout": "timeout",
}

PATH_FIELDS = ("config_dir", "extension_dir", "projects_dir")


def _home() -> Path:
    return Path.home()


@dataclass
class OverleafConfig:
    """Explicit configuration passed into every plugin component."""

    server_url: str = DEFAULT_SERVER_URL
    config_dir: Path = field(default_factory=lambda: _home() / DEFAULT_CONFIG_DIRNAME)
    extension_dir: Path = field(default_factory=lambda: _home() / DEFAULT_EXTENSION_DIR)
    projects_dir: Optional[Path] = None

    node_path: str = "node"
    shell_path: str = "bash"
    list_script: str = "scripts/list-projects.js"
    download_script: str = "download-projects.js"
    compile_script: str = "compile.sh"
    server_script: str = "server/index.js"

    extra_paths: List[str] = field(default_factory=list)
    timeout: Optional[float] = None

    @property
    def credentials_path(self) -> Path:
        return self.config_dir / CREDENTIALS_FILENAME

    @property
    def resolved_projects_dir(self) -> Path:
        """Directory downloads land in (defaults to <config_dir>/projects)."""
        if self.projects_dir is not None:
            return self.projects_dir
        return self.config_dir / "projects"

    def with_overrides(self, overrides: Dict[str, Any]) -> "OverleafConfig":
        """Return a copy with snake_case field overrides applied.

        Unknown keys are ignored so plugin config dicts can carry other
        settings (e.g. config_path).
        """
        names = {f.name for f in dataclasses.fields(self)}
        changes = {k: v for k, v in overrides.items() if k in names}
        for key in PATH_FIELDS:
            if changes.get(key) is not None:
                changes[key] = Path(changes[key]).expanduser()
        return dataclasses.replace(self, **changes)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Configuration validation failed: {'; '.join(errors)}")


def validate_config(config: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """Validate an Overleaf configuration dict.

    Args:
        config: Raw configuration dict loaded from JSON

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors: List[str] = []

    if not isinstance(config, dict):
        return False, ["Configuration must be a JSON object"]

    for key, value in config.items():
        if key not in FILE_KEYS:
            # Keys owned by the external scripts (email, gitToken, ...)
            continue
        if key == "extraPaths":
            if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
                errors.append("'extraPaths' must be an array of strings")
        elif key == "timeout":
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0
            ):
                errors.append("'timeout' must be a positive number")
        elif not isinstance(value, str) or not value:
            errors.append(f"'{key}' must be a non-empty string")

    server_url = config.get("serverUrl")
    if isinstance(server_url, str) and server_url and not server_url.startswith(("http://", "https://")):
        errors.append(f"Invalid serverUrl: {server_url}. Must start with http:// or https://")

    return len(errors) == 0, errors


def _parse_config(data: Dict[str, Any], base: OverleafConfig) -> OverleafConfig:
    """Map camelCase file keys onto an OverleafConfig."""
    overrides = {FILE_KEYS[k]: v for k, v in data.items() if k in FILE_KEYS}
    return base.with_overrides(overrides)


def _apply_env(config: OverleafConfig) -> OverleafConfig:
    overrides = {
        field_name: os.environ[env_name]
        for env_name, field_name in ENV_OVERRIDES.items()
        if os.environ.get(env_name)
    }
    return config.with_overrides(overrides)


def load_overleaf_config(
    config_path: Optional[str] = None,
    base_path: Optional[str] = None
) -> OverleafConfig:
    """Load Overleaf configuration.

    Searches for config file in this order:
    1. Explicit config_path if provided
    2. OVERLEAF_SYNC_CONFIG environment variable
    3. config.json in the config directory (OVERLEAF_CONFIG_DIR or ~/.overleaf-zed)

    Environment overrides (OVERLEAF_CONFIG_DIR, OVERLEAF_EXTENSION_DIR,
    OVERLEAF_PROJECTS_DIR, OVERLEAF_SERVER_URL) win over the file.

    Args:
        config_path: Optional explicit path to config file.
        base_path: Base directory for a relative config_path (default: cwd).

    Returns:
        OverleafConfig with loaded or default values.

    Raises:
        ConfigValidationError: If the config file has invalid values.

    Example config file (~/.overleaf-zed/config.json):
    ```json
    {
        "serverUrl": "https://www.overleaf.com",
        "projectsDir": "/home/me/Documents/overleaf",
        "extraPaths": ["/opt/homebrew/bin"]
    }
    ```
    """
    base_path = base_path or os.getcwd()
    config = _apply_env(OverleafConfig())

    if config_path:
        file_path = Path(config_path).expanduser()
    elif os.environ.get(ENV_CONFIG_PATH):
        file_path = Path(os.environ[ENV_CONFIG_PATH]).expanduser()
    else:
        file_path = config.config_dir / CONFIG_FILENAME
    if not file_path.is_absolute():
        file_path = Path(base_path) / file_path

    if not file_path.exists():
        return config

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load %s: %s", file_path, e)
        return config

    is_valid, errors = validate_config(data)
    if not is_valid:
        raise ConfigValidationError(errors)

    logger.debug("Loaded Overleaf config from %s", file_path)
    return _apply_env(_parse_config(data, config))
