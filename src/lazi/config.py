"""Settings loading for lazi.

Storage location resolution order:
    --storage-dir  >  LAZI_HOME  >  storageDir in the config file  >  ~/.lazi

The config file is ``$LAZI_CONFIG`` or ``~/.lazi-config.json``; a missing
file means defaults.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema

from lazi.application.batch import DEFAULT_SEPARATOR
from lazi.domain.exceptions import ConfigurationError
from lazi.domain.scripts import ScriptType
from lazi.schemas import validate_settings

logger = logging.getLogger(__name__)

HOME_ENV = "LAZI_HOME"
CONFIG_ENV = "LAZI_CONFIG"
ALLOW_CODE_ENV = "LAZI_ALLOW_CODE"
DEFAULT_CONFIG_NAME = ".lazi-config.json"
DEFAULT_STORAGE_NAME = ".lazi"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Resolved configuration; paths derive from ``storage_dir``."""

    storage_dir: Path
    default_script_type: ScriptType = ScriptType.POWERSHELL
    allow_code_generators: bool = False
    batch_separator: str = DEFAULT_SEPARATOR

    @property
    def log_path(self) -> Path:
        return self.storage_dir / ".lazi-log.txt"

    @property
    def counter_path(self) -> Path:
        return self.storage_dir / ".lazi-counter.txt"

    @property
    def workflows_dir(self) -> Path:
        return self.storage_dir / "workflows"

    @property
    def custom_nodes_path(self) -> Path:
        return self.storage_dir / ".lazi-custom-nodes.json"

    @property
    def registry_path(self) -> Path:
        return self.storage_dir / ".lazi.json"


def _config_path(env: Mapping[str, str]) -> Path:
    explicit = env.get(CONFIG_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / DEFAULT_CONFIG_NAME


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Load and validate the user config file.

    Returns:
        The parsed document, or {} when the file does not exist

    Raises:
        ConfigurationError: If the file is unreadable, not JSON or invalid
    """
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected object in {path}, got {type(data).__name__}")
    try:
        validate_settings(data)
    except jsonschema.ValidationError as e:
        raise ConfigurationError(f"Invalid config {path}: {e.message}") from e
    return data


def load_settings(
    storage_dir: str | Path | None = None,
    allow_code: bool | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """
    Resolve settings from CLI values, environment and config file.

    Args:
        storage_dir: Explicit storage directory (highest precedence)
        allow_code: Explicit generator permission; None defers to env/file
        env: Environment mapping (defaults to os.environ)

    Raises:
        ConfigurationError: If the config file or a configured value is invalid
    """
    env = os.environ if env is None else env
    config_path = _config_path(env)
    data = read_config_file(config_path)
    if data:
        logger.debug("Loaded config from %s", config_path)

    if storage_dir is not None:
        resolved_dir = Path(storage_dir)
    elif env.get(HOME_ENV):
        resolved_dir = Path(env[HOME_ENV])
    elif data.get("storageDir"):
        resolved_dir = Path(data["storageDir"])
    else:
        resolved_dir = Path.home() / DEFAULT_STORAGE_NAME

    try:
        script_type = ScriptType.parse(data.get("defaultScriptType", ScriptType.POWERSHELL.value))
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    if allow_code is None:
        flag = env.get(ALLOW_CODE_ENV)
        if flag is not None:
            allow_code = flag.strip().lower() in _TRUTHY
        else:
            allow_code = bool(data.get("allowCodeGenerators", False))

    return Settings(
        storage_dir=resolved_dir.expanduser(),
        default_script_type=script_type,
        allow_code_generators=allow_code,
        batch_separator=data.get("batchSeparator", DEFAULT_SEPARATOR),
    )
