"""Configuration file loading."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from scriptcli.errors import ConfigError
from scriptcli.models.config import CliConfig


logger = logging.getLogger(__name__)

CONFIG_ENV = "SCRIPTCLI_CONFIG"
SOCKET_ENV = "INCUS_SOCKET"


def default_config_path() -> Path:
    """Return the config path from the environment or the user config dir."""
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path)
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "scriptcli" / "config.yaml"


def _read_yaml(file_path: Path) -> Dict[str, Any]:
    """Read and parse a YAML file."""
    yaml = YAML(typ="safe")
    data = yaml.load(file_path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {file_path} must contain a mapping")
    return data


def load_config(path: Optional[Path] = None, **overrides: Any) -> CliConfig:
    """Load configuration, applying environment and command line overrides.

    Precedence, lowest first: built-in defaults, the YAML file, the
    ``INCUS_SOCKET`` environment variable, then non-None ``overrides``.
    """
    config_file = Path(path) if path else default_config_path()
    data: Dict[str, Any] = {}

    if config_file.exists():
        try:
            data = _read_yaml(config_file)
            logger.debug(f"Loaded config: {config_file}")
        except (OSError, YAMLError) as e:
            raise ConfigError(f"Cannot read config file {config_file}: {e}") from e
    elif path:
        raise ConfigError(f"Config file not found: {config_file}")

    socket_env = os.environ.get(SOCKET_ENV)
    if socket_env:
        data["socket_path"] = socket_env

    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return CliConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
