"""
Configuration store for the cloud command.

Every flag value is resolved through Settings, which layers four sources:
the command line, CLOUD_* environment variables, an optional YAML (or JSON)
config file, and the default registered with the flag.
"""

import argparse
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from errors import ValidationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "CLOUD_"
CONFIG_ENV_VAR = "CLOUD_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".cloud.yaml"

TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def normalize_key(key: str) -> str:
    """'client-id' and 'client_id' both become 'client_id'."""
    return key.strip().replace('-', '_').lower()


def env_var_name(key: str) -> str:
    return ENV_PREFIX + normalize_key(key).upper()


def resolve_config_path(path: str = None) -> Path | None:
    """
    Find the config file to load.

    Args:
        path: Explicit path from --config, if given

    Returns:
        Path to the config file, or None when no file is configured
    """
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH
    return None


def load_config(path: Path | None) -> dict[str, Any]:
    """
    Load configuration values from a YAML or JSON file.

    Args:
        path: Path to the config file, or None

    Returns:
        dict[str, Any]: Values keyed by normalized flag name

    Raises:
        ValidationError: If the file is missing or not a mapping
    """
    if path is None:
        return {}

    try:
        content = yaml.safe_load(path.read_text())
    except FileNotFoundError as e:
        raise ValidationError(f"Configuration file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid config file {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValidationError(f"Config file {path} must contain a mapping")

    logger.debug(f"Loaded configuration from {path}")
    return {normalize_key(str(k)): v for k, v in content.items()}


class Settings:
    """
    Layered lookup of flag values.

    Args:
        args: Parsed namespace. Flags are registered with argparse.SUPPRESS
            so only values given on the command line are present.
        defaults: Flag defaults keyed by flag name
        config: Values loaded from the config file
        environ: Environment mapping (defaults to os.environ)
    """

    def __init__(self, args: argparse.Namespace = None, defaults: dict[str, Any] = None,
                 config: dict[str, Any] = None, environ: dict[str, str] = None):
        self._args = vars(args) if args is not None else {}
        self._defaults = {normalize_key(k): v for k, v in (defaults or {}).items()}
        self._config = {normalize_key(k): v for k, v in (config or {}).items()}
        self._environ = os.environ if environ is None else environ

    def get(self, key: str) -> Any:
        """Return the value for key from the highest priority source that has it."""
        name = normalize_key(key)
        if name in self._args:
            return self._args[name]
        env_name = env_var_name(name)
        if env_name in self._environ:
            return self._environ[env_name]
        if name in self._config:
            return self._config[name]
        return self._defaults.get(name)

    def get_str(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            return ''
        return str(value)

    def get_bool(self, key: str) -> bool:
        value = self.get(key)
        if isinstance(value, str):
            return value.strip().lower() in TRUE_VALUES
        return bool(value)

    def get_list(self, key: str) -> list[str]:
        value = self.get(key)
        if value is None or value == '':
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(',') if item.strip()]
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        return [str(value)]
