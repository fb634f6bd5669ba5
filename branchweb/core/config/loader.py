"""Configuration loading.

Reads the YAML config file, substitutes ${VAR} references from the
environment and layers command-line overrides on top.
"""

import copy
import os
import re
from pathlib import Path
from typing import Any

import yaml

from branchweb.core.config.models import Config

_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(obj: Any) -> Any:
    """Substitute ${VAR} references from os.environ.

    Strings are expanded directly; dicts and lists are walked. Unknown
    variables are left in place so ``check_unexpanded_vars`` can report them.

    Examples:
        >>> os.environ['BRANCH_APP_ID'] = '5680621892404085'
        >>> expand_env_vars({'app_id': '${BRANCH_APP_ID}', 'api': {'timeout': 5}})
        {'app_id': '5680621892404085', 'api': {'timeout': 5}}
    """
    if isinstance(obj, str):
        return _VAR_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), obj)
    if isinstance(obj, dict):
        return {key: expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [expand_env_vars(item) for item in obj]
    return obj


def find_unexpanded_vars(obj: Any, key: str = "") -> list[str]:
    """List ``key.path: ${VAR}`` entries for references left unexpanded."""
    if isinstance(obj, str):
        return [f"{key or '<root>'}: ${{{name}}}" for name in _VAR_PATTERN.findall(obj)]
    if isinstance(obj, dict):
        return [
            entry
            for name, value in obj.items()
            for entry in find_unexpanded_vars(value, f"{key}.{name}" if key else str(name))
        ]
    if isinstance(obj, list):
        return [
            entry
            for index, item in enumerate(obj)
            for entry in find_unexpanded_vars(item, f"{key}[{index}]")
        ]
    return []


def check_unexpanded_vars(data: Any, source: str) -> None:
    """Fail if any ${VAR} reference survived expansion.

    Raises:
        ValueError: Naming each offending config key and variable.
    """
    unresolved = find_unexpanded_vars(data)
    if unresolved:
        raise ValueError(
            f"Unresolved environment variable(s) in {source}: {', '.join(unresolved)}. "
            f"Set these variables or remove the ${{VAR}} references."
        )


def merge_configs(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Deep merge overrides over a base configuration.

    None override values are skipped, so an unset command-line flag keeps
    the file value.

    Examples:
        >>> merge_configs({'app_id': '1', 'api': {'timeout': 10}}, {'app_id': None, 'api': {'timeout': 3}})
        {'app_id': '1', 'api': {'timeout': 3}}
    """
    result = copy.deepcopy(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        elif isinstance(value, dict):
            result[key] = merge_configs({}, value)
        else:
            result[key] = value
    return result


def load_config(path: Path | str | None = None, overrides: dict[str, Any] | None = None) -> Config:
    """Load configuration from a YAML file with environment variable expansion.

    Args:
        path: Path to the YAML configuration file. None means defaults only.
        overrides: Values merged over the file contents before validation.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the YAML is malformed.
        ValueError: If an environment variable reference cannot be resolved.
    """
    data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with config_path.open() as f:
            data = expand_env_vars(yaml.safe_load(f) or {})
        check_unexpanded_vars(data, source=str(config_path))

    return Config(**merge_configs(data, overrides or {}))
