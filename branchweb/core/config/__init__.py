"""Configuration package for the Branch client.

This package provides Pydantic configuration models and loading utilities.
"""

from branchweb.core.config.loader import (
    check_unexpanded_vars,
    expand_env_vars,
    find_unexpanded_vars,
    load_config,
    merge_configs,
)
from branchweb.core.config.models import (
    ApiConfig,
    Config,
    LoggingConfig,
    StorageConfig,
)

__all__ = [
    # Models
    "ApiConfig",
    "Config",
    "LoggingConfig",
    "StorageConfig",
    # Loaders
    "check_unexpanded_vars",
    "expand_env_vars",
    "find_unexpanded_vars",
    "load_config",
    "merge_configs",
]
