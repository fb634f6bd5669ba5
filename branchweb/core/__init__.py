"""Core functionality shared across the Branch client: config, logging, callbacks."""

from branchweb.core.callbacks import Callback, deliver
from branchweb.core.config import Config, load_config
from branchweb.core.logging import setup_logging

__all__ = ["Callback", "Config", "deliver", "load_config", "setup_logging"]
