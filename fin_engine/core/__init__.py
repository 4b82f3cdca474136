"""
FIN Engine - Core

Configuration, exceptions and logging shared by the codec packages.
"""

from .config import Config, ParseMode, get_config, load_config, set_config
from .exceptions import ConfigurationException, FinEngineException

__all__ = [
    "Config",
    "ParseMode",
    "get_config",
    "set_config",
    "load_config",
    "FinEngineException",
    "ConfigurationException",
]
