"""Configuration loading, schema, and defaults."""

from svnview.config.loader import ConfigError, load_config
from svnview.config.schema import OUTPUT_FORMATS, SvnViewConfig

__all__ = [
    "ConfigError",
    "OUTPUT_FORMATS",
    "SvnViewConfig",
    "load_config",
]
