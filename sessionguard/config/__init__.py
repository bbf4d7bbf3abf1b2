"""Configuration module for sessionguard."""

from sessionguard.config.loader import get_config_path, load_config, save_config
from sessionguard.config.schema import Config, GuardConfig

__all__ = ["Config", "GuardConfig", "get_config_path", "load_config", "save_config"]
