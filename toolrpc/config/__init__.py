"""Configuration module for toolrpc."""

from toolrpc.config.loader import load_config, get_config_path, save_config
from toolrpc.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path", "save_config"]
