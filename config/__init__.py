"""Configuration management package for the chat gateway"""

from .loader import ConfigLoader, get_config_loader, load_model_catalog

__all__ = [
    "ConfigLoader",
    "get_config_loader",
    "load_model_catalog",
]
