"""
Configuration module for the top.gg client.

Contains configuration loading and validation utilities.
"""

from .config_loader import ConfigurationError, TopggConfigLoader, resolve_env_vars
from .settings import TopggSettings, WebhookSettings, get_settings, reload_settings

__all__ = [
    "TopggConfigLoader",
    "ConfigurationError",
    "resolve_env_vars",
    "TopggSettings",
    "WebhookSettings",
    "get_settings",
    "reload_settings",
]
