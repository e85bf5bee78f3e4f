"""
Configuration Loader for the top.gg client.

This module loads client and webhook settings from a YAML file. Values
written as ``$NAME`` are read from the environment variable ``NAME``, and
environment variables fill in anything the file leaves out.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .settings import TopggSettings

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Exception raised when configuration loading fails."""

    pass


def resolve_env_vars(value: Any) -> Any:
    """
    Replace ``$NAME`` strings with the value of environment variable NAME.

    Raises:
        ConfigurationError: If a referenced variable is not set
    """
    if isinstance(value, dict):
        return {key: resolve_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]
    if isinstance(value, str) and value.startswith("$"):
        resolved = os.getenv(value[1:])
        if resolved is None:
            raise ConfigurationError(f"Environment variable {value[1:]} is not set")
        return resolved
    return value


class TopggConfigLoader:
    """Loader for top.gg client settings stored in a YAML file."""

    def __init__(self, config_path: str):
        """
        Initialize the configuration loader.

        Args:
            config_path: Path of the YAML configuration file
        """
        self.config_path = Path(config_path)

    def load(self) -> TopggSettings:
        """
        Load and validate the configuration.

        Returns:
            TopggSettings: Loaded and validated settings

        Raises:
            ConfigurationError: If configuration loading or validation fails
        """
        logger.info(f"Loading configuration: {self.config_path}")

        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigurationError("Configuration file must contain a mapping")

        try:
            settings = TopggSettings(**resolve_env_vars(config_data))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}")

        logger.info(f"Successfully loaded configuration: {self.config_path}")
        return settings

    def validate_client_config(self) -> TopggSettings:
        """
        Load the configuration and check that it can build an API client.

        Raises:
            ConfigurationError: If bot_id or token is missing
        """
        settings = self.load()
        if settings.bot_id is None:
            raise ConfigurationError("bot_id is required to use the API client")
        if not settings.token:
            raise ConfigurationError("token is required to use the API client")
        return settings

    def validate_webhook_config(self) -> TopggSettings:
        """
        Load the configuration and check that it can start a webhook listener.

        Raises:
            ConfigurationError: If the webhook secret is missing
        """
        settings = self.load()
        if not settings.webhook.secret:
            raise ConfigurationError("webhook.secret is required to start the listener")
        return settings
