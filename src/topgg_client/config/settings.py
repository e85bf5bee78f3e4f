"""Configuration management for the top.gg client."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..models.api_config import BASE_URL, RateLimitPolicy


class WebhookSettings(BaseModel):
    """Webhook listener configuration."""

    host: str = Field(
        default="0.0.0.0", description="Environment variable: TOPGG_WEBHOOK__HOST"
    )
    port: int = Field(
        default=5000,
        ge=0,
        le=65535,
        description="Environment variable: TOPGG_WEBHOOK__PORT",
    )
    path: str = Field(
        default="/dblwebhook", description="Environment variable: TOPGG_WEBHOOK__PATH"
    )
    secret: Optional[str] = Field(
        default=None, description="Environment variable: TOPGG_WEBHOOK__SECRET"
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v):
        """Validate webhook route."""
        if not v.startswith("/"):
            raise ValueError("Webhook path must start with '/'")
        return v


class TopggSettings(BaseSettings):
    """Main client settings."""

    bot_id: Optional[int] = Field(
        default=None, description="Environment variable: TOPGG_BOT_ID"
    )
    token: Optional[str] = Field(
        default=None, description="Environment variable: TOPGG_TOKEN"
    )
    base_url: str = Field(
        default=BASE_URL, description="Environment variable: TOPGG_BASE_URL"
    )
    timeout: float = Field(
        default=30.0, gt=0, description="Environment variable: TOPGG_TIMEOUT"
    )

    rate_limit: RateLimitPolicy = Field(default_factory=RateLimitPolicy)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)

    model_config = {
        "env_prefix": "TOPGG_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Global settings instance - initialized lazily
_settings: Optional[TopggSettings] = None


def get_settings() -> TopggSettings:
    """Get settings from the environment."""
    global _settings
    if _settings is None:
        _settings = TopggSettings()
    return _settings


def reload_settings() -> TopggSettings:
    """Reload settings from the environment."""
    global _settings
    _settings = TopggSettings()
    return _settings
