"""
Pydantic models for top.gg client configuration.

This module defines the rate limiting structures used by the API client to
stay inside the quotas published by top.gg.
"""

from enum import Enum

from pydantic import BaseModel, Field

BASE_URL = "https://top.gg/api"


class BucketScope(str, Enum):
    """How requests against ``/bots/*`` endpoints are grouped for limiting."""

    GLOBAL = "global"
    PER_BOT = "per_bot"


class RateLimit(BaseModel):
    """Quota for a single rate limit bucket."""

    max_requests: int = Field(
        default=100, gt=0, description="Requests allowed inside one window"
    )
    window_seconds: float = Field(
        default=60.0, gt=0, description="Length of the sliding window in seconds"
    )


class RateLimitPolicy(BaseModel):
    """Rate limiting configuration for a client instance."""

    global_limit: RateLimit = Field(
        default_factory=lambda: RateLimit(max_requests=100, window_seconds=60.0),
        description="Quota shared by every request",
    )
    bots_limit: RateLimit = Field(
        default_factory=lambda: RateLimit(max_requests=60, window_seconds=60.0),
        description="Stricter quota for /bots/* endpoints",
    )
    bot_scope: BucketScope = Field(
        default=BucketScope.GLOBAL,
        description="Share one /bots/* bucket or keep one per target bot",
    )
