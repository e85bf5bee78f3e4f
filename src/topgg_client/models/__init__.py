"""
Models module for the top.gg client.

Contains Pydantic models for API entities and configuration.
"""

from .api_config import BASE_URL, BucketScope, RateLimit, RateLimitPolicy
from .api_models import (
    Bot,
    BotStats,
    BotStatsUpdate,
    PartialUser,
    User,
    Vote,
    VoteCheck,
    VoteType,
)

__all__ = [
    "BASE_URL",
    "Bot",
    "BotStats",
    "BotStatsUpdate",
    "BucketScope",
    "PartialUser",
    "RateLimit",
    "RateLimitPolicy",
    "User",
    "Vote",
    "VoteCheck",
    "VoteType",
]
