"""
top.gg Client Package.

Typed access to the top.gg bot listing API with client-side rate limiting,
plus a webhook listener that turns vote callbacks into an event stream.
"""

__version__ = "1.0.0"
__description__ = "top.gg API client and vote webhook listener"

from .clients.api_client import (
    ApiClientError,
    ApiPayloadError,
    ApiStatusError,
    ApiTransportError,
    TopggClient,
)
from .clients.rate_limiter import RateLimiter
from .models.api_config import BucketScope, RateLimit, RateLimitPolicy
from .models.api_models import (
    Bot,
    BotStats,
    BotStatsUpdate,
    PartialUser,
    User,
    Vote,
    VoteType,
)
from .webhook.listener import WebhookBindError, WebhookListener, start_listener

__all__ = [
    "TopggClient",
    "RateLimiter",
    "ApiClientError",
    "ApiTransportError",
    "ApiStatusError",
    "ApiPayloadError",
    "RateLimit",
    "RateLimitPolicy",
    "BucketScope",
    "Bot",
    "BotStats",
    "BotStatsUpdate",
    "PartialUser",
    "User",
    "Vote",
    "VoteType",
    "WebhookListener",
    "WebhookBindError",
    "start_listener",
]
