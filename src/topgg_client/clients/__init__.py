"""
Clients module for the top.gg client.

Contains the API client and its rate limiter.
"""

from .api_client import (
    ApiClientError,
    ApiPayloadError,
    ApiStatusError,
    ApiTransportError,
    TopggClient,
)
from .rate_limiter import RateLimitBucket, RateLimiter

__all__ = [
    "TopggClient",
    "RateLimiter",
    "RateLimitBucket",
    "ApiClientError",
    "ApiTransportError",
    "ApiStatusError",
    "ApiPayloadError",
]
