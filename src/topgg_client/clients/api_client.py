"""
API Client for top.gg.

This module provides typed access to the top.gg bot listing API: bot and user
lookups, vote queries and bot statistics. Every request is rate limited
before it is sent.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from aiohttp import ClientSession, ClientTimeout
from aiohttp.client_exceptions import ClientError
from pydantic import BaseModel, ValidationError

from ..models.api_config import BASE_URL, BucketScope, RateLimitPolicy
from ..models.api_models import (
    Bot,
    BotStats,
    BotStatsUpdate,
    PartialUser,
    User,
    VoteCheck,
)
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

GLOBAL_BUCKET = "global"
BOTS_BUCKET = "bots"

Snowflake = Union[int, str]
ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiClientError(Exception):
    """Exception raised when API client operations fail."""

    pass


class ApiTransportError(ApiClientError):
    """Exception raised when the request could not be completed."""

    pass


class ApiStatusError(ApiClientError):
    """Exception raised when the service answers with a non-success status."""

    def __init__(self, status: int, body: str, url: str):
        self.status = status
        self.body = body
        self.url = url
        super().__init__(f"HTTP {status} from {url}: {body}")


class ApiPayloadError(ApiClientError):
    """Exception raised when a response does not have the expected shape."""

    pass


def _require_id(value: Optional[Snowflake], name: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{name} must not be empty")
    return str(value).strip()


class TopggClient:
    """
    Client for the top.gg API.

    Use as an async context manager so the HTTP session is opened and closed
    with the client::

        async with TopggClient(bot_id, token) as client:
            bot = await client.get_my_bot()
    """

    def __init__(
        self,
        bot_id: Snowflake,
        token: str,
        rate_limit: Optional[RateLimitPolicy] = None,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        session: Optional[ClientSession] = None,
    ):
        """
        Initialize the API client.

        Args:
            bot_id: ID of the bot the client acts for
            token: top.gg API token for that bot
            rate_limit: Rate limiting configuration
            base_url: Base URL for the API
            timeout: Total request timeout in seconds
            session: Existing session to use; it is not closed by the client
        """
        self.bot_id = _require_id(bot_id, "bot_id")
        if not token:
            raise ValueError("token must not be empty")
        self._token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.rate_limit = rate_limit or RateLimitPolicy()
        self.rate_limiter = RateLimiter(
            limits={
                GLOBAL_BUCKET: self.rate_limit.global_limit,
                BOTS_BUCKET: self.rate_limit.bots_limit,
            },
            default_limit=self.rate_limit.global_limit,
        )
        self.session: Optional[ClientSession] = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, settings: Any) -> "TopggClient":
        """Create a client from loaded ``TopggSettings``."""
        return cls(
            bot_id=settings.bot_id,
            token=settings.token,
            rate_limit=settings.rate_limit,
            base_url=settings.base_url,
            timeout=settings.timeout,
        )

    async def __aenter__(self):
        """Async context manager entry."""
        if self.session is None:
            self.session = ClientSession(timeout=ClientTimeout(total=self.timeout))
            self._owns_session = True
            logger.info(f"Opened top.gg session for bot {self.bot_id}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    # Bots

    async def get_bot(self, bot_id: Snowflake) -> Bot:
        """
        Get the listing of a bot.

        Args:
            bot_id: ID of the bot to look up

        Returns:
            Bot: The bot's listing

        Raises:
            ApiClientError: If the request or response parsing fails
        """
        bot_id = _require_id(bot_id, "bot_id")
        data = await self._request("GET", f"/bots/{bot_id}", self._bot_buckets(bot_id))
        return self._parse(Bot, data)

    async def get_my_bot(self) -> Bot:
        return await self.get_bot(self.bot_id)

    async def get_user(self, user_id: Snowflake) -> User:
        """Get a top.gg user profile."""
        user_id = _require_id(user_id, "user_id")
        data = await self._request("GET", f"/users/{user_id}", [GLOBAL_BUCKET])
        return self._parse(User, data)

    # Votes

    async def get_votes(self, bot_id: Snowflake) -> List[PartialUser]:
        """
        Get the users who voted for a bot.

        The service only returns the most recent voters.
        """
        bot_id = _require_id(bot_id, "bot_id")
        data = await self._request(
            "GET", f"/bots/{bot_id}/votes", self._bot_buckets(bot_id)
        )
        if not isinstance(data, list):
            raise ApiPayloadError(f"Expected a list of voters, got {type(data).__name__}")
        return [self._parse(PartialUser, item) for item in data]

    async def get_my_votes(self) -> List[PartialUser]:
        return await self.get_votes(self.bot_id)

    async def get_voter_ids(self, bot_id: Snowflake) -> List[int]:
        """Get only the IDs of the users who voted for a bot."""
        return [voter.id for voter in await self.get_votes(bot_id)]

    async def has_voted(self, bot_id: Snowflake, user_id: Snowflake) -> bool:
        """
        Check whether a user voted for a bot.

        Args:
            bot_id: ID of the bot
            user_id: ID of the user

        Returns:
            bool: True if the user has voted
        """
        bot_id = _require_id(bot_id, "bot_id")
        user_id = _require_id(user_id, "user_id")
        data = await self._request(
            "GET",
            f"/bots/{bot_id}/check",
            self._bot_buckets(bot_id),
            params={"userId": user_id},
        )
        return self._parse(VoteCheck, data).voted != 0

    async def has_voted_for_me(self, user_id: Snowflake) -> bool:
        return await self.has_voted(self.bot_id, user_id)

    # Stats

    async def get_bot_stats(self, bot_id: Snowflake) -> BotStats:
        """Get the server and shard counts published for a bot."""
        bot_id = _require_id(bot_id, "bot_id")
        data = await self._request(
            "GET", f"/bots/{bot_id}/stats", self._bot_buckets(bot_id)
        )
        return self._parse(BotStats, data)

    async def get_my_bot_stats(self) -> BotStats:
        return await self.get_bot_stats(self.bot_id)

    async def post_bot_stats(
        self,
        server_count: Optional[int] = None,
        shards: Optional[List[int]] = None,
        shard_id: Optional[int] = None,
        shard_count: Optional[int] = None,
    ) -> None:
        """
        Publish statistics for the client's own bot.

        Either ``server_count`` or ``shards`` must be given. ``shards`` lists
        the server count of every shard; ``shard_id`` says which shard a
        single ``server_count`` belongs to. Omitted arguments are left out of
        the request body.

        Raises:
            ValueError: If the combination of arguments is not coherent
            ApiClientError: If the request fails
        """
        update = BotStatsUpdate(
            server_count=server_count,
            shards=shards,
            shard_id=shard_id,
            shard_count=shard_count,
        )
        payload = update.to_payload()
        await self._request(
            "POST",
            f"/bots/{self.bot_id}/stats",
            self._bot_buckets(self.bot_id),
            json_body=payload,
        )
        logger.info(f"Posted stats for bot {self.bot_id}: {payload}")

    # Internals

    def _bot_buckets(self, bot_id: str) -> List[str]:
        if self.rate_limit.bot_scope == BucketScope.PER_BOT:
            return [f"{BOTS_BUCKET}:{bot_id}", GLOBAL_BUCKET]
        return [BOTS_BUCKET, GLOBAL_BUCKET]

    def _build_auth_headers(self) -> Dict[str, str]:
        return {"Authorization": self._token}

    async def _request(
        self,
        method: str,
        path: str,
        buckets: List[str],
        params: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make a rate limited request and decode its JSON body.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            buckets: Rate limit buckets the request counts against
            params: Query parameters
            json_body: JSON request body

        Returns:
            Any: Decoded response body, None when the body is empty

        Raises:
            ApiTransportError: If the request could not be completed
            ApiStatusError: If the response status is not 2xx
            ApiPayloadError: If the body is not valid UTF-8 JSON
        """
        if not self.session:
            raise ApiClientError("Session not initialized")

        await self.rate_limiter.acquire_many(buckets)

        url = f"{self.base_url}{path}"
        logger.debug(f"Making {method} request to {url}")

        try:
            async with self.session.request(
                method,
                url,
                headers=self._build_auth_headers(),
                params=params,
                json=json_body,
            ) as response:
                body = await response.read()

                if not 200 <= response.status < 300:
                    raise ApiStatusError(
                        response.status, body.decode("utf-8", errors="replace"), url
                    )

        except (ClientError, asyncio.TimeoutError) as e:
            raise ApiTransportError(f"{method} {url} failed: {e!r}") from e

        if not body:
            return None

        try:
            return json.loads(body.decode("utf-8"))
        except ValueError as e:
            raise ApiPayloadError(f"Invalid JSON from {url}: {e}") from e

    @staticmethod
    def _parse(model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ApiPayloadError(f"Unexpected {model.__name__} payload: {e}") from e
