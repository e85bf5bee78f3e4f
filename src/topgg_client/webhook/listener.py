"""
Webhook Listener for top.gg vote events.

Runs a small aiohttp server that top.gg calls whenever someone votes. Each
delivery must carry the shared secret in its ``Authorization`` header.
Accepted votes are queued and read by the application through
``WebhookListener.events()``.
"""

import asyncio
import hmac
import logging
from dataclasses import asdict, dataclass
from typing import AsyncIterator, Optional

from aiohttp import web

from ..models.api_models import Vote

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PATH = "/dblwebhook"

# Queued once by stop(); tells consumers the stream is over
_END_OF_STREAM = object()


class WebhookBindError(Exception):
    """Exception raised when the listener cannot bind its port."""

    pass


@dataclass
class ListenerStats:
    """Counters for requests handled by the listener."""

    accepted: int = 0
    unauthorized: int = 0
    malformed: int = 0


class WebhookListener:
    """
    HTTP listener that turns top.gg vote webhooks into a stream of votes.

    Attributes:
        port: Port the server binds to
        secret: Value the Authorization header must match exactly
        host: Interface the server binds to
        path: Route top.gg posts votes to
        stats: Request counters
    """

    def __init__(
        self,
        port: int,
        secret: str,
        host: str = DEFAULT_HOST,
        path: str = DEFAULT_PATH,
    ) -> None:
        if not secret:
            raise ValueError("secret must not be empty")
        self.port = port
        self.secret = secret
        self.host = host
        self.path = path
        self.stats = ListenerStats()
        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self._queue: "asyncio.Queue[object]" = asyncio.Queue()
        self._closed = False

    # Lifecycle

    async def start(self) -> "WebhookListener":
        """
        Bind the server and start accepting deliveries.

        Returns:
            WebhookListener: The running listener

        Raises:
            WebhookBindError: If the port cannot be bound
        """
        if self.runner is not None:
            raise RuntimeError("Webhook listener is already running")
        if self._closed:
            raise RuntimeError("Webhook listener has been stopped")

        self.app = web.Application()
        self._setup_routes()

        self.runner = web.AppRunner(self.app, access_log=None)
        await self.runner.setup()

        site = web.TCPSite(self.runner, self.host, self.port)
        try:
            await site.start()
        except OSError as e:
            await self.runner.cleanup()
            self.runner = None
            raise WebhookBindError(
                f"Could not bind webhook listener to {self.host}:{self.port}: {e}"
            ) from e

        logger.info(f"Webhook listener started on {self.host}:{self.port}{self.path}")
        return self

    async def stop(self) -> None:
        """Stop accepting connections and end the event stream."""
        if self.runner is not None:
            await self.runner.cleanup()
            self.runner = None
            logger.info("Webhook listener stopped")

        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_END_OF_STREAM)

    async def __aenter__(self):
        return await self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    @property
    def running(self) -> bool:
        return self.runner is not None

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually bound, useful when started with port 0."""
        if self.runner is None or not self.runner.addresses:
            return None
        return self.runner.addresses[0][1]

    # Consumption

    async def events(self) -> AsyncIterator[Vote]:
        """
        Yield votes in arrival order until the listener is stopped.

        Votes queued before ``stop()`` are still delivered.
        """
        while True:
            item = await self._queue.get()
            if item is _END_OF_STREAM:
                # leave the marker for any other subscription
                self._queue.put_nowait(_END_OF_STREAM)
                return
            yield item

    def __aiter__(self) -> AsyncIterator[Vote]:
        return self.events()

    def pending(self) -> int:
        """Number of votes waiting to be consumed."""
        return max(0, self._queue.qsize() - (1 if self._closed else 0))

    # Request handling

    def _setup_routes(self) -> None:
        self.app.router.add_post(self.path, self.handle_vote)
        self.app.router.add_get("/health", self.handle_health)

    def _is_authorized(self, header: Optional[str]) -> bool:
        if header is None:
            return False
        return hmac.compare_digest(header.encode("utf-8"), self.secret.encode("utf-8"))

    async def handle_vote(self, request: web.Request) -> web.Response:
        """Validate a delivery and queue its vote."""
        if not self._is_authorized(request.headers.get("Authorization")):
            self.stats.unauthorized += 1
            logger.warning(f"Rejected webhook from {request.remote}: invalid authorization")
            return web.json_response({"error": "Unauthorized"}, status=401)

        try:
            payload = await request.json()
            vote = Vote.model_validate(payload)
        except ValueError as e:
            self.stats.malformed += 1
            logger.warning(f"Rejected webhook from {request.remote}: malformed body ({e})")
            return web.json_response({"error": "Malformed vote payload"}, status=400)

        self._queue.put_nowait(vote)
        self.stats.accepted += 1
        logger.debug(
            f"Queued {vote.vote_type.value} vote from user {vote.user_id} for bot {vote.bot_id}"
        )
        return web.json_response({"status": "ok"})

    async def handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok", **asdict(self.stats)})


async def start_listener(
    port: int,
    secret: str,
    host: str = DEFAULT_HOST,
    path: str = DEFAULT_PATH,
) -> WebhookListener:
    """Create a listener and start it. See ``WebhookListener.start``."""
    listener = WebhookListener(port, secret, host=host, path=path)
    return await listener.start()
