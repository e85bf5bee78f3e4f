"""
Pytest configuration for top.gg client tests.
"""

import asyncio
import json
import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class FakeClock:
    """Monotonic clock that only moves when the limiter sleeps."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay
        await asyncio.sleep(0)


def make_response(status=200, payload=None, text=None, body=None):
    """Build a mocked aiohttp response."""
    response = AsyncMock()
    response.status = status
    if body is None:
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        body = text.encode("utf-8")
    response.read = AsyncMock(return_value=body)
    return response


@pytest.fixture
def response_factory():
    """Factory for mocked aiohttp responses."""
    return make_response


@pytest.fixture
def fake_clock():
    """A controllable clock for rate limiter tests."""
    return FakeClock()


@pytest.fixture
def sample_bot_json():
    """Bot listing as returned by the service."""
    return {
        "id": "456",
        "username": "Luca",
        "discriminator": "1375",
        "avatar": "7edcc4c6fbb0b23762455ca139f0e1c9",
        "defAvatar": "6debd47ed13483642cf09e832ed0bc1b",
        "lib": "discord.py",
        "prefix": "- or @Luca",
        "shortdesc": "Luca is a bot for managing and informing members of the server",
        "longdesc": None,
        "tags": ["Moderation", "Fun"],
        "website": "https://luca.gg",
        "support": "KYZsaFb",
        "github": None,
        "owners": ["129908908096487424"],
        "guilds": [],
        "invite": None,
        "date": "2017-04-26T18:08:17.125Z",
        "certifiedBot": False,
        "vanity": "luca",
        "points": 397,
        "monthlyPoints": 19,
        "donatebotguildid": "",
        "server_count": 142,
        "shard_count": 2,
    }


@pytest.fixture
def sample_user_json():
    """User profile as returned by the service."""
    return {
        "id": "789",
        "username": "Xetera",
        "discriminator": "0001",
        "avatar": None,
        "defAvatar": "322c936a8c8be1b803cd94861bdfa868",
        "bio": "Hi",
        "banner": None,
        "social": {"github": "xetera", "twitter": "", "youtube": ""},
        "color": "#ff0000",
        "supporter": False,
        "certifiedDev": True,
        "mod": False,
        "webMod": True,
        "admin": False,
    }


@pytest.fixture
def sample_voters_json():
    """Vote list as returned by the service."""
    return [
        {"id": "789", "username": "Xetera", "discriminator": "0001", "avatar": None},
        {"id": "790", "username": "Other", "discriminator": "4242", "avatar": "abc"},
    ]


@pytest.fixture
def temp_config_dir():
    """Create a temporary configuration directory."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def sample_config():
    """Sample configuration file contents."""
    return {
        "bot_id": 123,
        "token": "$TOPGG_TEST_TOKEN",
        "timeout": 10,
        "rate_limit": {
            "global_limit": {"max_requests": 50, "window_seconds": 30},
            "bots_limit": {"max_requests": 20, "window_seconds": 30},
            "bot_scope": "per_bot",
        },
        "webhook": {"port": 3030, "secret": "$TOPGG_TEST_SECRET", "path": "/votes"},
    }


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    original_env = os.environ.copy()

    os.environ.update(
        {
            "TOPGG_TEST_TOKEN": "test-token",
            "TOPGG_TEST_SECRET": "s3cr3t",
        }
    )

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
