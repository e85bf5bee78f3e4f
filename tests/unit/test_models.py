"""
Unit tests for top.gg client models.
"""

import pytest
from pydantic import ValidationError
from topgg_client.models.api_config import BucketScope, RateLimit, RateLimitPolicy
from topgg_client.models.api_models import (
    Bot,
    BotStatsUpdate,
    PartialUser,
    User,
    Vote,
    VoteType,
)


class TestBot:
    """Test Bot model."""

    def test_parse_service_json(self, sample_bot_json):
        """Test parsing the camelCase listing."""
        bot = Bot.model_validate(sample_bot_json)

        assert bot.id == 456
        assert bot.certified_bot is False
        assert bot.tags == ["Moderation", "Fun"]
        assert bot.vanity == "luca"

    def test_donate_bot_guild_id(self, sample_bot_json):
        """Test that a set donatebot guild is parsed as an ID."""
        bot = Bot.model_validate(dict(sample_bot_json, donatebotguildid="264445053596991498"))
        assert bot.donate_bot_guild_id == 264445053596991498

    def test_is_immutable(self, sample_bot_json):
        """Test that snapshots cannot be modified."""
        bot = Bot.model_validate(sample_bot_json)
        with pytest.raises(ValidationError):
            bot.points = 0

    def test_missing_id(self, sample_bot_json):
        """Test that a listing without an ID is rejected."""
        data = dict(sample_bot_json)
        del data["id"]
        with pytest.raises(ValidationError):
            Bot.model_validate(data)

    @pytest.mark.parametrize(
        "field,value",
        [("id", True), ("id", -456), ("id", "45a6"), ("owners", [True]), ("guilds", ["１２"])],
    )
    def test_invalid_ids(self, sample_bot_json, field, value):
        """Test that IDs must be non-negative integers or digit strings."""
        with pytest.raises(ValidationError):
            Bot.model_validate(dict(sample_bot_json, **{field: value}))


class TestUser:
    """Test User model."""

    def test_social_links_are_flattened(self, sample_user_json):
        """Test lifting links out of the social object."""
        user = User.model_validate(sample_user_json)

        assert user.github == "xetera"
        assert user.youtube is None
        assert user.reddit is None

    def test_without_social(self, sample_user_json):
        """Test a profile without a social object."""
        data = dict(sample_user_json)
        del data["social"]
        user = User.model_validate(data)
        assert user.github is None

    def test_boolean_id_rejected(self, sample_user_json):
        """Test that a boolean is not accepted as a user ID."""
        with pytest.raises(ValidationError):
            User.model_validate(dict(sample_user_json, id=False))
        with pytest.raises(ValidationError):
            PartialUser.model_validate({"id": True, "username": "Xetera"})


class TestVote:
    """Test Vote model."""

    def test_parse_webhook_body(self):
        """Test parsing a webhook delivery."""
        vote = Vote.model_validate(
            {"bot": "456", "user": "789", "type": "upvote", "isWeekend": True, "query": "?ref=1"}
        )

        assert vote.bot_id == 456
        assert vote.user_id == 789
        assert vote.vote_type == VoteType.UPVOTE
        assert vote.is_weekend is True
        assert vote.query == "?ref=1"
        assert vote.received_at is not None

    def test_defaults(self):
        """Test optional webhook fields."""
        vote = Vote.model_validate({"bot": "456", "user": "789", "type": "test"})
        assert vote.vote_type == VoteType.TEST
        assert vote.is_weekend is False
        assert vote.query is None

    def test_received_at_is_not_taken_from_sender(self):
        """Test that a delivered receipt time is ignored."""
        vote = Vote.model_validate(
            {"bot": "456", "user": "789", "type": "test", "received_at": "2001-01-01T00:00:00Z"}
        )
        assert vote.received_at.year != 2001

    @pytest.mark.parametrize(
        "body",
        [
            {"user": "789", "type": "upvote"},
            {"bot": "456", "type": "upvote"},
            {"bot": "456", "user": "789"},
            {"bot": "456", "user": "789", "type": "downvote"},
            {"bot": "", "user": "789", "type": "upvote"},
            {"bot": True, "user": False, "type": "upvote"},
            {"bot": "456", "user": -789, "type": "upvote"},
            {"bot": "456", "user": "7 89", "type": "upvote"},
            ["456", "789", "upvote"],
        ],
    )
    def test_malformed(self, body):
        """Test rejected webhook bodies."""
        with pytest.raises(ValidationError):
            Vote.model_validate(body)


class TestBotStatsUpdate:
    """Test BotStatsUpdate model."""

    def test_server_count_only(self):
        """Test that omitted fields are left out of the payload."""
        assert BotStatsUpdate(server_count=142).to_payload() == {"server_count": 142}

    def test_shards_only(self):
        """Test that shards alone omit server_count."""
        payload = BotStatsUpdate(shards=[142, 532, 304]).to_payload()
        assert payload == {"shards": [142, 532, 304]}
        assert "server_count" not in payload

    def test_zero_is_reported(self):
        """Test that zero is distinct from omitted."""
        assert BotStatsUpdate(server_count=0).to_payload() == {"server_count": 0}

    def test_single_shard(self):
        """Test reporting one shard's count."""
        update = BotStatsUpdate(server_count=142, shard_id=0, shard_count=2)
        assert update.to_payload() == {"server_count": 142, "shard_id": 0, "shard_count": 2}

    def test_nothing_reported(self):
        """Test that an empty update is rejected."""
        with pytest.raises(ValidationError, match="server_count or shards"):
            BotStatsUpdate(shard_count=3)

    def test_shards_with_shard_id(self):
        """Test that shards and shard_id cannot be combined."""
        with pytest.raises(ValidationError, match="shard_id"):
            BotStatsUpdate(shards=[1, 2], shard_id=1)

    def test_shard_id_out_of_range(self):
        """Test that shard_id must be a valid shard index."""
        with pytest.raises(ValidationError, match="lower than shard_count"):
            BotStatsUpdate(server_count=10, shard_id=2, shard_count=2)

    def test_negative_count(self):
        """Test that counts cannot be negative."""
        with pytest.raises(ValidationError):
            BotStatsUpdate(server_count=-1)


class TestRateLimitPolicy:
    """Test RateLimitPolicy model."""

    def test_defaults(self):
        """Test the published top.gg quotas."""
        policy = RateLimitPolicy()
        assert policy.global_limit == RateLimit(max_requests=100, window_seconds=60)
        assert policy.bots_limit == RateLimit(max_requests=60, window_seconds=60)
        assert policy.bot_scope == BucketScope.GLOBAL

    def test_invalid_quota(self):
        """Test that a quota must allow at least one request."""
        with pytest.raises(ValidationError):
            RateLimit(max_requests=0)
