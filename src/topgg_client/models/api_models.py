"""
Pydantic models for top.gg API entities.

Inbound entities are immutable snapshots parsed from the camelCase JSON the
service returns. ``BotStatsUpdate`` is the outbound statistics payload.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    field_validator,
    model_validator,
)

SOCIAL_FIELDS = ("youtube", "reddit", "twitter", "instagram", "github")


def parse_snowflake(value: Any) -> int:
    """Accept a Discord ID as a non-negative int or a string of ASCII digits."""
    if isinstance(value, bool):
        raise ValueError("ID must be a number, not a boolean")
    if isinstance(value, int):
        if value < 0:
            raise ValueError("ID must not be negative")
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    raise ValueError(f"Invalid ID: {value!r}")



class TopggModel(BaseModel):
    """Base for snapshots returned by the service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Bot(TopggModel):
    """A bot listed on top.gg."""

    id: int = Field(..., description="Bot ID")
    username: str = Field(..., description="Bot username")
    discriminator: str = Field(..., description="Discriminator")
    avatar: Optional[str] = Field(default=None, description="Avatar hash")
    def_avatar: str = Field(default="", alias="defAvatar")
    lib: str = Field(default="", description="Library the bot is written with")
    prefix: str = Field(default="", description="Command prefix")
    short_desc: str = Field(default="", alias="shortdesc")
    long_desc: Optional[str] = Field(default=None, alias="longdesc")
    tags: List[str] = Field(default_factory=list)
    website: Optional[str] = None
    support: Optional[str] = None
    github: Optional[str] = None
    owners: List[int] = Field(default_factory=list, description="Owner user IDs")
    guilds: List[int] = Field(default_factory=list, description="Featured guild IDs")
    invite: Optional[str] = None
    date: str = Field(default="", description="Listing date")
    certified_bot: bool = Field(default=False, alias="certifiedBot")
    vanity: Optional[str] = None
    points: int = Field(default=0, description="Total votes")
    monthly_points: int = Field(default=0, alias="monthlyPoints")
    donate_bot_guild_id: Optional[int] = Field(default=None, alias="donatebotguildid")
    server_count: Optional[int] = None
    shard_count: Optional[int] = None

    @field_validator("donate_bot_guild_id", mode="before")
    @classmethod
    def empty_guild_id(cls, v):
        """The service sends an empty string when no guild is set."""
        if v is None or v == "":
            return None
        return parse_snowflake(v)

    @field_validator("id", mode="before")
    @classmethod
    def check_id(cls, v):
        return parse_snowflake(v)

    @field_validator("owners", "guilds", mode="before")
    @classmethod
    def check_id_lists(cls, v):
        if isinstance(v, list):
            return [parse_snowflake(item) for item in v]
        return v


class User(TopggModel):
    """A top.gg user profile."""

    id: int
    username: str
    discriminator: str
    avatar: Optional[str] = None
    def_avatar: str = Field(default="", alias="defAvatar")
    bio: Optional[str] = None
    banner: Optional[str] = None
    youtube: Optional[str] = None
    reddit: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    github: Optional[str] = None
    color: Optional[str] = None
    supporter: bool = False
    certified_dev: bool = Field(default=False, alias="certifiedDev")
    moderator: bool = Field(default=False, alias="mod")
    web_moderator: bool = Field(default=False, alias="webMod")
    admin: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def check_id(cls, v):
        return parse_snowflake(v)

    @model_validator(mode="before")
    @classmethod
    def flatten_social(cls, data: Any) -> Any:
        """Lift the ``social`` object's links onto the user."""
        if isinstance(data, dict) and isinstance(data.get("social"), dict):
            data = dict(data)
            social = data.pop("social")
            for name in SOCIAL_FIELDS:
                if social.get(name) and name not in data:
                    data[name] = social[name]
        return data


class PartialUser(TopggModel):
    """A voter entry in a bot's vote list."""

    id: int
    username: str
    discriminator: str = ""
    avatar: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def check_id(cls, v):
        return parse_snowflake(v)


class VoteCheck(TopggModel):
    """Response of the single-voter check endpoint."""

    voted: int


class BotStats(TopggModel):
    """Statistics currently published for a bot."""

    server_count: Optional[int] = None
    shards: List[int] = Field(default_factory=list)
    shard_count: Optional[int] = None


class VoteType(str, Enum):
    """Kind of vote delivered by a webhook."""

    UPVOTE = "upvote"
    TEST = "test"


class Vote(TopggModel):
    """A vote event received through the webhook listener."""

    bot_id: int = Field(..., alias="bot", description="Bot that received the vote")
    user_id: int = Field(..., alias="user", description="User who voted")
    vote_type: VoteType = Field(..., alias="type")
    is_weekend: bool = Field(default=False, alias="isWeekend")
    query: Optional[str] = None
    received_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="before")
    @classmethod
    def ignore_received_at(cls, data: Any) -> Any:
        """The receipt time is always taken locally, never from the sender."""
        if isinstance(data, dict) and "received_at" in data:
            data = {key: value for key, value in data.items() if key != "received_at"}
        return data

    @field_validator("bot_id", "user_id", mode="before")
    @classmethod
    def check_ids(cls, v):
        return parse_snowflake(v)


class BotStatsUpdate(BaseModel):
    """
    Outbound statistics for ``POST /bots/{id}/stats``.

    ``None`` marks a field as not reported. A reported zero is kept in the
    payload.
    """

    server_count: Optional[NonNegativeInt] = None
    shards: Optional[List[NonNegativeInt]] = None
    shard_id: Optional[NonNegativeInt] = None
    shard_count: Optional[NonNegativeInt] = None

    @model_validator(mode="after")
    def check_coherent(self) -> "BotStatsUpdate":
        """Reject combinations the service cannot interpret."""
        if self.server_count is None and self.shards is None:
            raise ValueError("Either server_count or shards must be provided")
        if self.shards is not None and self.shard_id is not None:
            raise ValueError("shard_id cannot be combined with shards")
        if (
            self.shard_id is not None
            and self.shard_count is not None
            and self.shard_id >= self.shard_count
        ):
            raise ValueError("shard_id must be lower than shard_count")
        return self

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON body with unreported fields left out."""
        return self.model_dump(exclude_none=True)
