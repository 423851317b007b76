"""Turn channel payloads into cached channel entities."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .cache import CacheInsertionPolicy
from .logging import get_logger
from .types import ChannelType, EntityKind, Payload

if TYPE_CHECKING:
    from .cache import EntityCache
    from .channels import BaseChannel, Guild
    from .client import DiscordRuntimeClient
    from .structures import TypeRegistry

logger = get_logger(__name__)

__all__ = ["EntityFactory", "Resolution", "KindResolution", "GUILD_CHANNEL_KINDS"]

GUILD_CHANNEL_KINDS: dict[int, EntityKind] = {
    ChannelType.GUILD_TEXT: EntityKind.TEXT_CHANNEL,
    ChannelType.GUILD_VOICE: EntityKind.VOICE_CHANNEL,
    ChannelType.GUILD_CATEGORY: EntityKind.CATEGORY_CHANNEL,
    ChannelType.GUILD_ANNOUNCEMENT: EntityKind.ANNOUNCEMENT_CHANNEL,
    ChannelType.GUILD_STAGE_VOICE: EntityKind.STAGE_CHANNEL,
    ChannelType.ANNOUNCEMENT_THREAD: EntityKind.THREAD,
    ChannelType.PUBLIC_THREAD: EntityKind.THREAD,
    ChannelType.PRIVATE_THREAD: EntityKind.THREAD,
    ChannelType.GUILD_DIRECTORY: EntityKind.DIRECTORY_CHANNEL,
    ChannelType.GUILD_FORUM: EntityKind.FORUM_CHANNEL,
    ChannelType.GUILD_MEDIA: EntityKind.MEDIA_CHANNEL,
}


class Resolution(enum.Enum):
    """Outcome of choosing a kind for a payload."""

    RESOLVED = "resolved"
    # No guild context and not recognisably a private channel.
    UNREPRESENTABLE = "unrepresentable"
    # Guild channel whose guild is not cached, and unknown guilds not allowed.
    UNRESOLVABLE_CONTAINER = "unresolvable_container"
    # A `type` this runtime does not know about yet.
    UNRECOGNIZED_DISCRIMINANT = "unrecognized_discriminant"


@dataclass(frozen=True, slots=True)
class KindResolution:
    outcome: Resolution
    kind: EntityKind | None = None
    guild: Guild | None = None


class EntityFactory:
    """Builds channels through a TypeRegistry and stores them per a CacheInsertionPolicy.

    The factory never names a concrete channel class; everything goes through
    the registry so overrides apply.
    """

    def __init__(
        self,
        registry: TypeRegistry,
        guilds: EntityCache[Guild],
        *,
        policy: CacheInsertionPolicy | None = None,
        client: DiscordRuntimeClient | None = None,
    ) -> None:
        self._registry = registry
        self._guilds = guilds
        self._policy = policy or CacheInsertionPolicy()
        self._client = client

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    def resolve_kind(
        self,
        data: Payload,
        guild: Guild | None = None,
        *,
        allow_unknown_guild: bool = False,
    ) -> KindResolution:
        """Pick the entity kind for `data` without constructing anything."""
        channel_type = data.get("type")
        guild_id = data.get("guild_id")

        if guild_id is None and guild is None:
            if channel_type == ChannelType.DM or (
                data.get("recipients") is not None
                and channel_type != ChannelType.GROUP_DM
            ):
                return KindResolution(Resolution.RESOLVED, EntityKind.DIRECT_MESSAGE)
            if channel_type == ChannelType.GROUP_DM:
                return KindResolution(
                    Resolution.RESOLVED, EntityKind.PARTIAL_GROUP_CONVERSATION
                )
            return KindResolution(Resolution.UNREPRESENTABLE)

        if guild is None:
            guild = self._guilds.get(int(guild_id))
        if guild is None and not allow_unknown_guild:
            return KindResolution(Resolution.UNRESOLVABLE_CONTAINER)

        kind = GUILD_CHANNEL_KINDS.get(channel_type) if isinstance(channel_type, int) else None
        if kind is None:
            return KindResolution(Resolution.UNRECOGNIZED_DISCRIMINANT, guild=guild)
        return KindResolution(Resolution.RESOLVED, kind, guild)

    def create_channel(
        self,
        data: Payload,
        guild: Guild | None = None,
        *,
        allow_unknown_guild: bool = False,
    ) -> BaseChannel | None:
        """Construct the channel described by `data` and cache it.

        Returns None when the payload cannot be represented: no guild can be
        found for a guild channel, or its `type` is not recognised. With
        `allow_unknown_guild` the channel is built but nothing is cached.
        """
        resolution = self.resolve_kind(
            data, guild, allow_unknown_guild=allow_unknown_guild
        )
        if resolution.outcome is not Resolution.RESOLVED:
            logger.debug(
                "factory.channel_dropped",
                reason=resolution.outcome.value,
                channel_id=data.get("id"),
                channel_type=data.get("type"),
                guild_id=data.get("guild_id"),
            )
            return None

        assert resolution.kind is not None
        structure = self._registry.get(resolution.kind)
        channel: BaseChannel = structure(
            data, guild=resolution.guild, client=self._client
        )
        inserted = self._policy.apply(
            resolution.kind,
            channel,
            resolution.guild,
            allow_unknown_guild=allow_unknown_guild,
        )
        logger.debug(
            "factory.channel_created",
            kind=resolution.kind.value,
            structure=type(channel).__name__,
            channel_id=channel.id,
            cached_in=inserted,
        )
        return channel

    def create_guild(self, data: Payload, *, cache: bool = True) -> Guild:
        limit = None
        if self._client is not None:
            limit = self._client.settings.cache.channel_limit
        guild: Guild = self._registry.get(EntityKind.GUILD)(
            data, client=self._client, channel_limit=limit
        )
        if cache:
            self._guilds.set(guild.id, guild)
        for channel_data in data.get("channels", []):
            self.create_channel(channel_data, guild)
        for thread_data in data.get("threads", []):
            self.create_channel(thread_data, guild)
        return guild
