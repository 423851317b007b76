"""Entity classes materialized from wire payloads."""

from __future__ import annotations

import datetime
import weakref
from typing import TYPE_CHECKING, Any

import discord

from .cache import EntityCache
from .transforms import decode_default_reaction, decode_forum_tag
from .types import (
    THREAD_CHANNEL_TYPES,
    VOICE_CHANNEL_TYPES,
    ChannelType,
    DefaultReaction,
    ForumTag,
    LifecycleState,
    Payload,
)

if TYPE_CHECKING:
    from .client import DiscordRuntimeClient


def _snowflake(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


def _channel_type(value: Any) -> ChannelType | int | None:
    if value is None:
        return None
    try:
        return ChannelType(value)
    except ValueError:
        return value


class Entity:
    """Anything with a snowflake id and a lifecycle."""

    def __init__(
        self, data: Payload, *, client: DiscordRuntimeClient | None = None
    ) -> None:
        self.client = client
        self.id: int = int(data["id"])
        self._state = LifecycleState.ACTIVE

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def deleted(self) -> bool:
        return self._state is LifecycleState.DELETED

    def mark_deleted(self) -> bool:
        """Move to DELETED. Returns False if the entity was already deleted."""
        if self._state is LifecycleState.DELETED:
            return False
        self._state = LifecycleState.DELETED
        return True

    @property
    def created_at(self) -> datetime.datetime:
        return discord.utils.snowflake_time(self.id)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Entity) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)


class Guild(Entity):
    """A guild and the channels known to belong to it."""

    def __init__(
        self,
        data: Payload,
        *,
        client: DiscordRuntimeClient | None = None,
        channel_limit: int | None = None,
    ) -> None:
        super().__init__(data, client=client)
        self.channels: EntityCache[BaseChannel] = EntityCache(channel_limit)
        self._patch(data)

    def _patch(self, data: Payload) -> None:
        self.name: str | None = data.get("name", getattr(self, "name", None))
        self.owner_id = _snowflake(data.get("owner_id", getattr(self, "owner_id", None)))
        self.unavailable: bool = bool(data.get("unavailable", False))

    def __repr__(self) -> str:
        return f"<Guild id={self.id} name={self.name!r}>"


class BaseChannel(Entity):
    """Any channel on Discord."""

    text_based = False

    def __init__(
        self,
        data: Payload,
        *,
        guild: Guild | None = None,
        client: DiscordRuntimeClient | None = None,
    ) -> None:
        super().__init__(data, client=client)
        self.type = _channel_type(data.get("type"))
        self.flags: int = int(data.get("flags", 0))
        self._patch(data)

    def _patch(self, data: Payload) -> None:
        if "type" in data:
            self.type = _channel_type(data["type"])
        if "flags" in data:
            self.flags = int(data["flags"])

    @property
    def mention(self) -> str:
        return f"<#{self.id}>"

    @property
    def partial(self) -> bool:
        return False

    def is_text(self) -> bool:
        return self.text_based

    def is_voice(self) -> bool:
        return self.type in VOICE_CHANNEL_TYPES

    def is_thread(self) -> bool:
        return self.type in THREAD_CHANNEL_TYPES

    def is_dm_based(self) -> bool:
        return self.type in (ChannelType.DM, ChannelType.GROUP_DM)

    def __str__(self) -> str:
        return self.mention

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} type={self.type!r}>"


class DMChannel(BaseChannel):
    """A one-to-one conversation with a user."""

    text_based = True

    def _patch(self, data: Payload) -> None:
        super()._patch(data)
        recipients = data.get("recipients")
        if recipients is not None:
            self.recipient_ids: list[int] = [int(user["id"]) for user in recipients]
        elif not hasattr(self, "recipient_ids"):
            self.recipient_ids = []
        self.last_message_id = _snowflake(
            data.get("last_message_id", getattr(self, "last_message_id", None))
        )

    @property
    def recipient_id(self) -> int | None:
        return self.recipient_ids[0] if self.recipient_ids else None

    @property
    def partial(self) -> bool:
        return not self.recipient_ids


class PartialGroupDMChannel(BaseChannel):
    """A named multi-user conversation the bot only sees partially."""

    text_based = True

    def _patch(self, data: Payload) -> None:
        super()._patch(data)
        self.name: str | None = data.get("name", getattr(self, "name", None))
        self.icon: str | None = data.get("icon", getattr(self, "icon", None))
        self.owner_id = _snowflake(data.get("owner_id", getattr(self, "owner_id", None)))
        if "recipients" in data:
            self.recipient_ids: list[int] = [
                int(user["id"]) for user in data["recipients"]
            ]
        elif not hasattr(self, "recipient_ids"):
            self.recipient_ids = []

    @property
    def partial(self) -> bool:
        return True


class GuildChannel(BaseChannel):
    """A channel that belongs to a guild."""

    def __init__(
        self,
        data: Payload,
        *,
        guild: Guild | None = None,
        client: DiscordRuntimeClient | None = None,
    ) -> None:
        self.guild = guild
        self.guild_id = guild.id if guild is not None else _snowflake(data.get("guild_id"))
        super().__init__(data, guild=guild, client=client)

    def _patch(self, data: Payload) -> None:
        super()._patch(data)
        self.name: str | None = data.get("name", getattr(self, "name", None))
        self.position: int = data.get("position", getattr(self, "position", 0))
        self.parent_id = _snowflake(data.get("parent_id", getattr(self, "parent_id", None)))
        if "permission_overwrites" in data:
            self.permission_overwrites: list[dict[str, Any]] = list(
                data["permission_overwrites"]
            )
        elif not hasattr(self, "permission_overwrites"):
            self.permission_overwrites = []

    @property
    def category(self) -> CategoryChannel | None:
        if self.guild is None:
            return None
        parent = self.guild.channels.get(self.parent_id)
        if parent is None or parent.type != ChannelType.GUILD_CATEGORY:
            return None
        return parent


class TextChannel(GuildChannel):
    """A guild text channel. Owns a cache of its threads."""

    text_based = True

    def __init__(
        self,
        data: Payload,
        *,
        guild: Guild | None = None,
        client: DiscordRuntimeClient | None = None,
    ) -> None:
        limit = client.settings.cache.thread_limit if client is not None else None
        self.threads: EntityCache[ThreadChannel] = EntityCache(limit)
        super().__init__(data, guild=guild, client=client)

    def _patch(self, data: Payload) -> None:
        super()._patch(data)
        self.topic: str | None = data.get("topic", getattr(self, "topic", None))
        self.nsfw: bool = bool(data.get("nsfw", getattr(self, "nsfw", False)))
        self.last_message_id = _snowflake(
            data.get("last_message_id", getattr(self, "last_message_id", None))
        )
        self.rate_limit_per_user: int = data.get(
            "rate_limit_per_user", getattr(self, "rate_limit_per_user", 0)
        )
        self.default_auto_archive_duration: int | None = data.get(
            "default_auto_archive_duration",
            getattr(self, "default_auto_archive_duration", None),
        )


class AnnouncementChannel(TextChannel):
    pass


class VoiceChannel(GuildChannel):
    text_based = True

    def _patch(self, data: Payload) -> None:
        super()._patch(data)
        self.bitrate: int | None = data.get("bitrate", getattr(self, "bitrate", None))
        self.user_limit: int = data.get("user_limit", getattr(self, "user_limit", 0))
        self.rtc_region: str | None = data.get(
            "rtc_region", getattr(self, "rtc_region", None)
        )
        self.nsfw: bool = bool(data.get("nsfw", getattr(self, "nsfw", False)))


class StageChannel(VoiceChannel):
    def _patch(self, data: Payload) -> None:
        super()._patch(data)
        self.topic: str | None = data.get("topic", getattr(self, "topic", None))


class CategoryChannel(GuildChannel):
    @property
    def children(self) -> list[GuildChannel]:
        """Guild channels filed under this category."""
        if self.guild is None:
            return []
        return [
            channel
            for channel in self.guild.channels.values()
            if getattr(channel, "parent_id", None) == self.id
        ]


class DirectoryChannel(GuildChannel):
    pass


class ForumChannel(GuildChannel):
    """A channel whose only content is threads (posts)."""

    def __init__(
        self,
        data: Payload,
        *,
        guild: Guild | None = None,
        client: DiscordRuntimeClient | None = None,
    ) -> None:
        limit = client.settings.cache.thread_limit if client is not None else None
        self.threads: EntityCache[ThreadChannel] = EntityCache(limit)
        super().__init__(data, guild=guild, client=client)

    def _patch(self, data: Payload) -> None:
        super()._patch(data)
        self.topic: str | None = data.get("topic", getattr(self, "topic", None))
        self.nsfw: bool = bool(data.get("nsfw", getattr(self, "nsfw", False)))
        if "available_tags" in data:
            self.available_tags: list[ForumTag] = [
                decode_forum_tag(tag) for tag in data["available_tags"] or []
            ]
        elif not hasattr(self, "available_tags"):
            self.available_tags = []
        if "default_reaction_emoji" in data:
            raw = data["default_reaction_emoji"]
            self.default_reaction_emoji: DefaultReaction | None = (
                decode_default_reaction(raw) if raw is not None else None
            )
        elif not hasattr(self, "default_reaction_emoji"):
            self.default_reaction_emoji = None
        self.default_thread_rate_limit_per_user: int | None = data.get(
            "default_thread_rate_limit_per_user",
            getattr(self, "default_thread_rate_limit_per_user", None),
        )
        self.default_sort_order: int | None = data.get(
            "default_sort_order", getattr(self, "default_sort_order", None)
        )


class MediaChannel(ForumChannel):
    pass


class ThreadChannel(GuildChannel):
    """A thread or forum post.

    The parent channel is held weakly; the guild cache owns it.
    """

    text_based = True

    def __init__(
        self,
        data: Payload,
        *,
        guild: Guild | None = None,
        client: DiscordRuntimeClient | None = None,
    ) -> None:
        self._parent_ref: weakref.ReferenceType[GuildChannel] | None = None
        super().__init__(data, guild=guild, client=client)
        if guild is not None:
            parent = guild.channels.get(self.parent_id)
            if parent is not None:
                self.attach_parent(parent)

    def attach_parent(self, parent: GuildChannel) -> None:
        """Point the thread at `parent`, e.g. after the parent was rebuilt."""
        self.parent_id = parent.id
        self._parent_ref = weakref.ref(parent)

    def _patch(self, data: Payload) -> None:
        super()._patch(data)
        self.owner_id = _snowflake(data.get("owner_id", getattr(self, "owner_id", None)))
        self.last_message_id = _snowflake(
            data.get("last_message_id", getattr(self, "last_message_id", None))
        )
        self.message_count: int | None = data.get(
            "message_count", getattr(self, "message_count", None)
        )
        self.member_count: int | None = data.get(
            "member_count", getattr(self, "member_count", None)
        )
        if "applied_tags" in data:
            self.applied_tags: list[int] = [int(tag) for tag in data["applied_tags"]]
        elif not hasattr(self, "applied_tags"):
            self.applied_tags = []
        metadata = data.get("thread_metadata")
        if metadata is not None:
            self.archived: bool = bool(metadata.get("archived", False))
            self.locked: bool = bool(metadata.get("locked", False))
            self.auto_archive_duration: int | None = metadata.get(
                "auto_archive_duration"
            )
        elif not hasattr(self, "archived"):
            self.archived = False
            self.locked = False
            self.auto_archive_duration = None

    @property
    def parent(self) -> GuildChannel | None:
        if self._parent_ref is not None:
            parent = self._parent_ref()
            if parent is not None:
                return parent
        if self.guild is None:
            return None
        return self.guild.channels.get(self.parent_id)
