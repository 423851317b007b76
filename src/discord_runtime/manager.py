"""Client-level channel bookkeeping for gateway events."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .cache import EntityCache
from .logging import get_logger
from .types import Payload

if TYPE_CHECKING:
    from .channels import BaseChannel, Guild
    from .factory import EntityFactory

logger = get_logger(__name__)


class ChannelManager:
    """Keeps every known channel addressable by id.

    Guild-level caches are filled by the factory; this manager holds the
    client-wide view, which is the only place private channels live.
    Channels are handled by what they expose (`guild`, `is_thread()`,
    `threads`) rather than by class, so registry overrides behave the same.
    """

    def __init__(self, factory: EntityFactory, *, limit: int | None = None) -> None:
        self._factory = factory
        self.cache: EntityCache[BaseChannel] = EntityCache(limit)

    def get(self, channel_id: int) -> BaseChannel | None:
        return self.cache.get(channel_id)

    def add(
        self,
        data: Payload,
        guild: Guild | None = None,
        *,
        cache: bool = True,
        allow_unknown_guild: bool = False,
    ) -> BaseChannel | None:
        """Patch the cached channel for `data`, or create it.

        A payload whose `type` differs from the cached entity's rebuilds the
        entity through the factory so its class matches the new kind.
        Returns None if the payload describes a channel that cannot be built.
        """
        replaced: BaseChannel | None = None
        existing = self.cache.get(int(data["id"]))
        if existing is not None and not existing.deleted:
            if "type" in data and data["type"] != existing.type:
                replaced = existing
                self._detach(existing)
                if guild is None and "guild_id" not in data:
                    guild = getattr(existing, "guild", None)
            else:
                existing._patch(data)
                if guild is not None and getattr(existing, "guild", None) is not None:
                    guild.channels.set(existing.id, existing)
                return existing

        channel = self._factory.create_channel(
            data, guild, allow_unknown_guild=allow_unknown_guild
        )
        if replaced is not None:
            self._carry_threads(replaced, channel)
            if channel is None:
                replaced.mark_deleted()
            logger.debug(
                "channel.type_changed",
                channel_id=replaced.id,
                previous=type(replaced).__name__,
                structure=type(channel).__name__ if channel is not None else None,
            )
        if channel is None:
            return None
        if cache and not allow_unknown_guild:
            self.cache.set(channel.id, channel)
        return channel

    def remove(self, channel_id: int) -> BaseChannel | None:
        """Drop a channel after a deletion event and mark it DELETED."""
        channel = self.cache.remove(channel_id)
        if channel is None:
            return None
        self._evict(channel)
        return channel

    def _detach(self, channel: BaseChannel) -> None:
        """Remove `channel` from every cache that holds it."""
        self.cache.remove(channel.id)
        guild = getattr(channel, "guild", None)
        if guild is not None:
            guild.channels.remove(channel.id)
        if channel.is_thread():
            threads = getattr(getattr(channel, "parent", None), "threads", None)
            if threads is not None:
                threads.remove(channel.id)

    def _carry_threads(self, old: BaseChannel, new: BaseChannel | None) -> None:
        old_threads = getattr(old, "threads", None)
        if old_threads is None:
            return
        new_threads = getattr(new, "threads", None)
        if new_threads is None:
            # Threads do not outlive their parent.
            for thread in old_threads.values():
                self._evict(thread)
        else:
            for thread in old_threads.values():
                thread.attach_parent(new)
                new_threads.set(thread.id, thread)
        old_threads.clear()

    def _evict(self, channel: BaseChannel) -> None:
        self._detach(channel)

        # Threads do not outlive their parent.
        threads = getattr(channel, "threads", None)
        if threads is not None:
            for thread in threads.values():
                self._evict(thread)
            threads.clear()

        if channel.mark_deleted():
            logger.debug(
                "channel.deleted",
                channel_id=channel.id,
                structure=type(channel).__name__,
            )
