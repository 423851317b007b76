"""Runtime client tying caches, the structure registry and responders together."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import discord

from .cache import EntityCache
from .errors import ConfigError
from .factory import EntityFactory
from .interactions import InteractionResponseController
from .logging import get_logger
from .manager import ChannelManager
from .settings import RuntimeSettings
from .structures import TypeRegistry
from .transport import RouteTransport
from .types import InteractionExchange, Payload

if TYPE_CHECKING:
    from collections.abc import Callable

    from .channels import BaseChannel, Guild
    from .interactions import ResponseTransport

    EventHandler = Callable[["DiscordRuntimeClient", Payload], Any]

logger = get_logger(__name__)


class DiscordRuntimeClient:
    """Materializes gateway payloads and hands out interaction responders.

    Overrides must be installed on `registry` before events start flowing.
    """

    def __init__(
        self,
        settings: RuntimeSettings | None = None,
        *,
        registry: TypeRegistry | None = None,
        transport: ResponseTransport | None = None,
    ) -> None:
        self.settings = settings or RuntimeSettings()
        self.registry = registry or TypeRegistry()
        self._transport = transport
        self.guilds: EntityCache[Guild] = EntityCache(self.settings.cache.guild_limit)
        self.factory = EntityFactory(self.registry, self.guilds, client=self)
        self.channels = ChannelManager(
            self.factory, limit=self.settings.cache.channel_limit
        )
        self._handlers: dict[str, EventHandler] = {
            "GUILD_CREATE": DiscordRuntimeClient._on_guild_create,
            "GUILD_DELETE": DiscordRuntimeClient._on_guild_delete,
            "CHANNEL_CREATE": DiscordRuntimeClient._on_channel_upsert,
            "CHANNEL_UPDATE": DiscordRuntimeClient._on_channel_upsert,
            "THREAD_CREATE": DiscordRuntimeClient._on_channel_upsert,
            "THREAD_UPDATE": DiscordRuntimeClient._on_channel_upsert,
            "CHANNEL_DELETE": DiscordRuntimeClient._on_channel_delete,
            "THREAD_DELETE": DiscordRuntimeClient._on_channel_delete,
        }

    @classmethod
    def from_bot(
        cls,
        bot: discord.Client,
        settings: RuntimeSettings | None = None,
        *,
        registry: TypeRegistry | None = None,
    ) -> DiscordRuntimeClient:
        """Build a client that responds through a py-cord bot's HTTP session."""
        return cls(settings, registry=registry, transport=RouteTransport(bot.http))

    def get_guild(self, guild_id: int) -> Guild | None:
        return self.guilds.get(guild_id)

    def get_channel(self, channel_id: int) -> BaseChannel | None:
        return self.channels.get(channel_id)

    def dispatch(self, event: str, data: Payload) -> Any:
        """Apply a raw gateway event to the caches.

        Runs synchronously so an entity is cached by the time the event is
        considered handled. Unknown events are ignored.
        """
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug("gateway.event_ignored", gateway_event=event)
            return None
        return handler(self, data)

    def _on_guild_create(self, data: Payload) -> Guild:
        guild = self.factory.create_guild(data)
        for channel in guild.channels.values():
            self.channels.cache.set(channel.id, channel)
        logger.info(
            "guild.available",
            guild_id=guild.id,
            channels=len(guild.channels),
        )
        return guild

    def _on_guild_delete(self, data: Payload) -> Guild | None:
        guild = self.guilds.remove(int(data["id"]))
        if guild is None:
            return None
        for channel_id in list(guild.channels):
            self.channels.remove(channel_id)
        guild.mark_deleted()
        logger.info("guild.removed", guild_id=guild.id)
        return guild

    def _on_channel_upsert(self, data: Payload) -> BaseChannel | None:
        channel = self.channels.add(data)
        if channel is None:
            logger.debug(
                "channel.unrepresentable",
                channel_id=data.get("id"),
                channel_type=data.get("type"),
            )
        return channel

    def _on_channel_delete(self, data: Payload) -> BaseChannel | None:
        return self.channels.remove(int(data["id"]))

    def responder(
        self,
        interaction: discord.Interaction | InteractionExchange | Payload,
        *,
        transport: ResponseTransport | None = None,
    ) -> InteractionResponseController:
        """Create the response controller for one interaction."""
        if isinstance(interaction, InteractionExchange):
            exchange = interaction
        elif isinstance(interaction, dict):
            application_id = (
                interaction.get("application_id") or self.settings.application_id
            )
            if application_id is None:
                raise ConfigError(
                    "Interaction payload has no application_id and none is configured."
                )
            exchange = InteractionExchange(
                interaction_id=int(interaction["id"]),
                application_id=int(application_id),
                token=interaction["token"],
            )
        else:
            exchange = InteractionExchange.from_interaction(interaction)

        transport = transport or self._transport
        if transport is None:
            raise RuntimeError(
                "No response transport configured; pass one or use from_bot()."
            )
        return InteractionResponseController(
            exchange,
            transport,
            default_ephemeral=self.settings.interactions.default_ephemeral,
        )
