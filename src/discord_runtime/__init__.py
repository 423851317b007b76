"""Typed, cached Discord entities and interaction response sequencing."""

from .client import DiscordRuntimeClient
from .factory import EntityFactory
from .interactions import InteractionResponseController, ResponseTransport
from .structures import TypeRegistry, default_registry
from .types import ORIGINAL_MESSAGE, EntityKind, InteractionExchange, ResponseState

__all__ = [
    "ORIGINAL_MESSAGE",
    "DiscordRuntimeClient",
    "EntityFactory",
    "EntityKind",
    "InteractionExchange",
    "InteractionResponseController",
    "ResponseState",
    "ResponseTransport",
    "TypeRegistry",
    "default_registry",
]
