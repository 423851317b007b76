"""Exceptions raised by the Discord runtime."""

from __future__ import annotations


class DiscordRuntimeError(Exception):
    """Base class for errors raised by this package."""


class ConfigError(DiscordRuntimeError):
    """Settings could not be loaded or failed validation."""


class StructureError(DiscordRuntimeError):
    """A structure registry lookup or override was invalid."""


class InvalidKind(StructureError, KeyError):
    """`get` was called with something that is not an entity kind."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class UnknownKind(StructureError, KeyError):
    """`extend` was called with something that is not an entity kind."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class NotAFunction(StructureError, TypeError):
    """The upgrade passed to `extend` is not callable."""


class InvalidReturn(StructureError, TypeError):
    """The upgrade returned something that cannot construct entities."""


class NotASubtype(StructureError):
    """The upgrade returned a class that does not honour the current contract."""


class InteractionError(DiscordRuntimeError):
    """An interaction response operation was issued out of sequence."""


class InteractionAlreadyResponded(InteractionError):
    """An initial response was attempted after one was already sent."""


class InteractionNotResponded(InteractionError):
    """A follow-up operation was attempted before any initial response."""


class RequestCancelled(DiscordRuntimeError):
    """A transport call was abandoned because its cancel signal fired."""
