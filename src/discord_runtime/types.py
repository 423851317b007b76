"""Type definitions for the Discord runtime."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    import discord


class ChannelType(enum.IntEnum):
    """Channel discriminants as they appear in the `type` field on the wire."""

    GUILD_TEXT = 0
    DM = 1
    GUILD_VOICE = 2
    GROUP_DM = 3
    GUILD_CATEGORY = 4
    GUILD_ANNOUNCEMENT = 5
    ANNOUNCEMENT_THREAD = 10
    PUBLIC_THREAD = 11
    PRIVATE_THREAD = 12
    GUILD_STAGE_VOICE = 13
    GUILD_DIRECTORY = 14
    GUILD_FORUM = 15
    GUILD_MEDIA = 16


THREAD_CHANNEL_TYPES: Final = frozenset(
    {
        ChannelType.ANNOUNCEMENT_THREAD,
        ChannelType.PUBLIC_THREAD,
        ChannelType.PRIVATE_THREAD,
    }
)
VOICE_CHANNEL_TYPES: Final = frozenset(
    {ChannelType.GUILD_VOICE, ChannelType.GUILD_STAGE_VOICE}
)


class EntityKind(str, enum.Enum):
    """Symbolic names of the structures the registry can hand out."""

    GUILD = "guild"
    TEXT_CHANNEL = "text-channel"
    VOICE_CHANNEL = "voice-channel"
    CATEGORY_CHANNEL = "category-channel"
    ANNOUNCEMENT_CHANNEL = "announcement-channel"
    STAGE_CHANNEL = "stage-channel"
    THREAD = "thread"
    DIRECTORY_CHANNEL = "directory-channel"
    FORUM_CHANNEL = "forum-channel"
    MEDIA_CHANNEL = "media-channel"
    DIRECT_MESSAGE = "direct-message"
    PARTIAL_GROUP_CONVERSATION = "partial-group-conversation"


class LifecycleState(enum.Enum):
    ACTIVE = "active"
    DELETED = "deleted"


class InteractionResponseType(enum.IntEnum):
    """Callback types accepted by the interaction callback endpoint."""

    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5
    DEFERRED_MESSAGE_UPDATE = 6
    UPDATE_MESSAGE = 7
    APPLICATION_COMMAND_AUTOCOMPLETE_RESULT = 8
    MODAL = 9
    PREMIUM_REQUIRED = 10


class ResponseState(enum.Enum):
    """Where an interaction exchange is in the response protocol."""

    UNACKNOWLEDGED = "unacknowledged"
    DEFERRED = "deferred"
    RESPONDED = "responded"
    AUTOCOMPLETE_SENT = "autocomplete_sent"
    MODAL_SENT = "modal_sent"
    PREMIUM_REQUIRED_SENT = "premium_required_sent"


# States after which the token can still address messages.
REPLYABLE_STATES: Final = frozenset({ResponseState.DEFERRED, ResponseState.RESPONDED})


ORIGINAL_MESSAGE: Final = "@original"

# A concrete message id, or ORIGINAL_MESSAGE for the initial reply.
MessageRef = int | str


@dataclass(frozen=True, slots=True)
class InteractionExchange:
    """Identifiers for one interaction's request/response lifecycle.

    The initial callback is addressed by (interaction_id, token); every
    follow-up operation by (application_id, token).
    """

    interaction_id: int
    application_id: int
    token: str

    @classmethod
    def from_interaction(cls, interaction: discord.Interaction) -> InteractionExchange:
        return cls(
            interaction_id=interaction.id,
            application_id=interaction.application_id,
            token=interaction.token,
        )

    def __repr__(self) -> str:
        # Tokens are credentials for the lifetime of the exchange.
        return (
            f"InteractionExchange(interaction_id={self.interaction_id}, "
            f"application_id={self.application_id}, token='***')"
        )


@dataclass(frozen=True, slots=True)
class TagEmoji:
    """Emoji attached to a forum tag; at most one of id and name is set."""

    id: int | None = None
    name: str | None = None


@dataclass(frozen=True, slots=True)
class ForumTag:
    """A forum tag in local shape."""

    id: int | None
    name: str
    moderated: bool = False
    emoji: TagEmoji | None = None

    def __post_init__(self) -> None:
        # An emoji with neither id nor name is no emoji on the wire.
        if self.emoji is not None and self.emoji.id is None and self.emoji.name is None:
            object.__setattr__(self, "emoji", None)


@dataclass(frozen=True, slots=True)
class DefaultReaction:
    """Default reaction emoji of a forum channel in local shape."""

    id: int | None = None
    name: str | None = None


# Raw wire payload as received from the gateway or REST API.
Payload = dict[str, Any]
