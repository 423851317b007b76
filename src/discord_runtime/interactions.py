"""Interaction response sequencing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from .errors import InteractionAlreadyResponded, InteractionNotResponded
from .logging import get_logger
from .types import (
    ORIGINAL_MESSAGE,
    REPLYABLE_STATES,
    InteractionExchange,
    InteractionResponseType,
    MessageRef,
    Payload,
    ResponseState,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    import anyio
    import discord

logger = get_logger(__name__)

__all__ = ["EPHEMERAL_FLAG", "InteractionResponseController", "ResponseTransport"]

EPHEMERAL_FLAG = 1 << 6


class ResponseTransport(Protocol):
    """Outbound calls an interaction exchange needs.

    Implementations raise their own errors; the controller passes them through.
    `signal`, when set, asks the implementation to abandon the request.
    """

    async def post_callback(
        self,
        exchange: InteractionExchange,
        kind: InteractionResponseType,
        data: Payload | None = None,
        *,
        files: Sequence[discord.File] | None = None,
        signal: anyio.Event | None = None,
    ) -> None: ...

    async def execute_follow_up(
        self,
        exchange: InteractionExchange,
        payload: Payload,
        *,
        files: Sequence[discord.File] | None = None,
        signal: anyio.Event | None = None,
    ) -> Payload: ...

    async def edit_message(
        self,
        exchange: InteractionExchange,
        reference: MessageRef,
        payload: Payload,
        *,
        files: Sequence[discord.File] | None = None,
        signal: anyio.Event | None = None,
    ) -> Payload: ...

    async def get_message(
        self,
        exchange: InteractionExchange,
        reference: MessageRef,
        *,
        signal: anyio.Event | None = None,
    ) -> Payload: ...

    async def delete_message(
        self,
        exchange: InteractionExchange,
        reference: MessageRef,
        *,
        signal: anyio.Event | None = None,
    ) -> None: ...


def _with_ephemeral(payload: Payload | None, ephemeral: bool | None) -> Payload | None:
    if not ephemeral:
        return payload
    data = dict(payload or {})
    data["flags"] = int(data.get("flags", 0)) | EPHEMERAL_FLAG
    return data


class InteractionResponseController:
    """Enforces the order of responses for a single interaction.

    Exactly one initial callback may be sent. Replies, deferrals and
    component updates leave the token usable for follow-ups and edits;
    autocomplete results, modals and premium prompts end the exchange.

    Out-of-sequence calls fail locally with InteractionAlreadyResponded or
    InteractionNotResponded and never reach the transport. State moves only
    after the transport call returns, so a failed call can be retried. There
    is no lock: callers sharing a controller must order their own calls.
    """

    def __init__(
        self,
        exchange: InteractionExchange,
        transport: ResponseTransport,
        *,
        default_ephemeral: bool = False,
    ) -> None:
        self._exchange = exchange
        self._transport = transport
        self._default_ephemeral = default_ephemeral
        self._state = ResponseState.UNACKNOWLEDGED

    @property
    def exchange(self) -> InteractionExchange:
        return self._exchange

    @property
    def state(self) -> ResponseState:
        return self._state

    def is_done(self) -> bool:
        """Whether the initial callback has been sent."""
        return self._state is not ResponseState.UNACKNOWLEDGED

    def _require_unacknowledged(self, operation: str) -> None:
        if self._state is not ResponseState.UNACKNOWLEDGED:
            raise InteractionAlreadyResponded(
                f"Cannot {operation}: interaction {self._exchange.interaction_id} "
                f"already has an initial response ({self._state.value})."
            )

    def _require_replyable(self, operation: str) -> None:
        if self._state not in REPLYABLE_STATES:
            raise InteractionNotResponded(
                f"Cannot {operation}: interaction {self._exchange.interaction_id} "
                f"has no message to address ({self._state.value})."
            )

    def _ephemeral(self, ephemeral: bool | None) -> bool:
        return self._default_ephemeral if ephemeral is None else ephemeral

    async def _callback(
        self,
        operation: str,
        kind: InteractionResponseType,
        data: Payload | None,
        next_state: ResponseState,
        *,
        files: Sequence[discord.File] | None = None,
        signal: anyio.Event | None = None,
    ) -> None:
        self._require_unacknowledged(operation)
        await self._transport.post_callback(
            self._exchange, kind, data, files=files, signal=signal
        )
        self._state = next_state
        logger.debug(
            "interaction.callback",
            interaction_id=self._exchange.interaction_id,
            kind=kind.name.lower(),
            state=next_state.value,
        )

    async def reply(
        self,
        payload: Payload,
        *,
        files: Sequence[discord.File] | None = None,
        ephemeral: bool | None = None,
        signal: anyio.Event | None = None,
    ) -> None:
        """Respond immediately with a channel message."""
        await self._callback(
            "reply",
            InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
            _with_ephemeral(payload, self._ephemeral(ephemeral)),
            ResponseState.RESPONDED,
            files=files,
            signal=signal,
        )

    async def defer(
        self,
        payload: Payload | None = None,
        *,
        ephemeral: bool | None = None,
        signal: anyio.Event | None = None,
    ) -> None:
        """Acknowledge now and show a loading state; reply later via edit_reply."""
        await self._callback(
            "defer",
            InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE,
            _with_ephemeral(payload, self._ephemeral(ephemeral)),
            ResponseState.DEFERRED,
            signal=signal,
        )

    async def defer_update(self, *, signal: anyio.Event | None = None) -> None:
        """Acknowledge a component interaction without changing its message."""
        await self._callback(
            "defer update",
            InteractionResponseType.DEFERRED_MESSAGE_UPDATE,
            None,
            ResponseState.DEFERRED,
            signal=signal,
        )

    async def update_message(
        self,
        payload: Payload,
        *,
        files: Sequence[discord.File] | None = None,
        signal: anyio.Event | None = None,
    ) -> None:
        """Edit the message a component interaction was triggered on."""
        await self._callback(
            "update message",
            InteractionResponseType.UPDATE_MESSAGE,
            payload,
            ResponseState.RESPONDED,
            files=files,
            signal=signal,
        )

    async def send_autocomplete(
        self,
        choices: Sequence[dict[str, Any]],
        *,
        signal: anyio.Event | None = None,
    ) -> None:
        await self._callback(
            "send autocomplete result",
            InteractionResponseType.APPLICATION_COMMAND_AUTOCOMPLETE_RESULT,
            {"choices": list(choices)},
            ResponseState.AUTOCOMPLETE_SENT,
            signal=signal,
        )

    async def send_modal(
        self, modal: Payload, *, signal: anyio.Event | None = None
    ) -> None:
        await self._callback(
            "send modal",
            InteractionResponseType.MODAL,
            modal,
            ResponseState.MODAL_SENT,
            signal=signal,
        )

    async def send_premium_required(self, *, signal: anyio.Event | None = None) -> None:
        await self._callback(
            "send premium required",
            InteractionResponseType.PREMIUM_REQUIRED,
            None,
            ResponseState.PREMIUM_REQUIRED_SENT,
            signal=signal,
        )

    async def follow_up(
        self,
        payload: Payload,
        *,
        files: Sequence[discord.File] | None = None,
        ephemeral: bool | None = None,
        signal: anyio.Event | None = None,
    ) -> Payload:
        """Send an additional message and return it as created."""
        self._require_replyable("send follow-up")
        message = await self._transport.execute_follow_up(
            self._exchange,
            _with_ephemeral(payload, self._ephemeral(ephemeral)) or {},
            files=files,
            signal=signal,
        )
        logger.debug(
            "interaction.follow_up",
            interaction_id=self._exchange.interaction_id,
            message_id=message.get("id"),
        )
        return message

    async def edit_reply(
        self,
        payload: Payload,
        message: MessageRef = ORIGINAL_MESSAGE,
        *,
        files: Sequence[discord.File] | None = None,
        signal: anyio.Event | None = None,
    ) -> Payload:
        """Edit the original reply, or a follow-up when `message` is an id."""
        self._require_replyable("edit reply")
        edited = await self._transport.edit_message(
            self._exchange, message, payload, files=files, signal=signal
        )
        if message == ORIGINAL_MESSAGE:
            # Editing a deferred response is what delivers it.
            self._state = ResponseState.RESPONDED
        return edited

    async def fetch_reply(
        self,
        message: MessageRef = ORIGINAL_MESSAGE,
        *,
        signal: anyio.Event | None = None,
    ) -> Payload:
        self._require_replyable("fetch reply")
        return await self._transport.get_message(self._exchange, message, signal=signal)

    async def delete_reply(
        self,
        message: MessageRef = ORIGINAL_MESSAGE,
        *,
        signal: anyio.Event | None = None,
    ) -> None:
        """Delete the original reply or a follow-up.

        The exchange stays open; follow-ups remain possible afterwards.
        """
        self._require_replyable("delete reply")
        await self._transport.delete_message(self._exchange, message, signal=signal)
        logger.debug(
            "interaction.reply_deleted",
            interaction_id=self._exchange.interaction_id,
            message=str(message),
        )
