"""HTTP-backed interaction transport."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

import anyio
import discord
from discord.http import Route

from .errors import RequestCancelled
from .logging import get_logger
from .types import InteractionExchange, InteractionResponseType, MessageRef, Payload

logger = get_logger(__name__)

__all__ = ["RouteTransport", "run_cancellable"]

T = TypeVar("T")


async def run_cancellable(
    call: Callable[[], Awaitable[T]],
    signal: anyio.Event | None = None,
) -> T:
    """Await `call()` unless `signal` fires first.

    Raises RequestCancelled when the signal wins. Whatever the remote side
    accepted before that is not undone.
    """
    if signal is None:
        return await call()
    if signal.is_set():
        raise RequestCancelled("Request cancelled before it was sent.")

    result: list[T] = []
    errors: list[Exception] = []

    async with anyio.create_task_group() as tg:

        async def watch() -> None:
            await signal.wait()
            tg.cancel_scope.cancel()

        tg.start_soon(watch)
        # Kept out of the task group so transport errors are not wrapped
        # in an ExceptionGroup.
        try:
            result.append(await call())
        except Exception as exc:
            errors.append(exc)
        tg.cancel_scope.cancel()

    if errors:
        raise errors[0]
    if not result:
        raise RequestCancelled("Request cancelled while in flight.")
    return result[0]


def _form(payload: Payload | None, files: Sequence[discord.File]) -> list[dict[str, Any]]:
    form: list[dict[str, Any]] = [
        {"name": "payload_json", "value": json.dumps(payload or {})}
    ]
    for index, file in enumerate(files):
        form.append(
            {
                "name": f"files[{index}]",
                "value": file.fp,
                "filename": file.filename,
                "content_type": "application/octet-stream",
            }
        )
    return form


class RouteTransport:
    """ResponseTransport over py-cord's HTTP client.

    Rate limiting, retries and authentication are the HTTP client's business.
    """

    def __init__(self, http: discord.http.HTTPClient) -> None:
        self._http = http

    async def _request(
        self,
        route: Route,
        *,
        payload: Payload | None = None,
        files: Sequence[discord.File] | None = None,
        params: dict[str, str] | None = None,
        signal: anyio.Event | None = None,
    ) -> Any:
        kwargs: dict[str, Any] = {}
        if params:
            kwargs["params"] = params
        if files:
            kwargs["form"] = _form(payload, files)
            kwargs["files"] = list(files)
        elif payload is not None:
            kwargs["json"] = payload

        async def call() -> Any:
            return await self._http.request(route, **kwargs)

        return await run_cancellable(call, signal)

    @staticmethod
    def _message_route(
        method: str, exchange: InteractionExchange, reference: MessageRef
    ) -> Route:
        return Route(
            method,
            "/webhooks/{webhook_id}/{webhook_token}/messages/{message_id}",
            webhook_id=exchange.application_id,
            webhook_token=exchange.token,
            message_id=reference,
        )

    async def post_callback(
        self,
        exchange: InteractionExchange,
        kind: InteractionResponseType,
        data: Payload | None = None,
        *,
        files: Sequence[discord.File] | None = None,
        signal: anyio.Event | None = None,
    ) -> None:
        route = Route(
            "POST",
            "/interactions/{interaction_id}/{interaction_token}/callback",
            interaction_id=exchange.interaction_id,
            interaction_token=exchange.token,
        )
        body: Payload = {"type": int(kind)}
        if data is not None:
            body["data"] = data
        await self._request(route, payload=body, files=files, signal=signal)
        logger.debug(
            "transport.callback_sent",
            interaction_id=exchange.interaction_id,
            kind=int(kind),
        )

    async def execute_follow_up(
        self,
        exchange: InteractionExchange,
        payload: Payload,
        *,
        files: Sequence[discord.File] | None = None,
        signal: anyio.Event | None = None,
    ) -> Payload:
        route = Route(
            "POST",
            "/webhooks/{webhook_id}/{webhook_token}",
            webhook_id=exchange.application_id,
            webhook_token=exchange.token,
        )
        return await self._request(
            route,
            payload=payload,
            files=files,
            params={"wait": "true"},
            signal=signal,
        )

    async def edit_message(
        self,
        exchange: InteractionExchange,
        reference: MessageRef,
        payload: Payload,
        *,
        files: Sequence[discord.File] | None = None,
        signal: anyio.Event | None = None,
    ) -> Payload:
        route = self._message_route("PATCH", exchange, reference)
        return await self._request(route, payload=payload, files=files, signal=signal)

    async def get_message(
        self,
        exchange: InteractionExchange,
        reference: MessageRef,
        *,
        signal: anyio.Event | None = None,
    ) -> Payload:
        route = self._message_route("GET", exchange, reference)
        return await self._request(route, signal=signal)

    async def delete_message(
        self,
        exchange: InteractionExchange,
        reference: MessageRef,
        *,
        signal: anyio.Event | None = None,
    ) -> None:
        route = self._message_route("DELETE", exchange, reference)
        await self._request(route, signal=signal)
