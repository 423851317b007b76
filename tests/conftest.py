from __future__ import annotations

from typing import Any

import pytest

from discord_runtime.cache import EntityCache
from discord_runtime.factory import EntityFactory
from discord_runtime.structures import TypeRegistry
from discord_runtime.types import ChannelType


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class RecordingTransport:
    """ResponseTransport that records every call instead of sending it."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.fail_with: Exception | None = None
        self._next_id = 900

    def _record(self, name: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((name, args, kwargs))
        if self.fail_with is not None:
            raise self.fail_with

    @property
    def names(self) -> list[str]:
        return [name for name, _, _ in self.calls]

    async def post_callback(self, exchange, kind, data=None, *, files=None, signal=None):
        self._record("post_callback", exchange, kind, data, files=files, signal=signal)

    async def execute_follow_up(self, exchange, payload, *, files=None, signal=None):
        self._record("execute_follow_up", exchange, payload, files=files, signal=signal)
        self._next_id += 1
        return {"id": str(self._next_id), **payload}

    async def edit_message(self, exchange, reference, payload, *, files=None, signal=None):
        self._record("edit_message", exchange, reference, payload, files=files, signal=signal)
        return {"id": str(reference), **payload}

    async def get_message(self, exchange, reference, *, signal=None):
        self._record("get_message", exchange, reference, signal=signal)
        return {"id": str(reference)}

    async def delete_message(self, exchange, reference, *, signal=None):
        self._record("delete_message", exchange, reference, signal=signal)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def registry() -> TypeRegistry:
    return TypeRegistry()


@pytest.fixture
def guilds() -> EntityCache:
    return EntityCache()


@pytest.fixture
def factory(registry: TypeRegistry, guilds: EntityCache) -> EntityFactory:
    return EntityFactory(registry, guilds)


@pytest.fixture
def guild(factory: EntityFactory):
    return factory.create_guild(
        {
            "id": "100",
            "name": "workshop",
            "channels": [
                {"id": "200", "type": ChannelType.GUILD_TEXT, "name": "general"},
                {"id": "300", "type": ChannelType.GUILD_FORUM, "name": "ideas"},
            ],
        }
    )
