"""Entity caches and the rules for what gets stored where."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from .logging import get_logger
from .types import EntityKind

if TYPE_CHECKING:
    from .channels import BaseChannel, Guild

logger = get_logger(__name__)

T = TypeVar("T")

THREAD_KINDS = frozenset({EntityKind.THREAD})
PRIVATE_KINDS = frozenset(
    {EntityKind.DIRECT_MESSAGE, EntityKind.PARTIAL_GROUP_CONVERSATION}
)


class EntityCache(Generic[T]):
    """Id-keyed cache that evicts its oldest entries past `limit`.

    A limit of None keeps everything; a limit of 0 stores nothing.
    """

    def __init__(self, limit: int | None = None) -> None:
        self._items: dict[int, T] = {}
        self._limit = limit

    @property
    def limit(self) -> int | None:
        return self._limit

    def get(self, entity_id: int | None) -> T | None:
        if entity_id is None:
            return None
        return self._items.get(entity_id)

    def set(self, entity_id: int, entity: T) -> None:
        if self._limit == 0:
            return
        # Re-inserting moves the entry to the young end.
        self._items.pop(entity_id, None)
        self._items[entity_id] = entity
        if self._limit is not None:
            while len(self._items) > self._limit:
                evicted = next(iter(self._items))
                del self._items[evicted]
                logger.debug("cache.evicted", entity_id=evicted, limit=self._limit)

    def remove(self, entity_id: int) -> T | None:
        return self._items.pop(entity_id, None)

    def values(self) -> list[T]:
        return list(self._items.values())

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._items

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"<EntityCache size={len(self._items)} limit={self._limit}>"


@dataclass(frozen=True, slots=True)
class CacheTarget:
    """One cache a freshly built entity should be stored in."""

    owner: str
    cache: EntityCache[BaseChannel]


class CacheInsertionPolicy:
    """Decides which caches a newly constructed channel is inserted into.

    - threads go into their parent's thread cache and the guild's channels
    - other guild channels go into the guild's channels
    - private channels have no container; the channel manager owns them
    - probing an unknown guild stores nothing at all
    """

    def targets(
        self,
        kind: EntityKind,
        channel: BaseChannel,
        guild: Guild | None,
        *,
        allow_unknown_guild: bool = False,
    ) -> list[CacheTarget]:
        if allow_unknown_guild or kind in PRIVATE_KINDS or guild is None:
            return []
        targets: list[CacheTarget] = []
        if kind in THREAD_KINDS:
            parent = getattr(channel, "parent", None)
            threads = getattr(parent, "threads", None)
            if threads is not None:
                targets.append(CacheTarget(owner="parent", cache=threads))
        targets.append(CacheTarget(owner="guild", cache=guild.channels))
        return targets

    def apply(
        self,
        kind: EntityKind,
        channel: BaseChannel,
        guild: Guild | None,
        *,
        allow_unknown_guild: bool = False,
    ) -> int:
        """Insert `channel` everywhere it belongs; returns the number of inserts."""
        targets = self.targets(
            kind, channel, guild, allow_unknown_guild=allow_unknown_guild
        )
        for target in targets:
            target.cache.set(channel.id, channel)
        return len(targets)
