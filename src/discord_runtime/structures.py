"""Registry of the classes used to materialize each entity kind.

Overrides let callers substitute their own subclasses:

    registry.extend(
        EntityKind.TEXT_CHANNEL,
        lambda TextChannel: type("CoolTextChannel", (TextChannel,), {"cool": True}),
    )

Install overrides before the client starts receiving events. Entities built
before an override keep their original class, so extending late leaves the
cache holding a mix of old and new types for the same kind.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from . import channels
from .errors import InvalidKind, InvalidReturn, NotAFunction, NotASubtype, UnknownKind
from .logging import get_logger
from .types import EntityKind

logger = get_logger(__name__)

__all__ = ["DEFAULT_STRUCTURES", "TypeRegistry", "default_registry"]

DEFAULT_STRUCTURES: Mapping[EntityKind, type] = MappingProxyType(
    {
        EntityKind.GUILD: channels.Guild,
        EntityKind.TEXT_CHANNEL: channels.TextChannel,
        EntityKind.VOICE_CHANNEL: channels.VoiceChannel,
        EntityKind.CATEGORY_CHANNEL: channels.CategoryChannel,
        EntityKind.ANNOUNCEMENT_CHANNEL: channels.AnnouncementChannel,
        EntityKind.STAGE_CHANNEL: channels.StageChannel,
        EntityKind.THREAD: channels.ThreadChannel,
        EntityKind.DIRECTORY_CHANNEL: channels.DirectoryChannel,
        EntityKind.FORUM_CHANNEL: channels.ForumChannel,
        EntityKind.MEDIA_CHANNEL: channels.MediaChannel,
        EntityKind.DIRECT_MESSAGE: channels.DMChannel,
        EntityKind.PARTIAL_GROUP_CONVERSATION: channels.PartialGroupDMChannel,
    }
)


def _coerce_kind(kind: Any) -> EntityKind | None:
    if isinstance(kind, EntityKind):
        return kind
    if isinstance(kind, str):
        try:
            return EntityKind(kind)
        except ValueError:
            return None
    return None


def _public_contract(cls: type) -> set[str]:
    return {name for name in dir(cls) if not name.startswith("_")}


def _honours_contract(candidate: type, base: type) -> bool:
    """Whether `candidate` can stand in wherever `base` is expected."""
    if issubclass(candidate, base):
        return True
    if not _public_contract(base) <= _public_contract(candidate):
        return False
    try:
        base_params = inspect.signature(base).parameters
        candidate_sig = inspect.signature(candidate)
    except (TypeError, ValueError):
        return False
    # The factory passes the payload positionally and everything else by keyword.
    probe_kwargs = {
        name: None
        for name, param in base_params.items()
        if param.kind is inspect.Parameter.KEYWORD_ONLY
    }
    try:
        candidate_sig.bind(None, **probe_kwargs)
    except TypeError:
        return False
    return True


class TypeRegistry:
    """Maps each entity kind to the class currently responsible for it."""

    def __init__(self, overrides: Mapping[EntityKind, type] | None = None) -> None:
        self._structures: dict[EntityKind, type] = dict(DEFAULT_STRUCTURES)
        for kind, structure in (overrides or {}).items():
            self.extend(kind, lambda _base, structure=structure: structure)

    def get(self, kind: EntityKind | str) -> type:
        """Return the class bound to `kind`."""
        resolved = _coerce_kind(kind)
        if resolved is None:
            raise InvalidKind(f"{kind!r} is not a valid entity kind.")
        return self._structures[resolved]

    def extend(
        self,
        kind: EntityKind | str,
        upgrade: Callable[[type], type],
    ) -> type:
        """Replace the class bound to `kind` with `upgrade(current)`.

        The returned class must implement everything the current class does.
        On any failure the binding is left untouched.
        """
        resolved = _coerce_kind(kind)
        if resolved is None:
            raise UnknownKind(f"{kind!r} is not a valid extensible structure.")
        if not callable(upgrade):
            raise NotAFunction(
                "The upgrade argument must be a function that returns the extended "
                f"structure class (received {type(upgrade).__name__})."
            )

        current = self._structures[resolved]
        extended = upgrade(current)
        if not callable(extended):
            raise InvalidReturn(
                "The upgrade function must return the extended structure class "
                f"(received {type(extended).__name__})."
            )
        if not isinstance(extended, type) or not _honours_contract(extended, current):
            name = getattr(extended, "__name__", "unnamed")
            raise NotASubtype(
                "The class returned from the upgrade function must extend the "
                f"existing structure class (received {name}; expected extension "
                f"of {current.__name__})."
            )

        self._structures[resolved] = extended
        logger.info(
            "structure.extended",
            kind=resolved.value,
            base=current.__name__,
            structure=extended.__name__,
        )
        return extended

    def reset(self, kind: EntityKind | str | None = None) -> None:
        """Restore the shipped default for `kind`, or for every kind."""
        if kind is None:
            self._structures = dict(DEFAULT_STRUCTURES)
            return
        resolved = _coerce_kind(kind)
        if resolved is None:
            raise UnknownKind(f"{kind!r} is not a valid extensible structure.")
        self._structures[resolved] = DEFAULT_STRUCTURES[resolved]

    def defaults(self) -> Mapping[EntityKind, type]:
        return DEFAULT_STRUCTURES

    def is_overridden(self, kind: EntityKind | str) -> bool:
        resolved = _coerce_kind(kind)
        if resolved is None:
            raise InvalidKind(f"{kind!r} is not a valid entity kind.")
        return self._structures[resolved] is not DEFAULT_STRUCTURES[resolved]


_default_registry: TypeRegistry | None = None


def default_registry() -> TypeRegistry:
    """Process-wide registry for callers that do not inject their own."""
    global _default_registry
    if _default_registry is None:
        _default_registry = TypeRegistry()
    return _default_registry
