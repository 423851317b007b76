from __future__ import annotations

import pytest

from discord_runtime.channels import TextChannel, ThreadChannel
from discord_runtime.errors import (
    InvalidKind,
    InvalidReturn,
    NotAFunction,
    NotASubtype,
    UnknownKind,
)
from discord_runtime.structures import DEFAULT_STRUCTURES, TypeRegistry, default_registry
from discord_runtime.types import ChannelType, EntityKind


def test_get_returns_defaults_for_every_kind(registry: TypeRegistry) -> None:
    for kind in EntityKind:
        assert registry.get(kind) is DEFAULT_STRUCTURES[kind]


def test_get_accepts_kind_values(registry: TypeRegistry) -> None:
    assert registry.get("text-channel") is TextChannel


@pytest.mark.parametrize("kind", ["TextChannel", "", 3, None])
def test_get_rejects_unknown_kinds(registry: TypeRegistry, kind: object) -> None:
    with pytest.raises(InvalidKind):
        registry.get(kind)  # type: ignore[arg-type]


def test_extend_binds_returned_subclass(registry: TypeRegistry) -> None:
    class CoolTextChannel(TextChannel):
        cool = True

    seen: list[type] = []

    def upgrade(base: type) -> type:
        seen.append(base)
        return CoolTextChannel

    assert registry.extend(EntityKind.TEXT_CHANNEL, upgrade) is CoolTextChannel
    assert seen == [TextChannel]
    assert registry.get(EntityKind.TEXT_CHANNEL) is CoolTextChannel
    assert registry.is_overridden(EntityKind.TEXT_CHANNEL)


def test_extend_chains_on_previous_override(registry: TypeRegistry) -> None:
    first = registry.extend(
        EntityKind.THREAD, lambda base: type("First", (base,), {})
    )
    second = registry.extend(
        EntityKind.THREAD, lambda base: type("Second", (base,), {})
    )
    assert issubclass(second, first)
    assert issubclass(second, ThreadChannel)


def test_extend_unknown_kind(registry: TypeRegistry) -> None:
    with pytest.raises(UnknownKind):
        registry.extend("Emoji", lambda base: base)


def test_extend_requires_callable(registry: TypeRegistry) -> None:
    with pytest.raises(NotAFunction):
        registry.extend(EntityKind.TEXT_CHANNEL, object())  # type: ignore[arg-type]


def test_extend_rejects_non_callable_return(registry: TypeRegistry) -> None:
    with pytest.raises(InvalidReturn):
        registry.extend(EntityKind.TEXT_CHANNEL, lambda base: "TextChannel")
    assert registry.get(EntityKind.TEXT_CHANNEL) is TextChannel


def test_extend_rejects_unrelated_class(registry: TypeRegistry) -> None:
    class Unrelated:
        def __init__(self, data, *, guild=None, client=None) -> None:
            pass

    with pytest.raises(NotASubtype):
        registry.extend(EntityKind.TEXT_CHANNEL, lambda base: Unrelated)
    assert registry.get(EntityKind.TEXT_CHANNEL) is TextChannel


def test_extend_rejects_sibling_structure(registry: TypeRegistry) -> None:
    # A default for another kind does not carry the text channel contract.
    with pytest.raises(NotASubtype):
        registry.extend(
            EntityKind.TEXT_CHANNEL, lambda base: DEFAULT_STRUCTURES[EntityKind.GUILD]
        )


def test_extend_rejects_plain_function(registry: TypeRegistry) -> None:
    with pytest.raises(NotASubtype):
        registry.extend(EntityKind.TEXT_CHANNEL, lambda base: (lambda data: base(data)))


def test_extend_accepts_structural_equivalent(registry: TypeRegistry) -> None:
    namespace = {
        name: getattr(TextChannel, name)
        for name in dir(TextChannel)
        if not name.startswith("_")
    }
    namespace["__init__"] = lambda self, data, *, guild=None, client=None: None
    Structural = type("Structural", (), namespace)

    assert registry.extend(EntityKind.TEXT_CHANNEL, lambda base: Structural) is Structural


def test_existing_entities_keep_their_class(factory, guild, registry) -> None:
    before = factory.create_channel(
        {"id": "201", "type": ChannelType.GUILD_TEXT, "guild_id": "100"}
    )
    Extended = registry.extend(
        EntityKind.TEXT_CHANNEL, lambda base: type("Extended", (base,), {})
    )
    after = factory.create_channel(
        {"id": "202", "type": ChannelType.GUILD_TEXT, "guild_id": "100"}
    )

    assert type(before) is TextChannel
    assert type(after) is Extended
    assert guild.channels.get(201) is before


def test_reset_restores_defaults(registry: TypeRegistry) -> None:
    registry.extend(EntityKind.TEXT_CHANNEL, lambda base: type("X", (base,), {}))
    registry.reset(EntityKind.TEXT_CHANNEL)
    assert registry.get(EntityKind.TEXT_CHANNEL) is TextChannel

    registry.extend(EntityKind.THREAD, lambda base: type("Y", (base,), {}))
    registry.reset()
    assert not registry.is_overridden(EntityKind.THREAD)


def test_registries_are_independent() -> None:
    a, b = TypeRegistry(), TypeRegistry()
    a.extend(EntityKind.TEXT_CHANNEL, lambda base: type("OnlyA", (base,), {}))
    assert b.get(EntityKind.TEXT_CHANNEL) is TextChannel


def test_constructor_overrides_are_validated() -> None:
    Tagged = type("Tagged", (TextChannel,), {})
    registry = TypeRegistry({EntityKind.TEXT_CHANNEL: Tagged})
    assert registry.get(EntityKind.TEXT_CHANNEL) is Tagged

    with pytest.raises(NotASubtype):
        TypeRegistry({EntityKind.TEXT_CHANNEL: dict})


def test_default_registry_is_shared() -> None:
    assert default_registry() is default_registry()
