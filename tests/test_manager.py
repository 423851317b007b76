from __future__ import annotations

import pytest

from discord_runtime.channels import AnnouncementChannel, DMChannel
from discord_runtime.manager import ChannelManager
from discord_runtime.types import ChannelType, LifecycleState


@pytest.fixture
def manager(factory) -> ChannelManager:
    return ChannelManager(factory)


def test_add_caches_private_channels(manager: ChannelManager) -> None:
    dm = manager.add({"id": "10", "type": ChannelType.DM, "recipients": [{"id": "4"}]})
    assert isinstance(dm, DMChannel)
    assert manager.get(10) is dm


def test_add_patches_existing_entity(manager, guild) -> None:
    first = manager.add({"id": "20", "type": ChannelType.GUILD_TEXT, "guild_id": "100", "name": "a"})
    second = manager.add({"id": "20", "type": ChannelType.GUILD_TEXT, "guild_id": "100", "name": "b", "topic": "t"})

    assert second is first
    assert first.name == "b"
    assert first.topic == "t"


def test_add_without_cache(manager, guild) -> None:
    channel = manager.add(
        {"id": "21", "type": ChannelType.GUILD_TEXT, "guild_id": "100"}, cache=False
    )
    assert channel is not None
    assert manager.get(21) is None
    assert guild.channels.get(21) is channel


def test_add_unrepresentable_returns_none(manager) -> None:
    assert manager.add({"id": "22", "type": ChannelType.GUILD_TEXT, "guild_id": "404"}) is None
    assert manager.get(22) is None


def test_probe_is_not_cached(manager, guild) -> None:
    channel = manager.add(
        {"id": "23", "type": ChannelType.GUILD_TEXT, "guild_id": "404"},
        allow_unknown_guild=True,
    )
    assert channel is not None
    assert manager.get(23) is None


def test_remove_marks_deleted_once(manager, guild) -> None:
    channel = manager.add({"id": "30", "type": ChannelType.GUILD_TEXT, "guild_id": "100"})

    assert manager.remove(30) is channel
    assert channel.state is LifecycleState.DELETED
    assert channel.deleted
    assert not channel.mark_deleted()
    assert guild.channels.get(30) is None
    assert manager.remove(30) is None


def test_remove_thread_leaves_parent_cache(manager, guild) -> None:
    thread = manager.add(
        {"id": "31", "type": ChannelType.PUBLIC_THREAD, "guild_id": "100", "parent_id": "200"}
    )
    parent = guild.channels.get(200)
    assert parent.threads.get(31) is thread

    manager.remove(31)
    assert 31 not in parent.threads
    assert thread.deleted


def test_removing_parent_deletes_its_threads(manager, guild) -> None:
    parent = manager.add({"id": "40", "type": ChannelType.GUILD_TEXT, "guild_id": "100"})
    thread = manager.add(
        {"id": "41", "type": ChannelType.PUBLIC_THREAD, "guild_id": "100", "parent_id": "40"}
    )

    manager.remove(40)
    assert parent.deleted
    assert thread.deleted
    assert manager.get(41) is None
    assert 41 not in guild.channels


def test_deleted_entity_is_replaced_not_patched(manager, guild) -> None:
    old = manager.add({"id": "50", "type": ChannelType.GUILD_TEXT, "guild_id": "100"})
    manager.remove(50)
    new = manager.add({"id": "50", "type": ChannelType.GUILD_TEXT, "guild_id": "100"})
    assert new is not old
    assert new.state is LifecycleState.ACTIVE


def test_type_change_rebuilds_entity(manager, guild) -> None:
    old = manager.add({"id": "60", "type": ChannelType.GUILD_TEXT, "guild_id": "100"})
    thread = manager.add(
        {"id": "61", "type": ChannelType.PUBLIC_THREAD, "guild_id": "100", "parent_id": "60"}
    )

    new = manager.add(
        {"id": "60", "type": ChannelType.GUILD_ANNOUNCEMENT, "guild_id": "100", "name": "news"}
    )

    assert type(new) is AnnouncementChannel
    assert new.type is ChannelType.GUILD_ANNOUNCEMENT
    assert new.name == "news"
    assert manager.get(60) is new
    assert guild.channels.get(60) is new
    assert new.threads.get(61) is thread
    assert thread.parent is new
    assert len(old.threads) == 0


def test_type_change_to_unknown_type_drops_entity(manager, guild) -> None:
    old = manager.add({"id": "62", "type": ChannelType.GUILD_TEXT, "guild_id": "100"})

    assert manager.add({"id": "62", "type": 99, "guild_id": "100"}) is None
    assert old.deleted
    assert manager.get(62) is None
    assert 62 not in guild.channels


def test_patch_refreshes_type(guild) -> None:
    channel = guild.channels.get(200)
    channel._patch({"type": ChannelType.GUILD_ANNOUNCEMENT})
    assert channel.type is ChannelType.GUILD_ANNOUNCEMENT
