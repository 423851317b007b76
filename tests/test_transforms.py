from __future__ import annotations

import msgspec
import pytest

from discord_runtime.transforms import (
    decode_default_reaction,
    decode_forum_tag,
    encode_default_reaction,
    encode_forum_tag,
)
from discord_runtime.types import DefaultReaction, ForumTag, TagEmoji


@pytest.mark.parametrize(
    "wire",
    [
        {"id": "1", "name": "bug", "moderated": False, "emoji_id": "42", "emoji_name": None},
        {"id": "2", "name": "help", "moderated": True, "emoji_id": None, "emoji_name": "❓"},
        {"id": "3", "name": "misc", "moderated": False, "emoji_id": None, "emoji_name": None},
    ],
)
def test_forum_tag_wire_shape_survives(wire: dict) -> None:
    assert encode_forum_tag(decode_forum_tag(wire)) == wire


def test_forum_tag_emoji_folding() -> None:
    tag = decode_forum_tag({"id": "1", "name": "bug", "moderated": False, "emoji_id": "42"})
    assert tag.emoji == TagEmoji(id=42, name=None)

    bare = decode_forum_tag({"id": "3", "name": "misc", "moderated": False})
    assert bare.emoji is None


def test_forum_tag_local_shape_survives() -> None:
    tag = ForumTag(id=9, name="news", moderated=True, emoji=TagEmoji(name="📰"))
    assert decode_forum_tag(encode_forum_tag(tag)) == tag


def test_new_tag_without_id() -> None:
    tag = ForumTag(id=None, name="fresh")
    assert encode_forum_tag(tag) == {
        "id": None,
        "name": "fresh",
        "moderated": False,
        "emoji_id": None,
        "emoji_name": None,
    }


def test_forum_tag_requires_name() -> None:
    with pytest.raises(msgspec.ValidationError):
        decode_forum_tag({"id": "1"})


def test_default_reaction_codec() -> None:
    wire = {"emoji_id": None, "emoji_name": "👍"}
    reaction = decode_default_reaction(wire)

    assert reaction == DefaultReaction(id=None, name="👍")
    assert encode_default_reaction(reaction) == wire
    assert decode_default_reaction(encode_default_reaction(DefaultReaction(id=5))) == (
        DefaultReaction(id=5)
    )


def test_empty_tag_emoji_is_no_emoji() -> None:
    tag = ForumTag(id=4, name="plain", emoji=TagEmoji())

    assert tag.emoji is None
    assert encode_forum_tag(tag)["emoji_name"] is None
    assert decode_forum_tag(encode_forum_tag(tag)) == tag
