"""Conversions between wire and local shapes for forum channel fields."""

from __future__ import annotations

from typing import Any

import msgspec

from .types import DefaultReaction, ForumTag, TagEmoji


class APIForumTag(msgspec.Struct):
    """A forum tag as sent by the API."""

    name: str
    id: int | str | None = None
    moderated: bool = False
    emoji_id: int | str | None = None
    emoji_name: str | None = None


class APIDefaultReaction(msgspec.Struct):
    emoji_id: int | str | None = None
    emoji_name: str | None = None


def _snowflake(value: int | str | None) -> int | None:
    return None if value is None else int(value)


def decode_forum_tag(tag: dict[str, Any] | APIForumTag) -> ForumTag:
    """Fold `emoji_id`/`emoji_name` into a single nullable emoji."""
    if not isinstance(tag, APIForumTag):
        tag = msgspec.convert(tag, type=APIForumTag)
    emoji = None
    if tag.emoji_id is not None or tag.emoji_name is not None:
        emoji = TagEmoji(id=_snowflake(tag.emoji_id), name=tag.emoji_name)
    return ForumTag(
        id=_snowflake(tag.id),
        name=tag.name,
        moderated=tag.moderated,
        emoji=emoji,
    )


def encode_forum_tag(tag: ForumTag) -> dict[str, Any]:
    """Split the local emoji back into the API's two nullable fields."""
    return {
        "id": None if tag.id is None else str(tag.id),
        "name": tag.name,
        "moderated": tag.moderated,
        "emoji_id": None
        if tag.emoji is None or tag.emoji.id is None
        else str(tag.emoji.id),
        "emoji_name": None if tag.emoji is None else tag.emoji.name,
    }


def decode_default_reaction(
    reaction: dict[str, Any] | APIDefaultReaction,
) -> DefaultReaction:
    if not isinstance(reaction, APIDefaultReaction):
        reaction = msgspec.convert(reaction, type=APIDefaultReaction)
    return DefaultReaction(id=_snowflake(reaction.emoji_id), name=reaction.emoji_name)


def encode_default_reaction(reaction: DefaultReaction) -> dict[str, Any]:
    return {
        "emoji_id": None if reaction.id is None else str(reaction.id),
        "emoji_name": reaction.name,
    }
