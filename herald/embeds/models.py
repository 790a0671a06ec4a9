"""Notification message models mirroring Discord's webhook payload.

Every model is a frozen ``msgspec.Struct`` with ``omit_defaults`` so
``msgspec.to_builtins(message)`` yields the Discord JSON shape directly,
without ``null`` members for unset optional parts.
"""

from __future__ import annotations

import msgspec

__all__ = [
    "Embed",
    "EmbedAuthor",
    "EmbedField",
    "EmbedFooter",
    "NotificationMessage",
]


class EmbedField(msgspec.Struct, kw_only=True, frozen=True, omit_defaults=True):
    """A name/value pair rendered inside an embed.

    Attributes
    ----------
    name
        Field label.
    value
        Field content.
    inline
        Hint that the field may share a row with its neighbours.

    """

    name: str
    value: str
    inline: bool = False


class EmbedFooter(msgspec.Struct, kw_only=True, frozen=True, omit_defaults=True):
    """Small print at the bottom of an embed."""

    text: str
    icon_url: str | None = None


class EmbedAuthor(msgspec.Struct, kw_only=True, frozen=True, omit_defaults=True):
    """Author line at the top of an embed."""

    name: str
    url: str | None = None
    icon_url: str | None = None


class Embed(msgspec.Struct, kw_only=True, frozen=True, omit_defaults=True):
    """The structured block of a notification.

    Attributes
    ----------
    title
        Headline naming the entity and what happened to it.
    description
        Body text; change lines for updates.
    color
        RGB colour as an integer.
    url
        Deep link into Linear.
    fields
        Ordered name/value pairs.
    footer
        Optional footer.
    author
        Optional author line.
    timestamp
        ISO 8601 timestamp shown by Discord.

    """

    title: str
    description: str
    color: int
    url: str | None = None
    fields: tuple[EmbedField, ...] = ()
    footer: EmbedFooter | None = None
    author: EmbedAuthor | None = None
    timestamp: str | None = None

    def field_value(self, name: str) -> str | None:
        """Return the value of the first field called ``name``."""
        for field in self.fields:
            if field.name == name:
                return field.value
        return None


class NotificationMessage(
    msgspec.Struct, kw_only=True, frozen=True, omit_defaults=True
):
    """A complete outbound message: summary line plus embeds.

    Attributes
    ----------
    content
        Plain-text summary line.
    embeds
        Structured blocks, normally exactly one.
    username
        Display name override for the webhook.
    avatar_url
        Avatar override for the webhook.

    """

    content: str
    embeds: tuple[Embed, ...] = ()
    username: str | None = None
    avatar_url: str | None = None
