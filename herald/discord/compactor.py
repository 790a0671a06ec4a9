"""Fit notification messages inside Discord's size limits.

Compaction is lossy and order-preserving. Text parts are truncated
independently, empty fields are dropped, surplus embeds are discarded from
the end, and when the combined embed text still exceeds the message ceiling
the first embed that does not fit is shrunk or dropped together with every
embed after it. Earlier embeds are never sacrificed for later ones.

Compacting an already compacted message returns an equal message.
"""

from __future__ import annotations

import typing as typ

import msgspec

from herald.discord.limits import DISCORD_LIMITS, DiscordLimits
from herald.embeds.style import ELLIPSIS

if typ.TYPE_CHECKING:
    from herald.embeds.models import (
        Embed,
        EmbedAuthor,
        EmbedField,
        EmbedFooter,
        NotificationMessage,
    )

__all__ = ["MessageCompactor", "embed_size", "truncate_text"]

# A word boundary further back than this share of the limit is ignored.
_BOUNDARY_RATIO = 0.8

# Shrinking an embed is not attempted below this remaining budget.
_MIN_SHRINK_BUDGET = 100
_SHRINK_DESCRIPTION_SHARE = 0.6
_SHRINK_FIELDS_SHARE = 0.3
_SHRINK_MAX_FIELDS = 5
_SHRINK_FIELD_NAME = 50
_SHRINK_FIELD_VALUE = 100
_SHRINK_FOOTER = 100


def truncate_text(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters.

    The cut prefers the last space or newline before the cutoff as long as
    that boundary lies within the final fifth of the kept text. An ellipsis
    marks every truncation, except when ``limit`` leaves no room for one.

    Parameters
    ----------
    text
        Text to shorten.
    limit
        Maximum length of the result, ellipsis included.

    Returns
    -------
    str
        ``text`` unchanged when it already fits, otherwise the shortened text.

    Examples
    --------
    >>> truncate_text("the quick brown fox", 12)
    'the quick...'

    """
    if len(text) <= limit:
        return text
    if limit <= len(ELLIPSIS):
        return text[: max(limit, 0)]

    room = limit - len(ELLIPSIS)
    head = text[:room]
    boundary = max(head.rfind(" "), head.rfind("\n"))
    if boundary > room * _BOUNDARY_RATIO:
        head = head[:boundary]
    return f"{head}{ELLIPSIS}"


def embed_size(embed: Embed) -> int:
    """Return the characters ``embed`` contributes to the message ceiling."""
    size = len(embed.title) + len(embed.description)
    if embed.footer is not None:
        size += len(embed.footer.text)
    return size + sum(len(field.name) + len(field.value) for field in embed.fields)


def _has_text(field: EmbedField) -> bool:
    return bool(field.name.strip()) and bool(field.value.strip())


def _clip_fields(
    fields: typ.Iterable[EmbedField], name_limit: int, value_limit: int
) -> list[EmbedField]:
    clipped = [
        msgspec.structs.replace(
            field,
            name=truncate_text(field.name, name_limit),
            value=truncate_text(field.value, value_limit),
        )
        for field in fields
    ]
    return [field for field in clipped if _has_text(field)]


def _clip_footer(footer: EmbedFooter | None, limit: int) -> EmbedFooter | None:
    if footer is None:
        return None
    return msgspec.structs.replace(footer, text=truncate_text(footer.text, limit))


def _clip_author(author: EmbedAuthor | None, limit: int) -> EmbedAuthor | None:
    if author is None:
        return None
    return msgspec.structs.replace(author, name=truncate_text(author.name, limit))


class MessageCompactor:
    """Enforce Discord's message limits on outbound notifications.

    Parameters
    ----------
    limits
        Limits to enforce; defaults to Discord's published ceilings.

    """

    def __init__(self, limits: DiscordLimits = DISCORD_LIMITS) -> None:
        """Initialise the compactor with the limits to enforce."""
        self._limits = limits

    @property
    def limits(self) -> DiscordLimits:
        """Limits applied by :meth:`compact`."""
        return self._limits

    def compact(self, message: NotificationMessage) -> NotificationMessage:
        """Return a copy of ``message`` that satisfies every limit.

        Parameters
        ----------
        message
            Message produced by the transformer.

        Returns
        -------
        NotificationMessage
            A new message; ``message`` itself is never modified.

        """
        limits = self._limits
        embeds = [
            self._clip_embed(embed) for embed in message.embeds[: limits.embeds]
        ]

        kept: list[Embed] = []
        total = 0
        for embed in embeds:
            size = embed_size(embed)
            if total + size <= limits.total:
                kept.append(embed)
                total += size
                continue
            shrunk = self._shrink_embed(embed, limits.total - total)
            if shrunk is None:
                break
            kept.append(shrunk)
            total += embed_size(shrunk)

        return msgspec.structs.replace(
            message,
            content=truncate_text(message.content, limits.content),
            embeds=tuple(kept),
        )

    def _clip_embed(self, embed: Embed) -> Embed:
        limits = self._limits
        fields = _clip_fields(embed.fields, limits.field_name, limits.field_value)
        return msgspec.structs.replace(
            embed,
            title=truncate_text(embed.title, limits.title),
            description=truncate_text(embed.description, limits.description),
            fields=tuple(fields[: limits.fields]),
            footer=_clip_footer(embed.footer, limits.footer),
            author=_clip_author(embed.author, limits.author_name),
        )

    def _shrink_embed(self, embed: Embed, budget: int) -> Embed | None:
        """Reduce ``embed`` to fit ``budget`` characters, or return ``None``."""
        if budget < _MIN_SHRINK_BUDGET:
            return None

        fields = embed.fields[:_SHRINK_MAX_FIELDS]
        if fields:
            per_field = int(budget * _SHRINK_FIELDS_SHARE / len(fields))
            fields = tuple(
                _clip_fields(
                    fields,
                    min(per_field // 2, _SHRINK_FIELD_NAME),
                    min(per_field, _SHRINK_FIELD_VALUE),
                )
            )

        shrunk = msgspec.structs.replace(
            embed,
            description=truncate_text(
                embed.description, int(budget * _SHRINK_DESCRIPTION_SHARE)
            ),
            fields=fields,
            footer=_clip_footer(embed.footer, _SHRINK_FOOTER),
        )
        if embed_size(shrunk) > budget:
            return None
        return shrunk
