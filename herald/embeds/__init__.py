"""Entity-to-message transformation for Linear events.

Public API
----------
EntityTransformer
    Builds a :class:`NotificationMessage` from an :class:`EventEnvelope`.
NotificationMessage, Embed, EmbedField, EmbedFooter, EmbedAuthor
    Immutable message models in Discord's webhook shape.
summary_line
    Plain-text one-line description of an event.
fallback_url
    Linear deep link derived from entity identifiers.
"""

from __future__ import annotations

from herald.embeds.links import fallback_url, resolve_url
from herald.embeds.models import (
    Embed,
    EmbedAuthor,
    EmbedField,
    EmbedFooter,
    NotificationMessage,
)
from herald.embeds.style import EmbedColor, Placeholder
from herald.embeds.summary import summary_line
from herald.embeds.transformer import EntityTransformer, build_embed

__all__ = [
    "Embed",
    "EmbedAuthor",
    "EmbedColor",
    "EmbedField",
    "EmbedFooter",
    "EntityTransformer",
    "NotificationMessage",
    "Placeholder",
    "build_embed",
    "fallback_url",
    "resolve_url",
    "summary_line",
]
