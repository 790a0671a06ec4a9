"""Size and shape limits enforced by Discord's webhook API."""

from __future__ import annotations

import dataclasses as dc

__all__ = ["DISCORD_LIMITS", "DiscordLimits"]


@dc.dataclass(frozen=True, slots=True)
class DiscordLimits:
    """Character and count ceilings for one webhook message.

    Attributes
    ----------
    content
        Maximum length of the plain-text summary line.
    title, description, field_name, field_value, footer, author_name
        Maximum length of each embed text part.
    total
        Maximum combined length of all embed text in a message.
    embeds
        Maximum number of embeds per message.
    fields
        Maximum number of fields per embed.

    """

    content: int = 2000
    title: int = 256
    description: int = 4096
    field_name: int = 256
    field_value: int = 1024
    footer: int = 2048
    author_name: int = 256
    total: int = 6000
    embeds: int = 10
    fields: int = 25


DISCORD_LIMITS = DiscordLimits()
