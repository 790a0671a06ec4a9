"""Fallback embed for entity types without a dedicated builder.

Projects, teams, cycles, labels and any entity type Linear adds in future all
render through here, so every structurally valid event yields a message.
"""

from __future__ import annotations

import typing as typ

from herald.embeds.models import Embed, EmbedField
from herald.embeds.style import Placeholder, action_color, clip, linear_footer

if typ.TYPE_CHECKING:
    from herald.linear.models import EventEnvelope, GenericEntity

__all__ = ["entity_display_name", "generic_embed"]

_DESCRIPTION_LIMIT = 2000


def entity_display_name(type_name: str, entity: GenericEntity) -> str:
    """Return the entity's name, ``<Type> <id>``, or a placeholder."""
    if entity.name:
        return entity.name
    if entity.id:
        return f"{type_name} {entity.id}"
    return str(Placeholder.UNKNOWN)


def generic_embed(envelope: EventEnvelope, entity: GenericEntity, url: str) -> Embed:
    """Build a ``{Type} {Action}d`` embed with name and type fields.

    Parameters
    ----------
    envelope
        Decoded event; supplies the action, raw type name and timestamp.
    entity
        Open mapping of the entity's fields.
    url
        Deep link for the embed title.

    Returns
    -------
    Embed
        Embed coloured by action.

    """
    type_name = envelope.type_name
    action = envelope.action
    description = entity.description
    if description:
        description = clip(description, _DESCRIPTION_LIMIT)
    else:
        description = f"{type_name} was {action.value}d in Linear."

    occurred = envelope.occurred_at.isoformat()
    return Embed(
        title=f"{type_name} {action.past_tense}",
        url=url,
        description=description,
        color=action_color(action),
        fields=(
            EmbedField(
                name="Name",
                value=entity_display_name(type_name, entity),
                inline=True,
            ),
            EmbedField(name="Type", value=type_name, inline=True),
        ),
        footer=linear_footer(f"Linear {type_name}", action.past_tense, occurred),
        timestamp=occurred,
    )
