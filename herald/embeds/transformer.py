"""Turn decoded Linear events into Discord notification messages."""

from __future__ import annotations

import typing as typ

from herald.embeds.comment import comment_created, comment_removed, comment_updated
from herald.embeds.generic import generic_embed
from herald.embeds.issue import issue_created, issue_removed, issue_updated
from herald.embeds.links import resolve_url
from herald.embeds.models import NotificationMessage
from herald.embeds.summary import summary_line
from herald.linear.models import Action, CommentData, GenericEntity, IssueData

if typ.TYPE_CHECKING:
    from herald.embeds.models import Embed
    from herald.linear.models import EventEnvelope

__all__ = ["EntityTransformer", "build_embed"]

_EmbedBuilder = typ.Callable[["EventEnvelope", typ.Any, str], "Embed"]

_ISSUE_BUILDERS: dict[Action, _EmbedBuilder] = {
    Action.CREATE: issue_created,
    Action.UPDATE: issue_updated,
    Action.REMOVE: issue_removed,
}

_COMMENT_BUILDERS: dict[Action, _EmbedBuilder] = {
    Action.CREATE: comment_created,
    Action.UPDATE: comment_updated,
    Action.REMOVE: comment_removed,
}


def build_embed(envelope: EventEnvelope) -> Embed:
    """Build the embed for ``envelope``, dispatching on entity then action.

    Parameters
    ----------
    envelope
        Decoded event.

    Returns
    -------
    Embed
        The structured block describing the event.

    """
    url = resolve_url(envelope)
    match envelope.entity:
        case IssueData() as issue:
            return _ISSUE_BUILDERS[envelope.action](envelope, issue, url)
        case CommentData() as comment:
            return _COMMENT_BUILDERS[envelope.action](envelope, comment, url)
        case GenericEntity() as entity:
            return generic_embed(envelope, entity, url)
        case _:
            typ.assert_never(envelope.entity)


class EntityTransformer:
    """Build :class:`NotificationMessage` values from decoded events.

    Parameters
    ----------
    username
        Optional webhook display name stamped on every message.
    avatar_url
        Optional webhook avatar stamped on every message.

    Examples
    --------
    >>> transformer = EntityTransformer()
    >>> message = transformer.transform(envelope)
    >>> message.embeds[0].title
    'Issue Created: Fix login bug'

    """

    def __init__(
        self,
        *,
        username: str | None = None,
        avatar_url: str | None = None,
    ) -> None:
        """Initialise the transformer with optional identity overrides."""
        self._username = username
        self._avatar_url = avatar_url

    def transform(self, envelope: EventEnvelope) -> NotificationMessage:
        """Return the summary line plus a single embed for ``envelope``."""
        return NotificationMessage(
            content=summary_line(envelope),
            embeds=(build_embed(envelope),),
            username=self._username,
            avatar_url=self._avatar_url,
        )
